"""Currency parsing, line totals and formatting."""

from __future__ import annotations

import math
from typing import Any, Iterable


def parse_amount(value: Any) -> float:
    """Return ``value`` as a float, treating empty or non-numeric input as zero."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace("$", "").replace(",", "")
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def line_total(material_cost: Any, labor_cost: Any) -> float:
    return parse_amount(material_cost) + parse_amount(labor_cost)


def grand_total(items: Iterable[Any]) -> float:
    """Sum material + labor over line items.

    Items may be mappings with ``material_cost``/``labor_cost`` keys (form
    drafts) or objects exposing the same attributes (``LineItem``).
    """
    total = 0.0
    for item in items:
        if isinstance(item, dict):
            total += line_total(item.get("material_cost"), item.get("labor_cost"))
        else:
            total += line_total(
                getattr(item, "material_cost", None),
                getattr(item, "labor_cost", None),
            )
    return total


def format_currency(value: Any) -> str:
    amount = parse_amount(value)
    if amount < 0 and round(amount, 2) != 0:
        return f"-${abs(amount):.2f}"
    return f"${abs(amount):.2f}"
