import pytest

from crm_manager.utils.money import format_currency, grand_total, line_total, parse_amount


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("10", 10.0),
        ("2.5", 2.5),
        ("", 0.0),
        (None, 0.0),
        ("abc", 0.0),
        ("$1,250.75", 1250.75),
        (7, 7.0),
        (float("nan"), 0.0),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


def test_grand_total_treats_blank_input_as_zero():
    items = [
        {"material_cost": "10", "labor_cost": "5"},
        {"material_cost": "", "labor_cost": "2.5"},
    ]
    assert grand_total(items) == pytest.approx(17.5)
    assert format_currency(grand_total(items)) == "$17.50"


def test_grand_total_accepts_objects():
    class Item:
        material_cost = 3
        labor_cost = "4.25"

    assert grand_total([Item(), Item()]) == pytest.approx(14.5)


def test_line_total():
    assert line_total("12.10", "0.20") == pytest.approx(12.3)
    assert line_total("x", None) == 0.0


def test_format_currency():
    assert format_currency(12.3) == "$12.30"
    assert format_currency(0) == "$0.00"
    assert format_currency(-5) == "-$5.00"
    assert format_currency("oops") == "$0.00"
