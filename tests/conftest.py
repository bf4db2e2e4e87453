"""In-memory stand-in for the supabase query builder used by the repositories."""

from __future__ import annotations

import copy
import itertools
import uuid
from types import SimpleNamespace
from typing import Any, Callable, Optional

import pytest
from postgrest.exceptions import APIError

from crm_manager.repositories import CustomerRepo

UNIQUE_COLUMNS = {
    "estimates": "estimate_number",
    "crm_invoices": "invoice_number",
}

EMBED_KEYS = {
    "customers": "customer_id",
    "crm_invoices": "invoice_id",
}

CASCADES = {
    "estimates": [("estimate_line_items", "estimate_id")],
    "crm_invoices": [
        ("crm_invoice_line_items", "invoice_id"),
        ("payments", "invoice_id"),
    ],
}


def unique_violation(column: str) -> APIError:
    return APIError(
        {
            "message": f'duplicate key value violates unique constraint "{column}_key"',
            "code": "23505",
            "hint": None,
            "details": None,
        }
    )


def _split_columns(columns: str) -> list[str]:
    parts, depth, current = [], 0, ""
    for char in columns:
        if char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        depth += char == "("
        depth -= char == ")"
        current += char
    if current.strip():
        parts.append(current.strip())
    return parts


class FakeQuery:
    def __init__(self, client: "FakeSupabaseClient", table: str) -> None:
        self._client = client
        self._table = table
        self._operation = "select"
        self._columns = "*"
        self._count: Optional[str] = None
        self._payload: Any = None
        self._filters: list[Callable[[dict], bool]] = []
        self._orders: list[tuple[str, bool]] = []
        self._limit: Optional[int] = None

    def select(self, columns: str = "*", count: Optional[str] = None) -> "FakeQuery":
        self._columns = columns
        self._count = count
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self._operation = "insert"
        self._payload = payload
        return self

    def update(self, payload: dict) -> "FakeQuery":
        self._operation = "update"
        self._payload = payload
        return self

    def delete(self) -> "FakeQuery":
        self._operation = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(lambda row: row.get(column) != value)
        return self

    def ilike(self, column: str, pattern: str) -> "FakeQuery":
        needle = pattern.strip("%").lower()
        self._filters.append(lambda row: needle in str(row.get(column) or "").lower())
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._orders.append((column, desc))
        return self

    def limit(self, size: int) -> "FakeQuery":
        self._limit = size
        return self

    def execute(self) -> SimpleNamespace:
        self._client.calls.append((self._table, self._operation))
        self._client.run_hooks(self._table, self._operation, self)
        handler = getattr(self, f"_execute_{self._operation}")
        return handler()

    def _matching(self) -> list[dict]:
        rows = self._client.tables.setdefault(self._table, [])
        return [row for row in rows if all(check(row) for check in self._filters)]

    def _execute_select(self) -> SimpleNamespace:
        rows = self._matching()
        for column, desc in reversed(self._orders):
            rows.sort(key=lambda row: (row.get(column) is None, row.get(column)), reverse=desc)
        count = len(rows) if self._count else None
        if self._limit is not None:
            rows = rows[: self._limit]
        data = [self._client.project(self._table, row, self._columns) for row in rows]
        return SimpleNamespace(data=data, count=count)

    def _execute_insert(self) -> SimpleNamespace:
        records = self._payload if isinstance(self._payload, list) else [self._payload]
        rows = self._client.tables.setdefault(self._table, [])
        unique = UNIQUE_COLUMNS.get(self._table)
        created = []
        for record in records:
            if unique and any(row.get(unique) == record.get(unique) for row in rows):
                raise unique_violation(unique)
            row = copy.deepcopy(record)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", self._client.next_timestamp())
            created.append(row)
        rows.extend(created)
        return SimpleNamespace(data=copy.deepcopy(created), count=None)

    def _execute_update(self) -> SimpleNamespace:
        rows = self._matching()
        for row in rows:
            row.update(copy.deepcopy(self._payload))
        return SimpleNamespace(data=copy.deepcopy(rows), count=None)

    def _execute_delete(self) -> SimpleNamespace:
        removed = self._matching()
        table_rows = self._client.tables.setdefault(self._table, [])
        self._client.tables[self._table] = [row for row in table_rows if row not in removed]
        for child_table, foreign_key in CASCADES.get(self._table, []):
            ids = {row["id"] for row in removed}
            children = self._client.tables.setdefault(child_table, [])
            self._client.tables[child_table] = [
                row for row in children if row.get(foreign_key) not in ids
            ]
        return SimpleNamespace(data=copy.deepcopy(removed), count=None)


class FakeSupabaseClient:
    """Just enough of ``supabase.Client`` for the repositories."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict]] = {}
        self.calls: list[tuple[str, str]] = []
        self._hooks: list[Callable[[str, str, FakeQuery], None]] = []
        self._clock = itertools.count(1)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def next_timestamp(self) -> str:
        return f"2026-01-01T00:00:00.{next(self._clock):06d}+00:00"

    def add_hook(self, hook: Callable[[str, str, FakeQuery], None]) -> None:
        """Run ``hook(table, operation, query)`` before every execute."""
        self._hooks.append(hook)

    def remove_hook(self, hook: Callable[[str, str, FakeQuery], None]) -> None:
        self._hooks.remove(hook)

    def run_hooks(self, table: str, operation: str, query: FakeQuery) -> None:
        for hook in list(self._hooks):
            hook(table, operation, query)

    def fail_next(self, table: str, operation: str, exc: Exception) -> None:
        """Raise ``exc`` on the next ``operation`` against ``table``."""

        def hook(hook_table: str, hook_operation: str, _query: FakeQuery) -> None:
            if hook_table == table and hook_operation == operation:
                self._hooks.remove(hook)
                raise exc

        self.add_hook(hook)

    def project(self, table: str, row: dict, columns: str) -> dict:
        result: dict[str, Any] = {}
        for column in _split_columns(columns):
            if column == "*":
                result.update(copy.deepcopy(row))
            elif "(" in column:
                name, inner = column.split("(", 1)
                name = name.strip()
                related_id = row.get(EMBED_KEYS[name])
                related = next(
                    (r for r in self.tables.get(name, []) if r["id"] == related_id),
                    None,
                )
                result[name] = (
                    self.project(name, related, inner[:-1]) if related else None
                )
            else:
                result[column] = copy.deepcopy(row.get(column))
        return result


@pytest.fixture
def client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def customer(client):
    return CustomerRepo(client).create(
        name="Jane Homeowner",
        email="jane@example.com",
        phone="555-0100",
        address="12 Elm Street\nSpringfield",
    )
