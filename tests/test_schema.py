import re

import pytest

from crm_manager.db.schema import ALL_TABLES, SCHEMA_SQL
from crm_manager.domain.models import EstimateStatus, InvoiceStatus, PaymentMethod


def _table_body(name):
    match = re.search(rf"CREATE TABLE IF NOT EXISTS {name} \((.*?)\n\);", SCHEMA_SQL, re.S)
    assert match, name
    return match.group(1)


@pytest.mark.parametrize("table", ALL_TABLES)
def test_every_table_is_provisioned(table):
    assert "id uuid PRIMARY KEY" in _table_body(table)


def test_document_numbers_are_unique():
    assert "estimate_number text NOT NULL UNIQUE" in _table_body("estimates")
    assert "invoice_number text NOT NULL UNIQUE" in _table_body("crm_invoices")


@pytest.mark.parametrize(
    "table, enum",
    [
        ("estimates", EstimateStatus),
        ("crm_invoices", InvoiceStatus),
        ("payments", PaymentMethod),
    ],
)
def test_check_constraints_match_enums(table, enum):
    body = _table_body(table)
    for member in enum:
        assert f"'{member.value}'" in body
