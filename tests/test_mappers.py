from crm_manager.domain.models import (
    DocumentKind,
    EstimateStatus,
    InvoiceStatus,
    LineItem,
    PaymentMethod,
)
from crm_manager.repositories.mappers import (
    balance_from_row,
    estimate_from_row,
    invoice_from_row,
    line_item_from_row,
    line_item_to_record,
    payment_from_row,
)


def test_invoice_from_row_flattens_customer_and_parses_numbers():
    invoice = invoice_from_row(
        {
            "id": "inv-1",
            "invoice_number": "INV-0001",
            "customer_id": "c-1",
            "invoice_date": "2026-02-01",
            "due_date": "2026-03-01",
            "work_completed_date": "2026-01-30",
            "tech_name": "Sam",
            "notes": None,
            "status": "partial",
            "total_amount": "100.00",
            "amount_paid": "60.00",
            "amount_due": "40.00",
            "customers": {"name": "Jane Homeowner"},
        }
    )

    assert invoice.customer_name == "Jane Homeowner"
    assert invoice.status is InvoiceStatus.PARTIAL
    assert (invoice.total_amount, invoice.amount_paid, invoice.amount_due) == (100.0, 60.0, 40.0)
    assert invoice.number == "INV-0001"
    assert invoice.balance.amount_due == 40.0


def test_unknown_status_falls_back_to_draft():
    estimate = estimate_from_row(
        {
            "estimate_number": "EST-0001",
            "customer_id": "c-1",
            "estimate_date": "2026-02-01",
            "status": "archived",
            "total_amount": 0,
            "customers": None,
        }
    )

    assert estimate.status is EstimateStatus.DRAFT
    assert estimate.customer_name is None


def test_line_item_record_recomputes_total_and_uses_kind_foreign_key():
    item = LineItem(
        id=None,
        document_id="est-9",
        description="Replace valve",
        material_cost=40.0,
        labor_cost=85.0,
        total_cost=0.0,
        sort_order=2,
    )

    record = line_item_to_record(item, DocumentKind.ESTIMATE)

    assert record["estimate_id"] == "est-9"
    assert record["total_cost"] == 125.0
    assert "invoice_id" not in record


def test_line_item_from_row_without_stored_total():
    item = line_item_from_row(
        {"invoice_id": "inv-1", "description": "Labor", "material_cost": "", "labor_cost": "50"},
        DocumentKind.INVOICE,
    )

    assert item.document_id == "inv-1"
    assert item.total_cost == 50.0


def test_payment_from_row_flattens_nested_invoice():
    payment = payment_from_row(
        {
            "id": "p-1",
            "invoice_id": "inv-1",
            "payment_date": "2026-02-10",
            "amount": 60,
            "payment_method": "check",
            "crm_invoices": {
                "invoice_number": "INV-0001",
                "customers": {"name": "Jane Homeowner"},
            },
        }
    )

    assert payment.payment_method is PaymentMethod.CHECK
    assert payment.invoice_number == "INV-0001"
    assert payment.customer_name == "Jane Homeowner"


def test_balance_from_row():
    balance = balance_from_row(
        {"total_amount": 100, "amount_paid": None, "amount_due": 100, "status": "sent"}
    )

    assert balance.amount_paid == 0.0
    assert balance.status is InvoiceStatus.SENT
