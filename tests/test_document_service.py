from datetime import date

import pytest

from crm_manager.domain.models import DocumentKind, EstimateStatus, InvoiceStatus
from crm_manager.services.document_service import DocumentService, LineItemDraft
from crm_manager.services.errors import NotFoundError, ValidationError


@pytest.fixture
def service(client):
    return DocumentService(client)


def _create_invoice(service, customer, number="INV-0001", items=None, **overrides):
    params = dict(
        invoice_number=number,
        customer_id=customer.id,
        invoice_date="2026-02-01",
        due_date="2026-03-03",
        work_completed_date="2026-01-30",
        tech_name="Sam",
        notes="Replaced water heater",
        items=items
        if items is not None
        else [
            LineItemDraft("Water heater", "10", "5"),
            LineItemDraft("Haul away", "", "2.5"),
        ],
        status=InvoiceStatus.SENT,
    )
    params.update(overrides)
    return service.create_invoice(**params)


def test_create_invoice_writes_header_and_items(client, service, customer):
    bundle = _create_invoice(service, customer)

    invoice = bundle.document
    assert invoice.total_amount == pytest.approx(17.5)
    assert invoice.amount_paid == 0
    assert invoice.amount_due == pytest.approx(17.5)
    assert bundle.customer.name == "Jane Homeowner"
    assert [item.sort_order for item in bundle.items] == [0, 1]
    assert [item.total_cost for item in bundle.items] == [15.0, 2.5]
    assert len(client.tables["crm_invoice_line_items"]) == 2


def test_create_estimate_without_expiry(client, service, customer):
    bundle = service.create_estimate(
        estimate_number="EST-0001",
        customer_id=customer.id,
        estimate_date="2026-02-01",
        expiry_date="",
        tech_name="Sam",
        notes=None,
        items=[LineItemDraft("Inspection", "0", "75")],
    )

    assert bundle.kind is DocumentKind.ESTIMATE
    assert bundle.document.status is EstimateStatus.DRAFT
    assert bundle.document.expiry_date is None
    assert client.tables["estimate_line_items"][0]["estimate_id"] == bundle.document.id


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"tech_name": "  "}, "Technician"),
        ({"customer_id": ""}, "customer"),
        ({"items": []}, "line item"),
        ({"due_date": None}, "Due date"),
        ({"invoice_date": "31/02/2026"}, "not a valid date"),
        ({"status": "archived"}, "status"),
    ],
)
def test_validation_happens_before_any_write(client, service, customer, overrides, message):
    with pytest.raises(ValidationError, match=message):
        _create_invoice(service, customer, **overrides)

    assert client.tables.get("crm_invoices", []) == []


def test_line_item_without_description_is_rejected(service, customer):
    with pytest.raises(ValidationError, match="Line item 2"):
        _create_invoice(
            service,
            customer,
            items=[LineItemDraft("Valve", "1", "1"), LineItemDraft(" ", "5", "")],
        )


def test_failed_line_items_remove_the_header(client, service, customer):
    client.fail_next("crm_invoice_line_items", "insert", RuntimeError("timeout"))

    with pytest.raises(RuntimeError, match="timeout"):
        _create_invoice(service, customer)

    assert client.tables["crm_invoices"] == []
    assert ("crm_invoices", "delete") in client.calls


def test_original_error_survives_failed_compensation(client, service, customer):
    client.fail_next("crm_invoice_line_items", "insert", RuntimeError("timeout"))
    client.fail_next("crm_invoices", "delete", RuntimeError("still offline"))

    with pytest.raises(RuntimeError, match="timeout"):
        _create_invoice(service, customer)

    assert len(client.tables["crm_invoices"]) == 1


def test_taken_number_is_regenerated(client, service, customer):
    _create_invoice(service, customer, number="INV-0001")

    bundle = _create_invoice(service, customer, number="INV-0001")

    assert bundle.document.number == "INV-0002"
    assert sorted(row["invoice_number"] for row in client.tables["crm_invoices"]) == [
        "INV-0001",
        "INV-0002",
    ]


def test_number_retry_gives_up(client, service, customer):
    def competing_writer(table, operation, query):
        # another session saves the same number just before us
        if table == "crm_invoices" and operation == "insert":
            row = dict(query._payload, id=f"other-{len(client.calls)}")
            row["created_at"] = client.next_timestamp()
            client.tables.setdefault(table, []).append(row)

    client.add_hook(competing_writer)

    with pytest.raises(Exception) as excinfo:
        _create_invoice(service, customer)

    assert getattr(excinfo.value, "code", None) == "23505"
    assert client.calls.count(("crm_invoices", "insert")) == 3


def test_set_status_allows_any_transition(client, service, customer):
    invoice = _create_invoice(service, customer).document

    service.set_status(DocumentKind.INVOICE, invoice.id, "paid")
    service.set_status(DocumentKind.INVOICE, invoice.id, InvoiceStatus.DRAFT)

    row = client.tables["crm_invoices"][0]
    assert row["status"] == "draft"
    assert row["updated_at"]


def test_set_status_rejects_unknown_values(service, customer):
    invoice = _create_invoice(service, customer).document

    with pytest.raises(ValidationError):
        service.set_status(DocumentKind.INVOICE, invoice.id, "approved")
    with pytest.raises(NotFoundError):
        service.set_status(DocumentKind.INVOICE, "missing", "paid")


def test_delete_document_removes_items(client, service, customer):
    invoice = _create_invoice(service, customer).document

    service.delete_document(DocumentKind.INVOICE, invoice.id)

    assert client.tables["crm_invoices"] == []
    assert client.tables["crm_invoice_line_items"] == []
    with pytest.raises(NotFoundError):
        service.delete_document(DocumentKind.INVOICE, invoice.id)


def test_load_bundle(service, customer):
    invoice = _create_invoice(service, customer).document

    bundle = service.load_bundle(DocumentKind.INVOICE, invoice.id)

    assert bundle.document.customer_name == "Jane Homeowner"
    assert [item.description for item in bundle.items] == ["Water heater", "Haul away"]
    assert bundle.payments == []
    with pytest.raises(NotFoundError):
        service.load_bundle(DocumentKind.ESTIMATE, invoice.id)


def test_dates_are_stored_as_iso_days(client, service, customer):
    _create_invoice(
        service, customer, invoice_date="2026-02-01T09:30:00", due_date=date(2026, 3, 3)
    )

    row = client.tables["crm_invoices"][0]
    assert (row["invoice_date"], row["due_date"]) == ("2026-02-01", "2026-03-03")


def test_header_rows_hold_only_document_columns(client, service, customer):
    _create_invoice(service, customer, notes="")
    service.create_estimate(
        estimate_number="EST-0001",
        customer_id=customer.id,
        estimate_date="2026-02-01",
        expiry_date=None,
        tech_name="  Sam ",
        notes=None,
        items=[LineItemDraft("Inspection", "0", "75")],
    )

    invoice_row = client.tables["crm_invoices"][0]
    assert invoice_row["status"] == "sent"
    assert invoice_row["notes"] is None
    assert (invoice_row["amount_paid"], invoice_row["amount_due"]) == (0.0, 17.5)
    assert "id" in invoice_row and "customer_name" not in invoice_row

    estimate_row = client.tables["estimates"][0]
    assert estimate_row["status"] == "draft"
    assert estimate_row["tech_name"] == "Sam"
    assert estimate_row["expiry_date"] is None
    assert "amount_paid" not in estimate_row
