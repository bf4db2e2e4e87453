from crm_manager.domain.models import InvoiceBalance, InvoiceStatus, LineItem
from crm_manager.repositories import CustomerRepo, EstimateRepo, InvoiceRepo


def _invoice_record(customer_id, number="INV-0001", **overrides):
    record = {
        "invoice_number": number,
        "customer_id": customer_id,
        "invoice_date": "2026-02-01",
        "due_date": "2026-03-01",
        "work_completed_date": "2026-01-30",
        "tech_name": "Sam",
        "notes": None,
        "status": "sent",
        "total_amount": 100.0,
        "amount_paid": 0.0,
        "amount_due": 100.0,
    }
    record.update(overrides)
    return record


def test_customer_crud_and_search(client):
    repo = CustomerRepo(client)
    bob = repo.create(name="Bob Builder", phone="555-0101")
    repo.create(name="Alice Plumber")

    assert [c.name for c in repo.list_all()] == ["Alice Plumber", "Bob Builder"]
    assert [c.name for c in repo.search_by_name("bob")] == ["Bob Builder"]
    assert repo.count() == 2

    updated = repo.update(bob.id, name="Robert Builder", email="rb@example.com")
    assert updated.email == "rb@example.com"
    assert updated.updated_at is not None
    assert repo.get_by_id(bob.id).name == "Robert Builder"

    assert repo.delete(bob.id) is True
    assert repo.delete(bob.id) is False
    assert repo.update("missing", name="Nobody") is None


def test_document_get_by_id_includes_customer_name(client, customer):
    repo = InvoiceRepo(client)
    invoice = repo.insert(_invoice_record(customer.id))

    fetched = repo.get_by_id(invoice.id)

    assert fetched.customer_name == "Jane Homeowner"
    assert repo.get_by_id("missing") is None


def test_line_items_keep_position_order(client, customer):
    repo = EstimateRepo(client)
    estimate = repo.insert(
        {
            "estimate_number": "EST-0001",
            "customer_id": customer.id,
            "estimate_date": "2026-02-01",
            "tech_name": "Sam",
            "status": "draft",
            "total_amount": 30.0,
        }
    )
    items = [
        LineItem(None, None, f"Step {n}", float(n), 0.0, 0.0) for n in range(3, 0, -1)
    ]

    repo.insert_line_items(estimate.id, items)
    stored = repo.list_line_items(estimate.id)

    assert [i.description for i in stored] == ["Step 3", "Step 2", "Step 1"]
    assert [i.sort_order for i in stored] == [0, 1, 2]
    assert stored[0].total_cost == 3.0
    assert repo.delete_line_items(estimate.id) == 3


def test_list_open_excludes_paid_and_cancelled(client, customer):
    repo = InvoiceRepo(client)
    repo.insert(_invoice_record(customer.id, "INV-0001", status="paid"))
    repo.insert(_invoice_record(customer.id, "INV-0002", status="cancelled"))
    repo.insert(_invoice_record(customer.id, "INV-0003", status="partial"))
    repo.insert(_invoice_record(customer.id, "INV-0004", status="draft"))

    assert [i.number for i in repo.list_open()] == ["INV-0003", "INV-0004"]


def test_update_balance_is_conditional_on_amount_paid(client, customer):
    repo = InvoiceRepo(client)
    invoice = repo.insert(_invoice_record(customer.id))
    new_balance = InvoiceBalance(100.0, 60.0, 40.0, InvoiceStatus.PARTIAL)

    assert repo.update_balance(invoice.id, new_balance, expected_paid=25.0) is False
    assert repo.get_balance(invoice.id).amount_paid == 0.0

    assert repo.update_balance(invoice.id, new_balance, expected_paid=0.0) is True
    stored = repo.get_balance(invoice.id)
    assert (stored.amount_paid, stored.amount_due, stored.status) == (
        60.0,
        40.0,
        InvoiceStatus.PARTIAL,
    )


def test_get_totals_sums_every_invoice(client, customer):
    repo = InvoiceRepo(client)
    for n in range(1, 8):
        repo.insert(
            _invoice_record(
                customer.id, f"INV-{n:04d}", total_amount=10.0, amount_paid=4.0, amount_due=6.0
            )
        )

    assert repo.get_totals() == (70.0, 28.0, 42.0)
    assert repo.count() == 7
