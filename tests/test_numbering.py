import pytest

from crm_manager.domain.models import DocumentKind
from crm_manager.repositories import EstimateRepo, InvoiceRepo
from crm_manager.services.numbering import (
    NumberingService,
    first_document_number,
    next_document_number,
)


@pytest.mark.parametrize(
    "last, expected",
    [
        ("EST-0042", "EST-0043"),
        (None, "EST-0001"),
        ("", "EST-0001"),
        ("X", "EST-0001"),
        ("EST-0999", "EST-1000"),
        ("EST-9999", "EST-10000"),
        ("XEST-0042Y", "EST-0043"),
    ],
)
def test_next_document_number(last, expected):
    assert next_document_number(last, "EST") == expected


def test_prefixes_do_not_mix():
    assert next_document_number("INV-0007", "EST") == "EST-0001"
    assert first_document_number("INV") == "INV-0001"


def _numbering(client):
    return NumberingService(
        {
            DocumentKind.ESTIMATE: EstimateRepo(client),
            DocumentKind.INVOICE: InvoiceRepo(client),
        }
    )


def test_next_number_reads_most_recent_row(client, customer):
    repo = EstimateRepo(client)
    for number in ("EST-0005", "EST-0002"):
        repo.insert(
            {
                "estimate_number": number,
                "customer_id": customer.id,
                "estimate_date": "2026-03-01",
                "tech_name": "Sam",
                "status": "draft",
                "total_amount": 0,
            }
        )

    numbering = _numbering(client)

    # most recently created wins, not the numerically largest
    assert numbering.next_number(DocumentKind.ESTIMATE) == "EST-0003"
    assert numbering.next_number(DocumentKind.INVOICE) == "INV-0001"


def test_suggest_number_falls_back_on_fetch_error(client):
    client.fail_next("crm_invoices", "select", RuntimeError("offline"))

    assert _numbering(client).suggest_number(DocumentKind.INVOICE) == "INV-0001"
