import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from crm_manager.config import LOGO_URL_ENV
from crm_manager.domain.models import (
    Customer,
    DocumentBundle,
    DocumentKind,
    Estimate,
    EstimateStatus,
    Invoice,
    InvoiceStatus,
    LineItem,
    Payment,
    PaymentMethod,
)
from crm_manager.utils.pdf_generator import (
    PdfLayout,
    _draw_line_items,
    _format_date,
    _totals_rows,
    generate_document_pdf,
    load_logo,
    render_document,
    resolve_logo_url,
)


def _items(count):
    return [
        LineItem(
            id=f"li-{n}",
            document_id="doc-1",
            description=f"Task {n}: flush lines and check every fitting for slow leaks",
            material_cost=10.0,
            labor_cost=5.0,
            total_cost=15.0,
            sort_order=n,
        )
        for n in range(count)
    ]


def _invoice_bundle(item_count=2, payments=None):
    invoice = Invoice(
        id="inv-1",
        invoice_number="INV-0007",
        customer_id="c-1",
        invoice_date="2026-02-01",
        due_date="2026-03-03",
        work_completed_date="2026-01-30",
        tech_name="Sam",
        notes="Replaced the water heater.\nHauled away the old unit.",
        status=InvoiceStatus.PARTIAL,
        total_amount=15.0 * item_count,
        amount_paid=10.0,
        amount_due=15.0 * item_count - 10.0,
    )
    return DocumentBundle(
        kind=DocumentKind.INVOICE,
        document=invoice,
        customer=Customer(
            id="c-1",
            name="Jane Homeowner",
            phone="555-0100",
            address="12 Elm Street\nSpringfield",
        ),
        items=_items(item_count),
        payments=payments or [],
    )


def _estimate_bundle():
    estimate = Estimate(
        id="est-1",
        estimate_number="EST-0003",
        customer_id="c-1",
        estimate_date="2026-02-01",
        expiry_date=None,
        tech_name="Sam",
        notes=None,
        status=EstimateStatus.DRAFT,
        total_amount=100.0,
    )
    return DocumentBundle(
        kind=DocumentKind.ESTIMATE,
        document=estimate,
        customer=Customer(id="c-1", name="Jane Homeowner"),
        items=_items(1),
    )


def _canvas():
    return canvas.Canvas(io.BytesIO(), pagesize=letter)


def test_ensure_space_breaks_page_and_resets_cursor():
    layout = PdfLayout(_canvas())

    assert layout.ensure_space(10) is False
    layout.y = 700
    assert layout.ensure_space(50) is True
    assert layout.y == layout.margin
    assert layout.page_count == 2


def test_wrap_keeps_blank_lines():
    layout = PdfLayout(_canvas())

    assert layout.wrap("", 100) == [""]
    assert len(layout.wrap("first\n\nthird", 200)) == 3
    assert len(layout.wrap("word " * 60, 100)) > 1


def test_long_invoice_continues_on_new_pages():
    payment = Payment(
        id="p-1",
        invoice_id="inv-1",
        payment_date="2026-02-10",
        amount=10.0,
        payment_method=PaymentMethod.CHECK,
        reference_number="1042",
    )

    short = render_document(_canvas(), _invoice_bundle(payments=[payment]))
    long = render_document(_canvas(), _invoice_bundle(item_count=60, payments=[payment]))

    assert short.page_count <= 2
    assert long.page_count > short.page_count
    for layout in (short, long):
        assert layout.y < layout.page_height - layout.bottom_reserve


def test_totals_rows():
    assert _totals_rows(_invoice_bundle(), 0.0) == [
        ("TOTAL", 30.0),
        ("PAID", 10.0),
        ("BALANCE DUE", 20.0),
    ]
    assert _totals_rows(_estimate_bundle(), 0.08) == [
        ("SUBTOTAL", 100.0),
        ("TAX", pytest.approx(8.0)),
        ("TOTAL", pytest.approx(108.0)),
    ]


def test_format_date():
    assert _format_date("2026-02-01") == "02/01/2026"
    assert _format_date("2026-02-01T10:00:00+00:00") == "02/01/2026"
    assert _format_date(None) == "-"
    assert _format_date("soon") == "soon"


def test_missing_logo_falls_back_to_name(tmp_path):
    assert load_logo(None) is None
    assert load_logo(str(tmp_path / "missing.png")) is None


def test_logo_url_from_environment(monkeypatch):
    monkeypatch.setenv(LOGO_URL_ENV, " https://example.com/logo.png ")
    assert resolve_logo_url() == "https://example.com/logo.png"

    monkeypatch.delenv(LOGO_URL_ENV)
    assert resolve_logo_url() is None


def test_generate_document_pdf_writes_file(tmp_path, monkeypatch):
    monkeypatch.delenv(LOGO_URL_ENV, raising=False)
    target = tmp_path / "pdfs" / "estimate-EST-0003.pdf"

    result = generate_document_pdf(_estimate_bundle(), target)

    assert result == target
    assert target.read_bytes().startswith(b"%PDF")


def test_tall_line_item_continues_on_next_page():
    steps = [f"Step {n}: check the joint" for n in range(60)]
    bundle = _invoice_bundle(item_count=1)
    bundle.items[0].description = "\n".join(steps)
    layout = PdfLayout(_canvas())
    layout.y = 500
    limit = layout.page_height - layout.bottom_reserve
    drawn = []
    draw_text = layout.text

    def record(x, y, value, **kwargs):
        drawn.append((y, value))
        draw_text(x, y, value, **kwargs)

    layout.text = record
    _draw_line_items(layout, bundle)

    assert layout.page_count == 3
    assert all(y <= limit for y, _ in drawn)
    assert [value for _, value in drawn if value.startswith("Step")] == steps
    assert layout.y <= limit
