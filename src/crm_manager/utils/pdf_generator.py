"""PDF generation for estimates and invoices."""

from __future__ import annotations

import io
import os
import socket
import urllib.error
import urllib.request
from pathlib import Path
from typing import Optional

from dateutil import parser
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from crm_manager.config import (
    ESTIMATE_TAX_RATE,
    LOGO_FETCH_TIMEOUT,
    LOGO_URL,
    LOGO_URL_ENV,
    PDF_ISSUER,
    PdfIssuerInfo,
)
from crm_manager.domain.models import DocumentBundle, DocumentKind
from crm_manager.logging_config import get_logger
from crm_manager.utils.money import format_currency

PAGE_WIDTH, PAGE_HEIGHT = letter
MARGIN = 40
BOTTOM_RESERVE = 140
LINE_HEIGHT = 14
BAND_HEIGHT = 18

BLUE = colors.Color(30 / 255, 80 / 255, 160 / 255)
LIGHT_GRAY = colors.Color(240 / 255, 240 / 255, 240 / 255)
BORDER_GRAY = colors.Color(180 / 255, 180 / 255, 180 / 255)
ROW_GRAY = colors.Color(200 / 255, 200 / 255, 200 / 255)

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"


def _format_date(value: str | None) -> str:
    if not value:
        return "-"
    try:
        return parser.isoparse(value).strftime("%m/%d/%Y")
    except ValueError:
        return value


class PdfLayout:
    """Single-pass placement on a canvas driven by one vertical cursor.

    ``y`` grows downward from the top edge; drawing helpers convert to
    reportlab's bottom-left origin.
    """

    def __init__(
        self,
        pdf: canvas.Canvas,
        *,
        page_width: float = PAGE_WIDTH,
        page_height: float = PAGE_HEIGHT,
        margin: float = MARGIN,
        bottom_reserve: float = BOTTOM_RESERVE,
    ) -> None:
        self.pdf = pdf
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.bottom_reserve = bottom_reserve
        self.y: float = margin
        self.page_count = 1

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    def ensure_space(self, needed: float) -> bool:
        """Start a new page if ``needed`` points do not fit above the reserve."""
        if self.y + needed > self.page_height - self.bottom_reserve:
            self.pdf.showPage()
            self.page_count += 1
            self.y = self.margin
            return True
        return False

    def text(
        self,
        x: float,
        y: float,
        value: str,
        *,
        font: str = FONT,
        size: float = 9,
        color: colors.Color = colors.black,
        align: str = "left",
    ) -> None:
        self.pdf.setFont(font, size)
        self.pdf.setFillColor(color)
        baseline = self.page_height - y
        if align == "right":
            self.pdf.drawRightString(x, baseline, value)
        elif align == "center":
            self.pdf.drawCentredString(x, baseline, value)
        else:
            self.pdf.drawString(x, baseline, value)

    def fill_rect(self, x: float, y: float, width: float, height: float, color) -> None:
        self.pdf.setFillColor(color)
        self.pdf.rect(x, self.page_height - y - height, width, height, stroke=0, fill=1)

    def stroke_rect(
        self, x: float, y: float, width: float, height: float, color=BORDER_GRAY
    ) -> None:
        self.pdf.setStrokeColor(color)
        self.pdf.rect(x, self.page_height - y - height, width, height, stroke=1, fill=0)

    def line(self, x1: float, y1: float, x2: float, y2: float, color=colors.black) -> None:
        self.pdf.setStrokeColor(color)
        self.pdf.line(x1, self.page_height - y1, x2, self.page_height - y2)

    def wrap(self, value: str, width: float, *, font: str = FONT, size: float = 9) -> list[str]:
        lines: list[str] = []
        for paragraph in (value or "").splitlines() or [""]:
            lines.extend(simpleSplit(paragraph, font, size, width) or [""])
        return lines or [""]


def resolve_logo_url() -> Optional[str]:
    value = os.environ.get(LOGO_URL_ENV, "").strip()
    return value or LOGO_URL


def load_logo(source: Optional[str]) -> Optional[ImageReader]:
    """Load the header logo from a URL or a local path; None when unavailable."""
    if not source:
        return None
    logger = get_logger(__name__)
    try:
        if source.startswith(("http://", "https://")):
            request = urllib.request.Request(
                source, headers={"User-Agent": "CRMManager-PDF"}
            )
            with urllib.request.urlopen(request, timeout=LOGO_FETCH_TIMEOUT) as response:
                payload = response.read()
            return ImageReader(io.BytesIO(payload))
        return ImageReader(source)
    except (urllib.error.URLError, socket.timeout, OSError):
        logger.warning("Logo not loaded from %s, using company name", source, exc_info=True)
        return None


def _draw_header(
    layout: PdfLayout,
    bundle: DocumentBundle,
    issuer: PdfIssuerInfo,
    logo: Optional[ImageReader],
) -> None:
    document = bundle.document
    m = layout.margin
    top = layout.y

    if logo is not None:
        layout.pdf.drawImage(
            logo,
            m,
            layout.page_height - (top - 8) - 55,
            width=210,
            height=55,
            preserveAspectRatio=True,
            anchor="sw",
            mask="auto",
        )
    else:
        layout.text(m, top + 20, issuer.name, font=FONT_BOLD, size=18)

    info_y = top + 60
    layout.text(m, info_y, f"Phone: {issuer.phone}")
    layout.text(m, info_y + 12, f"Email: {issuer.email}")
    layout.text(m, info_y + 24, f"Website: {issuer.website}")

    box_w = 220
    box_x = layout.page_width - m - box_w
    title = bundle.kind.value.upper()
    layout.text(box_x + box_w / 2, top + 18, title, font=FONT_BOLD, size=16, align="center")

    if bundle.kind is DocumentKind.INVOICE:
        last_label, last_value = "DUE DATE", _format_date(document.due_date)
    else:
        last_label, last_value = "EXPIRES", _format_date(document.expiry_date)
    bands = [
        (f"{title} #", document.number, BLUE, colors.white),
        ("DATE", _format_date(document.document_date), LIGHT_GRAY, colors.black),
        (last_label, last_value, BLUE, colors.white),
    ]
    band_y = top + 26
    for label, value, fill, ink in bands:
        layout.fill_rect(box_x, band_y, box_w, BAND_HEIGHT, fill)
        layout.text(box_x + 10, band_y + 13, label, font=FONT_BOLD, size=10, color=ink)
        layout.text(
            box_x + box_w - 10, band_y + 13, value or "-", size=10, color=ink, align="right"
        )
        band_y += BAND_HEIGHT

    layout.y = info_y + 45


def _draw_section_band(layout: PdfLayout, x: float, width: float, title: str) -> None:
    layout.fill_rect(x, layout.y, width, BAND_HEIGHT, BLUE)
    layout.text(x + 10, layout.y + 13, title, font=FONT_BOLD, size=10, color=colors.white)


def _draw_party_boxes(layout: PdfLayout, bundle: DocumentBundle) -> None:
    m = layout.margin
    box_h = 110
    gap = 12
    box_w = (layout.content_width - gap) / 2
    bill_x = m
    job_x = m + box_w + gap
    y = layout.y
    customer = bundle.customer
    document = bundle.document

    layout.stroke_rect(bill_x, y, box_w, box_h)
    _draw_section_band(layout, bill_x, box_w, "BILL TO")
    by = y + BAND_HEIGHT + 16
    layout.text(bill_x + 10, by, customer.name or "")
    by += 12
    if customer.address:
        for line in layout.wrap(customer.address, box_w - 20):
            layout.text(bill_x + 10, by, line)
            by += 12
    if customer.email:
        layout.text(bill_x + 10, y + box_h - 28, customer.email)
    if customer.phone:
        layout.text(bill_x + 10, y + box_h - 14, customer.phone)

    layout.stroke_rect(job_x, y, box_w, box_h)
    _draw_section_band(layout, job_x, box_w, "JOB DETAILS")
    layout.text(job_x + 10, y + BAND_HEIGHT + 18, f"Technician: {document.tech_name or '-'}")
    if bundle.kind is DocumentKind.INVOICE:
        detail = f"Work Completed: {_format_date(document.work_completed_date)}"
    else:
        detail = f"Valid Until: {_format_date(document.expiry_date)}"
    layout.text(job_x + 10, y + BAND_HEIGHT + 34, detail)

    layout.y = y + box_h + 14


def _draw_line_items(layout: PdfLayout, bundle: DocumentBundle) -> None:
    table_x = layout.margin
    table_w = layout.content_width
    col_qty = table_x + 10
    col_desc = table_x + 55
    col_material = table_x + table_w - 170
    col_labor = table_x + table_w - 115
    col_total = table_x + table_w - 55
    desc_width = (col_material - 10) - col_desc

    layout.fill_rect(table_x, layout.y, table_w, BAND_HEIGHT, BLUE)
    header_y = layout.y + 13
    white = colors.white
    layout.text(col_qty, header_y, "QTY", font=FONT_BOLD, color=white)
    layout.text(col_desc, header_y, "DESCRIPTION", font=FONT_BOLD, color=white)
    layout.text(col_material, header_y, "MATERIAL", font=FONT_BOLD, color=white, align="right")
    layout.text(col_labor, header_y, "LABOR", font=FONT_BOLD, color=white, align="right")
    layout.text(col_total, header_y, "TOTAL", font=FONT_BOLD, color=white, align="right")
    layout.y += 24

    for item in bundle.items:
        lines = layout.wrap(item.description, desc_width)
        layout.ensure_space(max(50, len(lines) * LINE_HEIGHT + 10))
        total = item.total_cost or (item.material_cost + item.labor_cost)
        layout.text(col_qty, layout.y, "1")
        layout.text(col_material, layout.y, format_currency(item.material_cost), align="right")
        layout.text(col_labor, layout.y, format_currency(item.labor_cost), align="right")
        layout.text(col_total, layout.y, format_currency(total), align="right")
        while True:
            # A description taller than the page continues on the next one.
            room = int((layout.page_height - layout.bottom_reserve - layout.y - 10) // LINE_HEIGHT)
            chunk, lines = lines[: max(room, 1)], lines[max(room, 1) :]
            row_h = len(chunk) * LINE_HEIGHT + 10
            layout.stroke_rect(table_x, layout.y - 10, table_w, row_h, ROW_GRAY)
            for index, line in enumerate(chunk):
                layout.text(col_desc, layout.y + index * LINE_HEIGHT, line)
            layout.y += row_h
            if not lines:
                break
            layout.ensure_space(len(lines) * LINE_HEIGHT + 10)


def _totals_rows(bundle: DocumentBundle, tax_rate: float) -> list[tuple[str, float]]:
    document = bundle.document
    if bundle.kind is DocumentKind.INVOICE:
        return [
            ("TOTAL", document.total_amount),
            ("PAID", document.amount_paid),
            ("BALANCE DUE", document.amount_due),
        ]
    subtotal = document.total_amount
    tax = subtotal * tax_rate
    return [("SUBTOTAL", subtotal), ("TAX", tax), ("TOTAL", subtotal + tax)]


def _draw_totals(layout: PdfLayout, bundle: DocumentBundle, tax_rate: float) -> None:
    layout.ensure_space(160)
    totals_w = 200
    totals_x = layout.margin + layout.content_width - totals_w
    totals_y = layout.y + 10
    box_h = 88
    layout.stroke_rect(totals_x, totals_y, totals_w, box_h)

    fills = [(BLUE, colors.white), (LIGHT_GRAY, colors.black), (BLUE, colors.white)]
    row_y = totals_y
    for (label, amount), (fill, ink) in zip(_totals_rows(bundle, tax_rate), fills):
        layout.fill_rect(totals_x, row_y, totals_w, 22, fill)
        layout.text(totals_x + 10, row_y + 15, label, font=FONT_BOLD, size=10, color=ink)
        layout.text(
            totals_x + totals_w - 10,
            row_y + 15,
            format_currency(amount),
            font=FONT_BOLD,
            size=10,
            color=ink,
            align="right",
        )
        row_y += 22
    layout.y = totals_y + box_h + 20


def _draw_payment_history(layout: PdfLayout, bundle: DocumentBundle) -> None:
    if bundle.kind is not DocumentKind.INVOICE or not bundle.payments:
        return
    m = layout.margin
    layout.ensure_space(120)
    _draw_section_band(layout, m, layout.content_width, "PAYMENT HISTORY")
    layout.y += 24

    columns = [(m + 10, "DATE"), (m + 120, "AMOUNT"), (m + 200, "METHOD"), (m + 300, "REFERENCE")]
    for x, label in columns:
        layout.text(x, layout.y, label, font=FONT_BOLD)
    layout.y += 6
    layout.line(m, layout.y, layout.page_width - m, layout.y, ROW_GRAY)
    layout.y += 12

    for payment in bundle.payments:
        layout.ensure_space(30)
        layout.text(m + 10, layout.y, _format_date(payment.payment_date))
        layout.text(m + 120, layout.y, format_currency(payment.amount))
        layout.text(m + 200, layout.y, payment.payment_method.value.upper())
        layout.text(m + 300, layout.y, payment.reference_number or "-")
        layout.y += 16
    layout.y += 10


def _draw_notes(layout: PdfLayout, bundle: DocumentBundle) -> None:
    m = layout.margin
    width = layout.content_width
    title = "SCOPE OF WORK" if bundle.kind is DocumentKind.INVOICE else "NOTES"
    layout.ensure_space(120)
    _draw_section_band(layout, m, width, title)
    layout.y += 28

    lines = layout.wrap(bundle.document.notes or "-", width - 20)
    box_h = max(70, len(lines) * 12 + 20)
    layout.stroke_rect(m, layout.y - 10, width, box_h)
    line_y = layout.y + 10
    for line in lines:
        layout.text(m + 10, line_y, line)
        line_y += 12
    layout.y = layout.y - 10 + box_h + 20


def _draw_footer(layout: PdfLayout, bundle: DocumentBundle, issuer: PdfIssuerInfo) -> None:
    m = layout.margin
    layout.ensure_space(120)
    layout.text(
        m,
        layout.y,
        f"Please reference this {bundle.kind.value} number in all correspondence.",
        size=8,
    )
    layout.y += 12
    layout.text(m, layout.y, f"Questions? {issuer.phone} | {issuer.email}", size=8)
    layout.y += 24

    right_x = layout.page_width - m - 180
    layout.line(m, layout.y, m + 260, layout.y)
    layout.text(m, layout.y + 12, "Signature", size=8)
    layout.line(right_x, layout.y, layout.page_width - m, layout.y)
    layout.text(right_x, layout.y + 12, "Date", size=8)
    layout.y += 12


def render_document(
    pdf: canvas.Canvas,
    bundle: DocumentBundle,
    *,
    logo: Optional[ImageReader] = None,
    issuer: PdfIssuerInfo = PDF_ISSUER,
    tax_rate: float = ESTIMATE_TAX_RATE,
) -> PdfLayout:
    """Place every section of ``bundle`` on ``pdf`` and return the final layout."""
    layout = PdfLayout(pdf)
    _draw_header(layout, bundle, issuer, logo)
    _draw_party_boxes(layout, bundle)
    _draw_line_items(layout, bundle)
    _draw_totals(layout, bundle, tax_rate)
    _draw_payment_history(layout, bundle)
    _draw_notes(layout, bundle)
    _draw_footer(layout, bundle, issuer)
    return layout


def generate_document_pdf(
    bundle: DocumentBundle,
    output_path: Path,
    *,
    logo_url: Optional[str] = None,
    issuer: PdfIssuerInfo = PDF_ISSUER,
) -> Path:
    """Write ``bundle`` as a PDF to ``output_path``."""
    logger = get_logger(__name__)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    pdf = canvas.Canvas(str(output_path), pagesize=letter)
    pdf.setTitle(f"{bundle.kind.value.capitalize()} {bundle.document.number}")
    pdf.setAuthor(issuer.name)
    logo = load_logo(logo_url if logo_url is not None else resolve_logo_url())
    layout = render_document(pdf, bundle, logo=logo, issuer=issuer)
    pdf.save()
    logger.info(
        "PDF written %s (%d page(s)) to %s",
        bundle.document.number,
        layout.page_count,
        output_path,
    )
    return output_path
