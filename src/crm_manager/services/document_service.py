"""Estimate and invoice business rules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, Optional

from dateutil import parser
from supabase import Client

from crm_manager.config import NUMBER_RETRY_ATTEMPTS
from crm_manager.domain.models import (
    Customer,
    Document,
    DocumentBundle,
    DocumentKind,
    Estimate,
    EstimateStatus,
    Invoice,
    InvoiceStatus,
    LineItem,
)
from crm_manager.logging_config import get_logger
from crm_manager.repositories import (
    CustomerRepo,
    DocumentRepository,
    EstimateRepo,
    InvoiceRepo,
    PaymentRepository,
    estimate_to_record,
    invoice_to_record,
)
from crm_manager.services.errors import NotFoundError, ValidationError
from crm_manager.services.numbering import NumberingService
from crm_manager.utils.money import grand_total, line_total, parse_amount

UNIQUE_VIOLATION = "23505"


@dataclass
class LineItemDraft:
    """Line item as typed in the form; costs may still be raw text."""

    description: str
    material_cost: Any = ""
    labor_cost: Any = ""

    @property
    def line_total(self) -> float:
        return line_total(self.material_cost, self.labor_cost)

    def to_line_item(self, sort_order: int) -> LineItem:
        material = parse_amount(self.material_cost)
        labor = parse_amount(self.labor_cost)
        return LineItem(
            id=None,
            document_id=None,
            description=self.description.strip(),
            material_cost=material,
            labor_cost=labor,
            total_cost=material + labor,
            sort_order=sort_order,
        )


def _is_unique_violation(exc: Exception) -> bool:
    return getattr(exc, "code", None) == UNIQUE_VIOLATION


def _require(value: Optional[str], message: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(message)
    return str(value).strip()


def to_iso_date(
    value: str | date | None, label: str, *, required: bool = True
) -> Optional[str]:
    """Normalize a date field to ``YYYY-MM-DD``."""
    if isinstance(value, date):
        return value.isoformat()
    if value is None or not str(value).strip():
        if required:
            raise ValidationError(f"{label} is required.")
        return None
    try:
        return parser.isoparse(str(value).strip()).date().isoformat()
    except ValueError as exc:
        raise ValidationError(f"{label} is not a valid date: {value}") from exc


class DocumentService:
    """Creation, listing, status changes and deletion of estimates and invoices."""

    def __init__(self, client: Client) -> None:
        self._client = client
        self._repos: dict[DocumentKind, DocumentRepository] = {
            DocumentKind.ESTIMATE: EstimateRepo(client),
            DocumentKind.INVOICE: InvoiceRepo(client),
        }
        self._customer_repo = CustomerRepo(client)
        self._payment_repo = PaymentRepository(client)
        self._numbering = NumberingService(self._repos)
        self._logger = get_logger(self.__class__.__name__)

    @property
    def numbering(self) -> NumberingService:
        return self._numbering

    def repo(self, kind: DocumentKind) -> DocumentRepository:
        return self._repos[kind]

    def list_documents(
        self, kind: DocumentKind, limit: Optional[int] = None
    ) -> list[Document]:
        return self._repos[kind].list_all(limit=limit)

    def create_estimate(
        self,
        *,
        estimate_number: str,
        customer_id: str,
        estimate_date: str,
        expiry_date: Optional[str],
        tech_name: str,
        notes: Optional[str],
        items: Iterable[LineItemDraft],
        status: str | EstimateStatus = EstimateStatus.DRAFT,
    ) -> DocumentBundle:
        status_value = self._validate_status(DocumentKind.ESTIMATE, status)
        estimate_date = to_iso_date(estimate_date, "Estimate date")
        expiry_date = to_iso_date(expiry_date, "Expiry date", required=False)

        def build(number: str, total: float) -> dict[str, Any]:
            return estimate_to_record(
                Estimate(
                    id=None,
                    estimate_number=number,
                    customer_id=customer_id,
                    estimate_date=estimate_date,
                    expiry_date=expiry_date,
                    tech_name=tech_name.strip(),
                    notes=notes or None,
                    status=EstimateStatus(status_value),
                    total_amount=total,
                )
            )

        return self._create(
            DocumentKind.ESTIMATE,
            number=estimate_number,
            customer_id=customer_id,
            tech_name=tech_name,
            items=items,
            build_record=build,
        )

    def create_invoice(
        self,
        *,
        invoice_number: str,
        customer_id: str,
        invoice_date: str,
        due_date: Optional[str],
        work_completed_date: Optional[str],
        tech_name: str,
        notes: Optional[str],
        items: Iterable[LineItemDraft],
        status: str | InvoiceStatus = InvoiceStatus.DRAFT,
    ) -> DocumentBundle:
        status_value = self._validate_status(DocumentKind.INVOICE, status)
        invoice_date = to_iso_date(invoice_date, "Invoice date")
        due_date = to_iso_date(due_date, "Due date")
        work_completed_date = to_iso_date(work_completed_date, "Work completed date")

        def build(number: str, total: float) -> dict[str, Any]:
            return invoice_to_record(
                Invoice(
                    id=None,
                    invoice_number=number,
                    customer_id=customer_id,
                    invoice_date=invoice_date,
                    due_date=due_date,
                    work_completed_date=work_completed_date,
                    tech_name=tech_name.strip(),
                    notes=notes or None,
                    status=InvoiceStatus(status_value),
                    total_amount=total,
                    amount_paid=0.0,
                    amount_due=total,
                )
            )

        return self._create(
            DocumentKind.INVOICE,
            number=invoice_number,
            customer_id=customer_id,
            tech_name=tech_name,
            items=items,
            build_record=build,
        )

    def _create(
        self,
        kind: DocumentKind,
        *,
        number: str,
        customer_id: str,
        tech_name: str,
        items: Iterable[LineItemDraft],
        build_record: Callable[[str, float], dict[str, Any]],
    ) -> DocumentBundle:
        number = _require(number, f"{kind.value.capitalize()} number is required.")
        _require(customer_id, "Select a customer.")
        _require(tech_name, "Technician name is required.")
        drafts = list(items)
        if not drafts:
            raise ValidationError("Add at least one line item.")
        for index, draft in enumerate(drafts, start=1):
            _require(draft.description, f"Line item {index} needs a description.")

        repo = self._repos[kind]
        total = grand_total(drafts)
        document = self._insert_with_fresh_number(kind, number, total, build_record)

        line_items = [draft.to_line_item(index) for index, draft in enumerate(drafts)]
        try:
            inserted_items = repo.insert_line_items(document.id, line_items)
        except Exception:
            self._compensate_document(kind, document.id)
            raise

        self._logger.info(
            "Created %s %s with %d line item(s), total=%.2f",
            kind.value,
            document.number,
            len(inserted_items),
            total,
        )
        customer = self._customer_repo.get_by_id(customer_id) or Customer(
            id=customer_id, name=document.customer_name or "Unknown"
        )
        return DocumentBundle(
            kind=kind,
            document=document,
            customer=customer,
            items=inserted_items,
        )

    def _insert_with_fresh_number(
        self,
        kind: DocumentKind,
        number: str,
        total: float,
        build_record: Callable[[str, float], dict[str, Any]],
    ) -> Document:
        repo = self._repos[kind]
        attempt = 1
        while True:
            try:
                return repo.insert(build_record(number, total))
            except Exception as exc:
                if not _is_unique_violation(exc) or attempt >= NUMBER_RETRY_ATTEMPTS:
                    raise
                taken = number
                number = self._numbering.next_number(kind)
                if number == taken:
                    raise
                self._logger.warning(
                    "%s number %s already taken, retrying as %s",
                    kind.value.capitalize(),
                    taken,
                    number,
                )
                attempt += 1

    def _compensate_document(self, kind: DocumentKind, document_id: str) -> None:
        self._logger.warning(
            "Line items failed for %s id=%s, removing the header row",
            kind.value,
            document_id,
        )
        try:
            self._repos[kind].delete(document_id)
        except Exception:
            self._logger.exception(
                "Compensating delete failed, %s id=%s is orphaned",
                kind.value,
                document_id,
            )

    def _validate_status(self, kind: DocumentKind, status: Any) -> str:
        raw = status.value if hasattr(status, "value") else status
        try:
            return kind.status_enum(raw).value
        except ValueError as exc:
            raise ValidationError(f"Unknown {kind.value} status: {raw}") from exc

    def set_status(self, kind: DocumentKind, document_id: str, status: Any) -> None:
        """Set any status from any other; transitions are not restricted."""
        status_value = self._validate_status(kind, status)
        if not self._repos[kind].set_status(document_id, status_value):
            raise NotFoundError(f"{kind.value.capitalize()} {document_id} not found.")
        self._logger.info(
            "%s id=%s status set to %s", kind.value.capitalize(), document_id, status_value
        )

    def delete_document(self, kind: DocumentKind, document_id: str) -> None:
        repo = self._repos[kind]
        repo.delete_line_items(document_id)
        if not repo.delete(document_id):
            raise NotFoundError(f"{kind.value.capitalize()} {document_id} not found.")
        self._logger.info("Deleted %s id=%s", kind.value, document_id)

    def load_bundle(self, kind: DocumentKind, document_id: str) -> DocumentBundle:
        """Fetch a document with its customer, line items and (invoices) payments."""
        document = self._repos[kind].get_by_id(document_id)
        if document is None:
            raise NotFoundError(f"{kind.value.capitalize()} {document_id} not found.")
        customer = self._customer_repo.get_by_id(document.customer_id)
        if customer is None:
            customer = Customer(id=None, name=document.customer_name or "Unknown customer")
        items = self._repos[kind].list_line_items(document_id)
        payments = []
        if kind is DocumentKind.INVOICE:
            payments = self._payment_repo.list_by_invoice(document_id)
        return DocumentBundle(
            kind=kind,
            document=document,
            customer=customer,
            items=items,
            payments=payments,
        )
