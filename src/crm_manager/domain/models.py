"""Domain dataclasses and enums."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class EstimateStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CHECK = "check"
    CARD = "card"
    TRANSFER = "transfer"
    OTHER = "other"


class DocumentKind(str, Enum):
    ESTIMATE = "estimate"
    INVOICE = "invoice"

    @property
    def prefix(self) -> str:
        return "EST" if self is DocumentKind.ESTIMATE else "INV"

    @property
    def number_field(self) -> str:
        return f"{self.value}_number"

    @property
    def foreign_key(self) -> str:
        return f"{self.value}_id"

    @property
    def status_enum(self) -> type[Enum]:
        return EstimateStatus if self is DocumentKind.ESTIMATE else InvoiceStatus


@dataclass(slots=True)
class Customer:
    id: Optional[str]
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(slots=True)
class LineItem:
    """One billable row of an estimate or invoice."""

    id: Optional[str]
    document_id: Optional[str]
    description: str
    material_cost: float
    labor_cost: float
    total_cost: float
    sort_order: int = 0


@dataclass(slots=True)
class Estimate:
    id: Optional[str]
    estimate_number: str
    customer_id: str
    estimate_date: str
    expiry_date: Optional[str]
    tech_name: str
    notes: Optional[str]
    status: EstimateStatus
    total_amount: float
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    customer_name: Optional[str] = None

    @property
    def number(self) -> str:
        return self.estimate_number

    @property
    def document_date(self) -> str:
        return self.estimate_date


@dataclass(slots=True)
class Invoice:
    id: Optional[str]
    invoice_number: str
    customer_id: str
    invoice_date: str
    due_date: Optional[str]
    work_completed_date: Optional[str]
    tech_name: str
    notes: Optional[str]
    status: InvoiceStatus
    total_amount: float
    amount_paid: float = 0.0
    amount_due: float = 0.0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    customer_name: Optional[str] = None

    @property
    def number(self) -> str:
        return self.invoice_number

    @property
    def document_date(self) -> str:
        return self.invoice_date

    @property
    def balance(self) -> "InvoiceBalance":
        return InvoiceBalance(
            total_amount=self.total_amount,
            amount_paid=self.amount_paid,
            amount_due=self.amount_due,
            status=self.status,
        )


Document = Union[Estimate, Invoice]


@dataclass(slots=True)
class Payment:
    id: Optional[str]
    invoice_id: str
    payment_date: str
    amount: float
    payment_method: PaymentMethod
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    invoice_number: Optional[str] = None
    customer_name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class InvoiceBalance:
    """Paid/due snapshot of an invoice used by payment reconciliation."""

    total_amount: float
    amount_paid: float
    amount_due: float
    status: InvoiceStatus = InvoiceStatus.SENT


@dataclass(slots=True)
class DocumentBundle:
    """A document with everything needed to preview or render it."""

    kind: DocumentKind
    document: Document
    customer: Customer
    items: list[LineItem]
    payments: list[Payment] = field(default_factory=list)
