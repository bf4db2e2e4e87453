"""Centralized UI strings for consistent communication."""

from __future__ import annotations

from crm_manager.domain.models import DocumentKind, InvoiceStatus, PaymentMethod
from crm_manager.version import __app_name__

APP_NAME = __app_name__

TITLE_WARNING = "Warning"
TITLE_ERROR = "Error"
TITLE_SUCCESS = "Success"
TITLE_CONFIRMATION = "Confirm"

PAYMENT_METHOD_LABELS = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.CHECK: "Check",
    PaymentMethod.CARD: "Card",
    PaymentMethod.TRANSFER: "Bank transfer",
    PaymentMethod.OTHER: "Other",
}

STATUS_COLORS = {
    InvoiceStatus.PAID.value: "#2e7d32",
    InvoiceStatus.PARTIAL.value: "#ef6c00",
    InvoiceStatus.OVERDUE.value: "#c62828",
    InvoiceStatus.CANCELLED.value: "#757575",
    "approved": "#2e7d32",
    "rejected": "#c62828",
    "expired": "#757575",
}


def kind_label(kind: DocumentKind, plural: bool = False) -> str:
    label = kind.value.capitalize()
    return f"{label}s" if plural else label


def status_label(status: str) -> str:
    return status.replace("_", " ").capitalize()
