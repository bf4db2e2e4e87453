"""Domain models for CRM Manager."""

from crm_manager.domain.models import (
    Customer,
    Document,
    DocumentBundle,
    DocumentKind,
    Estimate,
    EstimateStatus,
    Invoice,
    InvoiceBalance,
    InvoiceStatus,
    LineItem,
    Payment,
    PaymentMethod,
)

__all__ = [
    "Customer",
    "Document",
    "DocumentBundle",
    "DocumentKind",
    "Estimate",
    "EstimateStatus",
    "Invoice",
    "InvoiceBalance",
    "InvoiceStatus",
    "LineItem",
    "Payment",
    "PaymentMethod",
]
