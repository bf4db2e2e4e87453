"""Repositories for data access."""

from crm_manager.repositories.customer_repo import CustomerRepo
from crm_manager.repositories.document_repo import (
    DocumentRepository,
    EstimateRepo,
    InvoiceRepo,
)
from crm_manager.repositories.mappers import (
    balance_from_row,
    customer_from_row,
    customer_to_record,
    estimate_from_row,
    estimate_to_record,
    invoice_from_row,
    invoice_to_record,
    line_item_from_row,
    line_item_to_record,
    payment_from_row,
    payment_to_record,
)
from crm_manager.repositories.payment_repo import PaymentRepository

__all__ = [
    "balance_from_row",
    "CustomerRepo",
    "customer_from_row",
    "customer_to_record",
    "DocumentRepository",
    "EstimateRepo",
    "estimate_from_row",
    "estimate_to_record",
    "InvoiceRepo",
    "invoice_from_row",
    "invoice_to_record",
    "line_item_from_row",
    "line_item_to_record",
    "payment_from_row",
    "payment_to_record",
    "PaymentRepository",
]
