"""Backend row mappers for domain models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional, TypeVar

from crm_manager.domain.models import (
    Customer,
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
from crm_manager.utils.money import parse_amount

Row = Mapping[str, Any]
EnumT = TypeVar("EnumT", bound=Enum)


def _row_value(row: Row, key: str) -> Any:
    return row.get(key)


def _enum_value(enum_cls: type[EnumT], raw: Any, default: EnumT) -> EnumT:
    try:
        return enum_cls(raw)
    except ValueError:
        return default


def _embedded_name(row: Row, table: str) -> Optional[str]:
    embedded = row.get(table)
    if isinstance(embedded, dict):
        return embedded.get("name")
    return None


def customer_from_row(row: Row) -> Customer:
    return Customer(
        id=_row_value(row, "id"),
        name=row["name"],
        email=_row_value(row, "email"),
        phone=_row_value(row, "phone"),
        address=_row_value(row, "address"),
        notes=_row_value(row, "notes"),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def customer_to_record(customer: Customer) -> Dict[str, Any]:
    return {
        "name": customer.name,
        "email": customer.email,
        "phone": customer.phone,
        "address": customer.address,
        "notes": customer.notes,
    }


def estimate_from_row(row: Row) -> Estimate:
    return Estimate(
        id=_row_value(row, "id"),
        estimate_number=row["estimate_number"],
        customer_id=row["customer_id"],
        estimate_date=row["estimate_date"],
        expiry_date=_row_value(row, "expiry_date"),
        tech_name=_row_value(row, "tech_name") or "",
        notes=_row_value(row, "notes"),
        status=_enum_value(EstimateStatus, row.get("status"), EstimateStatus.DRAFT),
        total_amount=parse_amount(_row_value(row, "total_amount")),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
        customer_name=_embedded_name(row, "customers"),
    )


def estimate_to_record(estimate: Estimate) -> Dict[str, Any]:
    return {
        "estimate_number": estimate.estimate_number,
        "customer_id": estimate.customer_id,
        "estimate_date": estimate.estimate_date,
        "expiry_date": estimate.expiry_date or None,
        "tech_name": estimate.tech_name,
        "notes": estimate.notes,
        "status": estimate.status.value,
        "total_amount": estimate.total_amount,
    }


def invoice_from_row(row: Row) -> Invoice:
    return Invoice(
        id=_row_value(row, "id"),
        invoice_number=row["invoice_number"],
        customer_id=row["customer_id"],
        invoice_date=row["invoice_date"],
        due_date=_row_value(row, "due_date"),
        work_completed_date=_row_value(row, "work_completed_date"),
        tech_name=_row_value(row, "tech_name") or "",
        notes=_row_value(row, "notes"),
        status=_enum_value(InvoiceStatus, row.get("status"), InvoiceStatus.DRAFT),
        total_amount=parse_amount(_row_value(row, "total_amount")),
        amount_paid=parse_amount(_row_value(row, "amount_paid")),
        amount_due=parse_amount(_row_value(row, "amount_due")),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
        customer_name=_embedded_name(row, "customers"),
    )


def balance_from_row(row: Row) -> InvoiceBalance:
    return InvoiceBalance(
        total_amount=parse_amount(_row_value(row, "total_amount")),
        amount_paid=parse_amount(_row_value(row, "amount_paid")),
        amount_due=parse_amount(_row_value(row, "amount_due")),
        status=_enum_value(InvoiceStatus, row.get("status"), InvoiceStatus.DRAFT),
    )


def invoice_to_record(invoice: Invoice) -> Dict[str, Any]:
    return {
        "invoice_number": invoice.invoice_number,
        "customer_id": invoice.customer_id,
        "invoice_date": invoice.invoice_date,
        "due_date": invoice.due_date or None,
        "work_completed_date": invoice.work_completed_date or None,
        "tech_name": invoice.tech_name,
        "notes": invoice.notes,
        "status": invoice.status.value,
        "total_amount": invoice.total_amount,
        "amount_paid": invoice.amount_paid,
        "amount_due": invoice.amount_due,
    }


def line_item_from_row(row: Row, kind: DocumentKind) -> LineItem:
    material = parse_amount(_row_value(row, "material_cost"))
    labor = parse_amount(_row_value(row, "labor_cost"))
    stored_total = _row_value(row, "total_cost")
    return LineItem(
        id=_row_value(row, "id"),
        document_id=_row_value(row, kind.foreign_key),
        description=_row_value(row, "description") or "",
        material_cost=material,
        labor_cost=labor,
        total_cost=parse_amount(stored_total) if stored_total is not None else material + labor,
        sort_order=int(_row_value(row, "sort_order") or 0),
    )


def line_item_to_record(item: LineItem, kind: DocumentKind) -> Dict[str, Any]:
    return {
        kind.foreign_key: item.document_id,
        "description": item.description,
        "material_cost": item.material_cost,
        "labor_cost": item.labor_cost,
        "total_cost": item.material_cost + item.labor_cost,
        "sort_order": item.sort_order,
    }


def payment_from_row(row: Row) -> Payment:
    invoice = row.get("crm_invoices")
    invoice_number = None
    customer_name = None
    if isinstance(invoice, dict):
        invoice_number = invoice.get("invoice_number")
        customer_name = _embedded_name(invoice, "customers")
    return Payment(
        id=_row_value(row, "id"),
        invoice_id=row["invoice_id"],
        payment_date=row["payment_date"],
        amount=parse_amount(_row_value(row, "amount")),
        payment_method=_enum_value(
            PaymentMethod, row.get("payment_method"), PaymentMethod.OTHER
        ),
        reference_number=_row_value(row, "reference_number"),
        notes=_row_value(row, "notes"),
        created_at=_row_value(row, "created_at"),
        invoice_number=invoice_number,
        customer_name=customer_name,
    )


def payment_to_record(payment: Payment) -> Dict[str, Any]:
    return {
        "invoice_id": payment.invoice_id,
        "payment_date": payment.payment_date,
        "amount": payment.amount,
        "payment_method": payment.payment_method.value,
        "reference_number": payment.reference_number,
        "notes": payment.notes,
    }
