"""Payment recording and invoice balance reconciliation."""

from __future__ import annotations

from typing import Callable, Optional

from supabase import Client

from crm_manager.config import RECONCILE_ATTEMPTS
from crm_manager.domain.models import (
    Invoice,
    InvoiceBalance,
    InvoiceStatus,
    Payment,
    PaymentMethod,
)
from crm_manager.logging_config import get_logger
from crm_manager.repositories import InvoiceRepo, PaymentRepository
from crm_manager.services.document_service import to_iso_date
from crm_manager.services.errors import (
    ConcurrencyError,
    NotFoundError,
    ValidationError,
)
from crm_manager.utils.money import parse_amount


def apply_payment(balance: InvoiceBalance, amount: float) -> InvoiceBalance:
    """Balance after adding a payment of ``amount``."""
    amount_paid = round(balance.amount_paid + amount, 2)
    amount_due = round(balance.total_amount - amount_paid, 2)
    status = InvoiceStatus.PAID if amount_due <= 0 else InvoiceStatus.PARTIAL
    return InvoiceBalance(
        total_amount=balance.total_amount,
        amount_paid=amount_paid,
        amount_due=amount_due,
        status=status,
    )


def revert_payment(balance: InvoiceBalance, amount: float) -> InvoiceBalance:
    """Balance after removing a payment of ``amount``."""
    amount_paid = round(balance.amount_paid - amount, 2)
    amount_due = round(balance.total_amount - amount_paid, 2)
    if amount_due <= 0:
        status = InvoiceStatus.PAID
    elif amount_paid > 0:
        status = InvoiceStatus.PARTIAL
    else:
        status = InvoiceStatus.SENT
    return InvoiceBalance(
        total_amount=balance.total_amount,
        amount_paid=amount_paid,
        amount_due=amount_due,
        status=status,
    )


class PaymentService:
    """Keeps invoice paid/due/status in step with the payments table."""

    def __init__(self, client: Client) -> None:
        self._invoice_repo = InvoiceRepo(client)
        self._payment_repo = PaymentRepository(client)
        self._logger = get_logger(self.__class__.__name__)

    def list_payments(self) -> list[Payment]:
        return self._payment_repo.list_all()

    def list_payments_for_invoice(self, invoice_id: str) -> list[Payment]:
        return self._payment_repo.list_by_invoice(invoice_id)

    def list_open_invoices(self) -> list[Invoice]:
        return self._invoice_repo.list_open()

    def total_received(self, payments: Optional[list[Payment]] = None) -> float:
        if payments is None:
            payments = self._payment_repo.list_all()
        return sum(payment.amount for payment in payments)

    def record_payment(
        self,
        *,
        invoice_id: str,
        amount: object,
        payment_date: str,
        payment_method: str | PaymentMethod = PaymentMethod.CASH,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> tuple[Payment, InvoiceBalance]:
        if not invoice_id:
            raise ValidationError("Select an invoice.")
        payment_date = to_iso_date(payment_date, "Payment date")
        value = parse_amount(amount)
        if value <= 0:
            raise ValidationError("Payment amount must be greater than zero.")
        try:
            method = PaymentMethod(payment_method)
        except ValueError as exc:
            raise ValidationError(f"Unknown payment method: {payment_method}") from exc

        balance = self._require_balance(invoice_id)
        payment = self._payment_repo.create(
            Payment(
                id=None,
                invoice_id=invoice_id,
                payment_date=payment_date,
                amount=value,
                payment_method=method,
                reference_number=reference_number or None,
                notes=notes or None,
            )
        )
        try:
            updated = self._reconcile(
                invoice_id, balance, lambda current: apply_payment(current, value)
            )
        except Exception:
            self._logger.warning(
                "Invoice update failed, removing payment id=%s", payment.id
            )
            try:
                self._payment_repo.delete(payment.id)
            except Exception:
                self._logger.exception(
                    "Compensating delete failed, payment id=%s is unreconciled",
                    payment.id,
                )
            raise

        self._logger.info(
            "Recorded payment id=%s invoice_id=%s amount=%.2f status=%s",
            payment.id,
            invoice_id,
            value,
            updated.status.value,
        )
        return payment, updated

    def delete_payment(self, payment_id: str) -> InvoiceBalance:
        payment = self._payment_repo.get_by_id(payment_id)
        if payment is None:
            raise NotFoundError(f"Payment {payment_id} not found.")
        balance = self._require_balance(payment.invoice_id)

        self._payment_repo.delete(payment_id)
        try:
            updated = self._reconcile(
                payment.invoice_id,
                balance,
                lambda current: revert_payment(current, payment.amount),
            )
        except Exception:
            self._logger.warning(
                "Invoice update failed, restoring payment id=%s", payment_id
            )
            try:
                self._payment_repo.create(payment)
            except Exception:
                self._logger.exception(
                    "Compensating insert failed, payment id=%s is lost", payment_id
                )
            raise

        self._logger.info(
            "Deleted payment id=%s invoice_id=%s amount=%.2f status=%s",
            payment_id,
            payment.invoice_id,
            payment.amount,
            updated.status.value,
        )
        return updated

    def _require_balance(self, invoice_id: str) -> InvoiceBalance:
        balance = self._invoice_repo.get_balance(invoice_id)
        if balance is None:
            raise NotFoundError(f"Invoice {invoice_id} not found.")
        return balance

    def _reconcile(
        self,
        invoice_id: str,
        balance: InvoiceBalance,
        compute: Callable[[InvoiceBalance], InvoiceBalance],
    ) -> InvoiceBalance:
        for attempt in range(1, RECONCILE_ATTEMPTS + 1):
            updated = compute(balance)
            if self._invoice_repo.update_balance(
                invoice_id, updated, expected_paid=balance.amount_paid
            ):
                return updated
            self._logger.warning(
                "Invoice id=%s changed concurrently (attempt %d/%d)",
                invoice_id,
                attempt,
                RECONCILE_ATTEMPTS,
            )
            balance = self._require_balance(invoice_id)
        raise ConcurrencyError(
            f"Invoice {invoice_id} kept changing; payment was not applied."
        )
