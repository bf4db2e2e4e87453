"""Repository for payments persistence."""

from __future__ import annotations

from typing import Optional

from supabase import Client

from crm_manager.db.schema import PAYMENTS_TABLE
from crm_manager.domain.models import Payment
from crm_manager.logging_config import get_logger
from crm_manager.repositories.mappers import payment_from_row, payment_to_record

WITH_INVOICE_AND_CUSTOMER = "*, crm_invoices(invoice_number, customers(name))"


class PaymentRepository:
    """Data access for payments."""

    def __init__(self, client: Client) -> None:
        self._client = client
        self._logger = get_logger(self.__class__.__name__)

    def list_all(self) -> list[Payment]:
        try:
            response = (
                self._client.table(PAYMENTS_TABLE)
                .select(WITH_INVOICE_AND_CUSTOMER)
                .order("payment_date", desc=True)
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to list payments")
            raise
        return [payment_from_row(row) for row in response.data or []]

    def list_by_invoice(self, invoice_id: str) -> list[Payment]:
        try:
            response = (
                self._client.table(PAYMENTS_TABLE)
                .select("*")
                .eq("invoice_id", invoice_id)
                .order("payment_date")
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to list payments invoice_id=%s", invoice_id)
            raise
        return [payment_from_row(row) for row in response.data or []]

    def get_by_id(self, payment_id: str) -> Optional[Payment]:
        try:
            response = (
                self._client.table(PAYMENTS_TABLE)
                .select("*")
                .eq("id", payment_id)
                .limit(1)
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to fetch payment id=%s", payment_id)
            raise
        return payment_from_row(response.data[0]) if response.data else None

    def create(self, payment: Payment) -> Payment:
        record = payment_to_record(payment)
        if payment.id is not None:
            record["id"] = payment.id
        try:
            response = self._client.table(PAYMENTS_TABLE).insert(record).execute()
        except Exception:
            self._logger.exception(
                "Failed to create payment invoice_id=%s", payment.invoice_id
            )
            raise
        return payment_from_row(response.data[0])

    def delete(self, payment_id: str) -> bool:
        try:
            response = (
                self._client.table(PAYMENTS_TABLE)
                .delete()
                .eq("id", payment_id)
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to delete payment id=%s", payment_id)
            raise
        return bool(response.data)
