"""Repositories for estimates, invoices and their line items."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from supabase import Client

from crm_manager.db.schema import (
    ESTIMATE_ITEMS_TABLE,
    ESTIMATES_TABLE,
    INVOICE_ITEMS_TABLE,
    INVOICES_TABLE,
)
from crm_manager.domain.models import (
    DocumentKind,
    Estimate,
    Invoice,
    InvoiceBalance,
    InvoiceStatus,
    LineItem,
)
from crm_manager.logging_config import get_logger
from crm_manager.repositories.mappers import (
    balance_from_row,
    estimate_from_row,
    invoice_from_row,
    line_item_from_row,
    line_item_to_record,
)

DocumentT = TypeVar("DocumentT", Estimate, Invoice)

WITH_CUSTOMER_NAME = "*, customers(name)"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class DocumentRepository(Generic[DocumentT]):
    """Data access shared by estimates and invoices."""

    kind: DocumentKind
    table: str
    items_table: str

    def __init__(
        self,
        client: Client,
        from_row: Callable[[dict[str, Any]], DocumentT],
    ) -> None:
        self._client = client
        self._from_row = from_row
        self._logger = get_logger(self.__class__.__name__)

    def insert(self, record: dict[str, Any]) -> DocumentT:
        try:
            response = self._client.table(self.table).insert(record).execute()
        except Exception:
            self._logger.exception(
                "Failed to insert %s number=%s",
                self.kind.value,
                record.get(self.kind.number_field),
            )
            raise
        return self._from_row(response.data[0])

    def get_by_id(self, document_id: str) -> Optional[DocumentT]:
        try:
            response = (
                self._client.table(self.table)
                .select(WITH_CUSTOMER_NAME)
                .eq("id", document_id)
                .limit(1)
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to get %s id=%s", self.kind.value, document_id)
            raise
        return self._from_row(response.data[0]) if response.data else None

    def get_latest_number(self) -> Optional[str]:
        number_field = self.kind.number_field
        try:
            response = (
                self._client.table(self.table)
                .select(number_field)
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to fetch latest %s number", self.kind.value)
            raise
        if not response.data:
            return None
        return response.data[0].get(number_field)

    def list_all(self, limit: Optional[int] = None) -> list[DocumentT]:
        try:
            query = (
                self._client.table(self.table)
                .select(WITH_CUSTOMER_NAME)
                .order("created_at", desc=True)
            )
            if limit is not None:
                query = query.limit(limit)
            response = query.execute()
        except Exception:
            self._logger.exception("Failed to list %s records", self.kind.value)
            raise
        return [self._from_row(row) for row in response.data or []]

    def set_status(self, document_id: str, status: str) -> bool:
        try:
            response = (
                self._client.table(self.table)
                .update({"status": status, "updated_at": _now_iso()})
                .eq("id", document_id)
                .execute()
            )
        except Exception:
            self._logger.exception(
                "Failed to set %s status id=%s status=%s",
                self.kind.value,
                document_id,
                status,
            )
            raise
        return bool(response.data)

    def delete(self, document_id: str) -> bool:
        try:
            response = (
                self._client.table(self.table)
                .delete()
                .eq("id", document_id)
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to delete %s id=%s", self.kind.value, document_id)
            raise
        return bool(response.data)

    def count(self) -> int:
        try:
            response = (
                self._client.table(self.table)
                .select("id", count="exact")
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to count %s records", self.kind.value)
            raise
        return int(response.count or 0)

    def insert_line_items(
        self, document_id: str, items: Iterable[LineItem]
    ) -> list[LineItem]:
        records = []
        for index, item in enumerate(items):
            item.document_id = document_id
            item.sort_order = index
            records.append(line_item_to_record(item, self.kind))
        if not records:
            return []
        try:
            response = self._client.table(self.items_table).insert(records).execute()
        except Exception:
            self._logger.exception(
                "Failed to insert line items %s_id=%s", self.kind.value, document_id
            )
            raise
        return [line_item_from_row(row, self.kind) for row in response.data or []]

    def list_line_items(self, document_id: str) -> list[LineItem]:
        try:
            response = (
                self._client.table(self.items_table)
                .select("*")
                .eq(self.kind.foreign_key, document_id)
                .order("sort_order")
                .execute()
            )
        except Exception:
            self._logger.exception(
                "Failed to list line items %s_id=%s", self.kind.value, document_id
            )
            raise
        return [line_item_from_row(row, self.kind) for row in response.data or []]

    def delete_line_items(self, document_id: str) -> int:
        try:
            response = (
                self._client.table(self.items_table)
                .delete()
                .eq(self.kind.foreign_key, document_id)
                .execute()
            )
        except Exception:
            self._logger.exception(
                "Failed to delete line items %s_id=%s", self.kind.value, document_id
            )
            raise
        return len(response.data or [])


class EstimateRepo(DocumentRepository[Estimate]):
    """Data access for estimates."""

    kind = DocumentKind.ESTIMATE
    table = ESTIMATES_TABLE
    items_table = ESTIMATE_ITEMS_TABLE

    def __init__(self, client: Client) -> None:
        super().__init__(client, estimate_from_row)


class InvoiceRepo(DocumentRepository[Invoice]):
    """Data access for invoices, including balance columns."""

    kind = DocumentKind.INVOICE
    table = INVOICES_TABLE
    items_table = INVOICE_ITEMS_TABLE

    def __init__(self, client: Client) -> None:
        super().__init__(client, invoice_from_row)

    def list_open(self) -> list[Invoice]:
        """Invoices that can still receive payments."""
        try:
            response = (
                self._client.table(self.table)
                .select(WITH_CUSTOMER_NAME)
                .neq("status", InvoiceStatus.PAID.value)
                .neq("status", InvoiceStatus.CANCELLED.value)
                .order("invoice_number")
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to list open invoices")
            raise
        return [self._from_row(row) for row in response.data or []]

    def get_balance(self, invoice_id: str) -> Optional[InvoiceBalance]:
        try:
            response = (
                self._client.table(self.table)
                .select("total_amount, amount_paid, amount_due, status")
                .eq("id", invoice_id)
                .limit(1)
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to read balance invoice_id=%s", invoice_id)
            raise
        return balance_from_row(response.data[0]) if response.data else None

    def update_balance(
        self,
        invoice_id: str,
        balance: InvoiceBalance,
        *,
        expected_paid: float,
    ) -> bool:
        """Write ``balance`` only if ``amount_paid`` still equals ``expected_paid``.

        Returns False when another writer changed the invoice first.
        """
        try:
            response = (
                self._client.table(self.table)
                .update(
                    {
                        "amount_paid": balance.amount_paid,
                        "amount_due": balance.amount_due,
                        "status": balance.status.value,
                        "updated_at": _now_iso(),
                    }
                )
                .eq("id", invoice_id)
                .eq("amount_paid", expected_paid)
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to update balance invoice_id=%s", invoice_id)
            raise
        return bool(response.data)

    def get_totals(self) -> tuple[float, float, float]:
        """Return (total, paid, due) summed across every invoice."""
        try:
            response = (
                self._client.table(self.table)
                .select("total_amount, amount_paid, amount_due, status")
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to sum invoice totals")
            raise
        total = paid = due = 0.0
        for row in response.data or []:
            balance = balance_from_row(row)
            total += balance.total_amount
            paid += balance.amount_paid
            due += balance.amount_due
        return total, paid, due
