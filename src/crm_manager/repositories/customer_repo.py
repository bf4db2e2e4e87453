"""Repository for customer persistence."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from supabase import Client

from crm_manager.db.schema import CUSTOMERS_TABLE
from crm_manager.domain.models import Customer
from crm_manager.logging_config import get_logger
from crm_manager.repositories.mappers import customer_from_row, customer_to_record


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class CustomerRepo:
    """CRUD operations for customers."""

    def __init__(self, client: Client) -> None:
        self._client = client
        self._logger = get_logger(self.__class__.__name__)

    def create(
        self,
        name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Customer:
        record = customer_to_record(
            Customer(
                id=None,
                name=name,
                email=email,
                phone=phone,
                address=address,
                notes=notes,
            )
        )
        try:
            response = self._client.table(CUSTOMERS_TABLE).insert(record).execute()
        except Exception:
            self._logger.exception("Failed to create customer")
            raise
        return customer_from_row(response.data[0])

    def update(
        self,
        customer_id: str,
        name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Optional[Customer]:
        record = customer_to_record(
            Customer(
                id=customer_id,
                name=name,
                email=email,
                phone=phone,
                address=address,
                notes=notes,
            )
        )
        record["updated_at"] = _now_iso()
        try:
            response = (
                self._client.table(CUSTOMERS_TABLE)
                .update(record)
                .eq("id", customer_id)
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to update customer id=%s", customer_id)
            raise
        if not response.data:
            return None
        return customer_from_row(response.data[0])

    def delete(self, customer_id: str) -> bool:
        try:
            response = (
                self._client.table(CUSTOMERS_TABLE)
                .delete()
                .eq("id", customer_id)
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to delete customer id=%s", customer_id)
            raise
        return bool(response.data)

    def list_all(self) -> List[Customer]:
        try:
            response = (
                self._client.table(CUSTOMERS_TABLE)
                .select("*")
                .order("name")
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to list customers")
            raise
        return [customer_from_row(row) for row in response.data or []]

    def search_by_name(self, term: str) -> List[Customer]:
        term = term.strip()
        if not term:
            return self.list_all()
        try:
            response = (
                self._client.table(CUSTOMERS_TABLE)
                .select("*")
                .ilike("name", f"%{term}%")
                .order("name")
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to search customers by name term=%s", term)
            raise
        return [customer_from_row(row) for row in response.data or []]

    def get_by_id(self, customer_id: str) -> Optional[Customer]:
        try:
            response = (
                self._client.table(CUSTOMERS_TABLE)
                .select("*")
                .eq("id", customer_id)
                .limit(1)
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to get customer id=%s", customer_id)
            raise
        return customer_from_row(response.data[0]) if response.data else None

    def count(self) -> int:
        try:
            response = (
                self._client.table(CUSTOMERS_TABLE)
                .select("id", count="exact")
                .execute()
            )
        except Exception:
            self._logger.exception("Failed to count customers")
            raise
        return int(response.count or 0)
