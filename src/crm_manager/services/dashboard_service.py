"""Summary figures for the dashboard page."""

from __future__ import annotations

from dataclasses import dataclass, field

from supabase import Client

from crm_manager.domain.models import Estimate, Invoice
from crm_manager.logging_config import get_logger
from crm_manager.repositories import CustomerRepo, EstimateRepo, InvoiceRepo

RECENT_LIMIT = 5


@dataclass(slots=True)
class DashboardSummary:
    customer_count: int = 0
    estimate_count: int = 0
    invoice_count: int = 0
    total_invoiced: float = 0.0
    total_paid: float = 0.0
    total_outstanding: float = 0.0
    recent_estimates: list[Estimate] = field(default_factory=list)
    recent_invoices: list[Invoice] = field(default_factory=list)


class DashboardService:
    def __init__(self, client: Client) -> None:
        self._customer_repo = CustomerRepo(client)
        self._estimate_repo = EstimateRepo(client)
        self._invoice_repo = InvoiceRepo(client)
        self._logger = get_logger(self.__class__.__name__)

    def get_summary(self) -> DashboardSummary:
        total, paid, due = self._invoice_repo.get_totals()
        summary = DashboardSummary(
            customer_count=self._customer_repo.count(),
            estimate_count=self._estimate_repo.count(),
            invoice_count=self._invoice_repo.count(),
            total_invoiced=total,
            total_paid=paid,
            total_outstanding=due,
            recent_estimates=self._estimate_repo.list_all(limit=RECENT_LIMIT),
            recent_invoices=self._invoice_repo.list_all(limit=RECENT_LIMIT),
        )
        self._logger.debug(
            "Dashboard summary: %d customers, %d estimates, %d invoices",
            summary.customer_count,
            summary.estimate_count,
            summary.invoice_count,
        )
        return summary
