"""Service container for the UI layer."""

from __future__ import annotations

from dataclasses import dataclass

from supabase import Client

from crm_manager.repositories import CustomerRepo
from crm_manager.services.dashboard_service import DashboardService
from crm_manager.services.document_service import DocumentService
from crm_manager.services.payment_service import PaymentService
from crm_manager.ui.data_bus import DataEventBus
from crm_manager.utils.theme import ThemeManager


@dataclass(frozen=True)
class AppServices:
    """Shared repositories and services for dependency injection."""

    client: Client
    data_bus: DataEventBus
    customer_repo: CustomerRepo
    document_service: DocumentService
    payment_service: PaymentService
    dashboard_service: DashboardService
    theme_manager: ThemeManager

    @classmethod
    def build(
        cls, client: Client, theme_manager: ThemeManager
    ) -> "AppServices":
        return cls(
            client=client,
            data_bus=DataEventBus(),
            customer_repo=CustomerRepo(client),
            document_service=DocumentService(client),
            payment_service=PaymentService(client),
            dashboard_service=DashboardService(client),
            theme_manager=theme_manager,
        )
