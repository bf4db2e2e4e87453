"""Screen widgets for the CRM Manager UI."""

from crm_manager.ui.screens.customers_screen import CustomersScreen
from crm_manager.ui.screens.dashboard_screen import DashboardScreen
from crm_manager.ui.screens.documents_screen import DocumentsScreen
from crm_manager.ui.screens.payments_screen import PaymentsScreen

__all__ = [
    "CustomersScreen",
    "DashboardScreen",
    "DocumentsScreen",
    "PaymentsScreen",
]
