"""Dashboard with headline figures and recent documents."""

from __future__ import annotations

from PySide6 import QtCore, QtWidgets

from crm_manager.domain.models import Estimate, Invoice
from crm_manager.ui.app_services import AppServices
from crm_manager.ui.screens.base_screen import BaseScreen
from crm_manager.ui.strings import status_label
from crm_manager.ui.widgets import KpiCard
from crm_manager.utils.money import format_currency
from crm_manager.utils.theme import apply_table_theme


class DashboardScreen(BaseScreen):
    def __init__(self, services: AppServices) -> None:
        super().__init__(services)
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        title = QtWidgets.QLabel("Dashboard")
        title.setStyleSheet("font-size: 24px; font-weight: 600;")
        layout.addWidget(title)

        theme_manager = self._services.theme_manager
        cards_layout = QtWidgets.QGridLayout()
        cards_layout.setHorizontalSpacing(12)
        cards_layout.setVerticalSpacing(12)
        self._customers_card = KpiCard(theme_manager, "Customers")
        self._estimates_card = KpiCard(theme_manager, "Estimates")
        self._invoices_card = KpiCard(theme_manager, "Invoices")
        self._invoiced_card = KpiCard(theme_manager, "Total invoiced")
        self._paid_card = KpiCard(theme_manager, "Total paid")
        self._outstanding_card = KpiCard(theme_manager, "Outstanding")
        cards = [
            self._customers_card,
            self._estimates_card,
            self._invoices_card,
            self._invoiced_card,
            self._paid_card,
            self._outstanding_card,
        ]
        for index, card in enumerate(cards):
            cards_layout.addWidget(card, index // 3, index % 3)
        layout.addLayout(cards_layout)

        recent_layout = QtWidgets.QHBoxLayout()
        self._estimates_table = self._build_recent_table("Recent estimates", recent_layout)
        self._invoices_table = self._build_recent_table("Recent invoices", recent_layout)
        layout.addLayout(recent_layout)

    def _build_recent_table(
        self, title: str, parent_layout: QtWidgets.QHBoxLayout
    ) -> QtWidgets.QTableWidget:
        group = QtWidgets.QGroupBox(title)
        group_layout = QtWidgets.QVBoxLayout(group)
        table = QtWidgets.QTableWidget(0, 4)
        table.setHorizontalHeaderLabels(["Number", "Customer", "Total", "Status"])
        table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        table.verticalHeader().setVisible(False)
        table.horizontalHeader().setSectionResizeMode(1, QtWidgets.QHeaderView.Stretch)
        apply_table_theme(
            table, "dark" if self._services.theme_manager.is_dark() else "light"
        )
        self._services.theme_manager.theme_changed.connect(
            lambda theme, target=table: apply_table_theme(target, theme)
        )
        group_layout.addWidget(table)
        parent_layout.addWidget(group)
        return table

    def refresh(self) -> None:
        try:
            summary = self._services.dashboard_service.get_summary()
        except Exception as exc:
            self.show_error(exc, "Could not load the dashboard.")
            return
        self._customers_card.set_value(str(summary.customer_count))
        self._estimates_card.set_value(str(summary.estimate_count))
        self._invoices_card.set_value(str(summary.invoice_count))
        self._invoiced_card.set_value(format_currency(summary.total_invoiced))
        self._paid_card.set_value(format_currency(summary.total_paid))
        self._outstanding_card.set_value(format_currency(summary.total_outstanding))
        self._fill_recent(self._estimates_table, summary.recent_estimates)
        self._fill_recent(self._invoices_table, summary.recent_invoices)

    def _fill_recent(
        self, table: QtWidgets.QTableWidget, documents: list[Estimate] | list[Invoice]
    ) -> None:
        table.setRowCount(len(documents))
        for row, document in enumerate(documents):
            total = QtWidgets.QTableWidgetItem(format_currency(document.total_amount))
            total.setTextAlignment(QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter)
            table.setItem(row, 0, QtWidgets.QTableWidgetItem(document.number))
            table.setItem(row, 1, QtWidgets.QTableWidgetItem(document.customer_name or "-"))
            table.setItem(row, 2, total)
            table.setItem(row, 3, QtWidgets.QTableWidgetItem(status_label(document.status.value)))
