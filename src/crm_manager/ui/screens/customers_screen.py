"""Screen for customer management."""

from __future__ import annotations

from typing import List, Optional

from PySide6 import QtCore, QtWidgets

from crm_manager.domain.models import Customer
from crm_manager.ui.app_services import AppServices
from crm_manager.ui.screens.base_screen import BaseScreen
from crm_manager.ui.strings import TITLE_CONFIRMATION, TITLE_WARNING
from crm_manager.utils.theme import apply_table_theme


class CustomerDialog(QtWidgets.QDialog):
    """Dialog for creating or editing a customer."""

    def __init__(
        self,
        parent: QtWidgets.QWidget | None = None,
        customer: Optional[Customer] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Edit Customer" if customer else "New Customer")
        self.setModal(True)
        self.setMinimumWidth(420)
        self._build_ui()
        if customer:
            self._load_customer(customer)

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)

        form = QtWidgets.QFormLayout()
        self.name_input = QtWidgets.QLineEdit()
        self.email_input = QtWidgets.QLineEdit()
        self.email_input.setPlaceholderText("name@example.com")
        self.phone_input = QtWidgets.QLineEdit()
        self.phone_input.setPlaceholderText("(555) 555-5555")
        self.address_input = QtWidgets.QPlainTextEdit()
        self.address_input.setFixedHeight(60)
        self.notes_input = QtWidgets.QPlainTextEdit()
        self.notes_input.setFixedHeight(80)

        form.addRow("Name *", self.name_input)
        form.addRow("Email", self.email_input)
        form.addRow("Phone", self.phone_input)
        form.addRow("Address", self.address_input)
        form.addRow("Notes", self.notes_input)
        layout.addLayout(form)

        self.button_box = QtWidgets.QDialogButtonBox(
            QtWidgets.QDialogButtonBox.Save | QtWidgets.QDialogButtonBox.Cancel
        )
        self.button_box.accepted.connect(self._on_accept)
        self.button_box.rejected.connect(self.reject)
        layout.addWidget(self.button_box)

    def _load_customer(self, customer: Customer) -> None:
        self.name_input.setText(customer.name)
        self.email_input.setText(customer.email or "")
        self.phone_input.setText(customer.phone or "")
        self.address_input.setPlainText(customer.address or "")
        self.notes_input.setPlainText(customer.notes or "")

    def _on_accept(self) -> None:
        if not self.name_input.text().strip():
            QtWidgets.QMessageBox.warning(self, TITLE_WARNING, "Enter the customer name.")
            return
        self.accept()

    def get_data(self) -> dict[str, Optional[str]]:
        return {
            "name": self.name_input.text().strip(),
            "email": self.email_input.text().strip() or None,
            "phone": self.phone_input.text().strip() or None,
            "address": self.address_input.toPlainText().strip() or None,
            "notes": self.notes_input.toPlainText().strip() or None,
        }


class CustomersScreen(BaseScreen):
    """Screen for customers."""

    def __init__(self, services: AppServices) -> None:
        super().__init__(services)
        self._customers: List[Customer] = []
        self._search_timer = QtCore.QTimer(self)
        self._search_timer.setSingleShot(True)
        self._search_timer.setInterval(250)
        self._search_timer.timeout.connect(self.refresh)
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)

        title = QtWidgets.QLabel("Customers")
        title.setStyleSheet("font-size: 24px; font-weight: 600;")
        layout.addWidget(title)

        search_layout = QtWidgets.QHBoxLayout()
        self.search_input = QtWidgets.QLineEdit()
        self.search_input.setPlaceholderText("Search by name")
        self.search_input.textChanged.connect(lambda _text: self._search_timer.start())
        search_layout.addWidget(QtWidgets.QLabel("Search:"))
        search_layout.addWidget(self.search_input)
        layout.addLayout(search_layout)

        button_layout = QtWidgets.QHBoxLayout()
        self.new_button = QtWidgets.QPushButton("New Customer")
        self.edit_button = QtWidgets.QPushButton("Edit")
        self.delete_button = QtWidgets.QPushButton("Delete")
        self.edit_button.setEnabled(False)
        self.delete_button.setEnabled(False)
        self.new_button.clicked.connect(self._on_new)
        self.edit_button.clicked.connect(self._on_edit)
        self.delete_button.clicked.connect(self._on_delete)
        button_layout.addWidget(self.new_button)
        button_layout.addWidget(self.edit_button)
        button_layout.addWidget(self.delete_button)
        button_layout.addStretch()
        layout.addLayout(button_layout)

        self.table = QtWidgets.QTableWidget(0, 4)
        self.table.setHorizontalHeaderLabels(["Name", "Email", "Phone", "Address"])
        self.table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.table.verticalHeader().setVisible(False)
        self.table.itemSelectionChanged.connect(self._on_selection_changed)
        self.table.doubleClicked.connect(lambda _index: self._on_edit())
        header = self.table.horizontalHeader()
        for column in range(3):
            header.setSectionResizeMode(column, QtWidgets.QHeaderView.ResizeToContents)
        header.setSectionResizeMode(3, QtWidgets.QHeaderView.Stretch)
        apply_table_theme(
            self.table, "dark" if self._services.theme_manager.is_dark() else "light"
        )
        self._services.theme_manager.theme_changed.connect(
            lambda theme, table=self.table: apply_table_theme(table, theme)
        )
        layout.addWidget(self.table)

    def refresh(self) -> None:
        term = self.search_input.text().strip()
        try:
            if term:
                customers = self._services.customer_repo.search_by_name(term)
            else:
                customers = self._services.customer_repo.list_all()
        except Exception as exc:
            self.show_error(exc, "Could not load customers.")
            return
        self._customers = customers
        self._render_table(customers)

    def _render_table(self, customers: List[Customer]) -> None:
        self.table.setRowCount(len(customers))
        for row, customer in enumerate(customers):
            values = [customer.name, customer.email, customer.phone, customer.address]
            for column, value in enumerate(values):
                self.table.setItem(row, column, QtWidgets.QTableWidgetItem(value or "-"))
        self.table.resizeRowsToContents()
        self._on_selection_changed()

    def _get_selected_customer(self) -> Optional[Customer]:
        selected = self.table.selectionModel().selectedRows()
        if not selected:
            return None
        row = selected[0].row()
        if row < 0 or row >= len(self._customers):
            return None
        return self._customers[row]

    def _on_selection_changed(self) -> None:
        has_selection = self._get_selected_customer() is not None
        self.edit_button.setEnabled(has_selection)
        self.delete_button.setEnabled(has_selection)

    def _on_new(self) -> None:
        dialog = CustomerDialog(self)
        if dialog.exec() != QtWidgets.QDialog.Accepted:
            return
        data = dialog.get_data()
        try:
            self._services.customer_repo.create(
                name=data["name"] or "",
                email=data["email"],
                phone=data["phone"],
                address=data["address"],
                notes=data["notes"],
            )
        except Exception as exc:
            self.show_error(exc, "Could not save the customer. Try again.")
            return
        self._services.data_bus.notify(f"Customer {data['name']} added.")

    def _on_edit(self) -> None:
        customer = self._get_selected_customer()
        if not customer or not customer.id:
            return
        dialog = CustomerDialog(self, customer=customer)
        if dialog.exec() != QtWidgets.QDialog.Accepted:
            return
        data = dialog.get_data()
        try:
            updated = self._services.customer_repo.update(
                customer_id=customer.id,
                name=data["name"] or "",
                email=data["email"],
                phone=data["phone"],
                address=data["address"],
                notes=data["notes"],
            )
        except Exception as exc:
            self.show_error(exc, "Could not update the customer. Try again.")
            return
        if not updated:
            QtWidgets.QMessageBox.warning(
                self, TITLE_WARNING, "The customer no longer exists."
            )
        self._services.data_bus.notify(f"Customer {data['name']} updated.")

    def _on_delete(self) -> None:
        customer = self._get_selected_customer()
        if not customer or not customer.id:
            return
        response = QtWidgets.QMessageBox.question(
            self,
            TITLE_CONFIRMATION,
            f"Delete customer '{customer.name}'?",
            QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
        )
        if response != QtWidgets.QMessageBox.Yes:
            return
        try:
            success = self._services.customer_repo.delete(customer.id)
        except Exception as exc:
            self.show_error(
                exc,
                "Could not delete the customer. Customers with estimates or "
                "invoices cannot be removed.",
            )
            return
        if not success:
            QtWidgets.QMessageBox.warning(
                self, TITLE_WARNING, "The customer was already removed."
            )
        self._services.data_bus.notify(f"Customer {customer.name} deleted.")
