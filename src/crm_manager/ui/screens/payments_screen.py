"""Screen for recording and removing payments."""

from __future__ import annotations

from typing import Optional

from PySide6 import QtCore, QtWidgets

from crm_manager.domain.models import Invoice, Payment, PaymentMethod
from crm_manager.ui.app_services import AppServices
from crm_manager.ui.screens.base_screen import BaseScreen
from crm_manager.ui.strings import (
    PAYMENT_METHOD_LABELS,
    TITLE_CONFIRMATION,
    TITLE_WARNING,
    status_label,
)
from crm_manager.utils.money import format_currency
from crm_manager.utils.theme import apply_table_theme


class PaymentDialog(QtWidgets.QDialog):
    """Collects a payment against one of the open invoices."""

    def __init__(
        self, invoices: list[Invoice], parent: QtWidgets.QWidget | None = None
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Record Payment")
        self.setModal(True)
        self.setMinimumWidth(460)

        layout = QtWidgets.QVBoxLayout(self)
        form = QtWidgets.QFormLayout()

        self.invoice_combo = QtWidgets.QComboBox()
        self.invoice_combo.addItem("Select an invoice", None)
        for invoice in invoices:
            label = (
                f"{invoice.number} - {invoice.customer_name or '-'} "
                f"(due {format_currency(invoice.amount_due)})"
            )
            self.invoice_combo.addItem(label, invoice)
        self.invoice_combo.currentIndexChanged.connect(self._on_invoice_changed)

        self.amount_input = QtWidgets.QDoubleSpinBox()
        self.amount_input.setPrefix("$ ")
        self.amount_input.setDecimals(2)
        self.amount_input.setMaximum(10_000_000)
        self.date_input = QtWidgets.QDateEdit(QtCore.QDate.currentDate())
        self.date_input.setCalendarPopup(True)
        self.date_input.setDisplayFormat("MM/dd/yyyy")
        self.method_combo = QtWidgets.QComboBox()
        for method in PaymentMethod:
            self.method_combo.addItem(PAYMENT_METHOD_LABELS[method], method.value)
        self.reference_input = QtWidgets.QLineEdit()
        self.reference_input.setPlaceholderText("Check number, transaction id...")
        self.notes_input = QtWidgets.QPlainTextEdit()
        self.notes_input.setFixedHeight(60)

        form.addRow("Invoice *", self.invoice_combo)
        form.addRow("Amount *", self.amount_input)
        form.addRow("Payment date *", self.date_input)
        form.addRow("Method", self.method_combo)
        form.addRow("Reference #", self.reference_input)
        form.addRow("Notes", self.notes_input)
        layout.addLayout(form)

        button_box = QtWidgets.QDialogButtonBox(
            QtWidgets.QDialogButtonBox.Save | QtWidgets.QDialogButtonBox.Cancel
        )
        button_box.accepted.connect(self._on_accept)
        button_box.rejected.connect(self.reject)
        layout.addWidget(button_box)

    def _on_invoice_changed(self) -> None:
        invoice: Optional[Invoice] = self.invoice_combo.currentData()
        if invoice is not None:
            self.amount_input.setValue(max(invoice.amount_due, 0.0))

    def _on_accept(self) -> None:
        if self.invoice_combo.currentData() is None:
            QtWidgets.QMessageBox.warning(self, TITLE_WARNING, "Select an invoice.")
            return
        if self.amount_input.value() <= 0:
            QtWidgets.QMessageBox.warning(
                self, TITLE_WARNING, "Payment amount must be greater than zero."
            )
            return
        self.accept()

    def get_data(self) -> dict[str, object]:
        invoice: Invoice = self.invoice_combo.currentData()
        return {
            "invoice_id": invoice.id,
            "amount": self.amount_input.value(),
            "payment_date": self.date_input.date().toString("yyyy-MM-dd"),
            "payment_method": self.method_combo.currentData(),
            "reference_number": self.reference_input.text().strip() or None,
            "notes": self.notes_input.toPlainText().strip() or None,
        }


class PaymentsScreen(BaseScreen):
    """All payments, newest first, with a running total received."""

    def __init__(self, services: AppServices) -> None:
        super().__init__(services)
        self._payments: list[Payment] = []
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)

        header_row = QtWidgets.QHBoxLayout()
        title = QtWidgets.QLabel("Payments")
        title.setStyleSheet("font-size: 24px; font-weight: 600;")
        self.record_button = QtWidgets.QPushButton("Record Payment")
        self.record_button.setMinimumHeight(40)
        self.record_button.clicked.connect(self._on_record)
        self.delete_button = QtWidgets.QPushButton("Delete")
        self.delete_button.setEnabled(False)
        self.delete_button.clicked.connect(self._on_delete)
        header_row.addWidget(title)
        header_row.addStretch()
        header_row.addWidget(self.delete_button)
        header_row.addWidget(self.record_button)
        layout.addLayout(header_row)

        self.total_label = QtWidgets.QLabel()
        self.total_label.setStyleSheet("font-size: 16px; font-weight: 600;")
        layout.addWidget(self.total_label)

        self.table = QtWidgets.QTableWidget(0, 6)
        self.table.setHorizontalHeaderLabels(
            ["Date", "Invoice #", "Customer", "Amount", "Method", "Reference"]
        )
        self.table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.table.verticalHeader().setVisible(False)
        self.table.itemSelectionChanged.connect(self._on_selection_changed)
        header = self.table.horizontalHeader()
        for column in range(6):
            header.setSectionResizeMode(column, QtWidgets.QHeaderView.ResizeToContents)
        header.setSectionResizeMode(2, QtWidgets.QHeaderView.Stretch)
        apply_table_theme(
            self.table, "dark" if self._services.theme_manager.is_dark() else "light"
        )
        self._services.theme_manager.theme_changed.connect(
            lambda theme, table=self.table: apply_table_theme(table, theme)
        )
        layout.addWidget(self.table)

    def refresh(self) -> None:
        service = self._services.payment_service
        try:
            self._payments = service.list_payments()
        except Exception as exc:
            self.show_error(exc, "Could not load payments.")
            return
        self.total_label.setText(
            f"Total received: {format_currency(service.total_received(self._payments))}"
        )
        self.table.setRowCount(len(self._payments))
        for row, payment in enumerate(self._payments):
            amount = QtWidgets.QTableWidgetItem(format_currency(payment.amount))
            amount.setTextAlignment(QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter)
            values = [
                QtWidgets.QTableWidgetItem(
                    QtCore.QDate.fromString(payment.payment_date[:10], "yyyy-MM-dd").toString(
                        "MM/dd/yyyy"
                    )
                ),
                QtWidgets.QTableWidgetItem(payment.invoice_number or "-"),
                QtWidgets.QTableWidgetItem(payment.customer_name or "-"),
                amount,
                QtWidgets.QTableWidgetItem(PAYMENT_METHOD_LABELS[payment.payment_method]),
                QtWidgets.QTableWidgetItem(payment.reference_number or "-"),
            ]
            for column, item in enumerate(values):
                self.table.setItem(row, column, item)
        self._on_selection_changed()

    def _selected_payment(self) -> Optional[Payment]:
        selected = self.table.selectionModel().selectedRows()
        if not selected:
            return None
        row = selected[0].row()
        if 0 <= row < len(self._payments):
            return self._payments[row]
        return None

    def _on_selection_changed(self) -> None:
        self.delete_button.setEnabled(self._selected_payment() is not None)

    def _on_record(self) -> None:
        try:
            invoices = self._services.payment_service.list_open_invoices()
        except Exception as exc:
            self.show_error(exc, "Could not load open invoices.")
            return
        if not invoices:
            QtWidgets.QMessageBox.information(
                self, "Payments", "There are no open invoices to pay."
            )
            return
        dialog = PaymentDialog(invoices, self)
        if dialog.exec() != QtWidgets.QDialog.Accepted:
            return
        try:
            _payment, balance = self._services.payment_service.record_payment(
                **dialog.get_data()
            )
        except Exception as exc:
            self.show_error(exc, "Failed to record payment.")
            return
        self._services.data_bus.notify("Payment recorded.")
        QtWidgets.QMessageBox.information(
            self,
            "Payments",
            f"Payment recorded. Invoice is now {status_label(balance.status.value)} "
            f"with {format_currency(balance.amount_due)} due.",
        )

    def _on_delete(self) -> None:
        payment = self._selected_payment()
        if payment is None or not payment.id:
            return
        response = QtWidgets.QMessageBox.question(
            self,
            TITLE_CONFIRMATION,
            f"Delete the {format_currency(payment.amount)} payment on "
            f"{payment.invoice_number or 'this invoice'}?",
            QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
        )
        if response != QtWidgets.QMessageBox.Yes:
            return
        try:
            balance = self._services.payment_service.delete_payment(payment.id)
        except Exception as exc:
            self.show_error(exc, "Failed to delete payment.")
            return
        self._services.data_bus.notify(
            f"Payment of {format_currency(payment.amount)} deleted; invoice is now "
            f"{status_label(balance.status.value)}."
        )
