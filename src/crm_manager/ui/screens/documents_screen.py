"""Estimates and invoices: listing, creation form, preview and export."""

from __future__ import annotations

import html
from pathlib import Path
from typing import Optional

from PySide6 import QtCore, QtPrintSupport, QtWidgets

from crm_manager.domain.models import (
    Customer,
    Document,
    DocumentBundle,
    DocumentKind,
)
from crm_manager.logging_config import get_logger
from crm_manager.paths import get_config_path, get_pdfs_dir
from crm_manager.services.document_service import LineItemDraft
from crm_manager.services.errors import ValidationError
from crm_manager.ui.app_services import AppServices
from crm_manager.ui.screens.base_screen import BaseScreen
from crm_manager.ui.strings import (
    STATUS_COLORS,
    TITLE_CONFIRMATION,
    TITLE_ERROR,
    TITLE_SUCCESS,
    TITLE_WARNING,
    kind_label,
    status_label,
)
from crm_manager.utils.documents import (
    DocumentsSettings,
    build_document_filename,
    load_documents_settings,
    save_documents_settings,
)
from crm_manager.utils.money import format_currency, grand_total, line_total
from crm_manager.utils.pdf_generator import generate_document_pdf
from crm_manager.utils.theme import apply_table_theme

ITEM_COLUMNS = ["Description", "Material", "Labor", "Total"]


def _format_date(value: Optional[str]) -> str:
    if not value:
        return "-"
    date_value = QtCore.QDate.fromString(value[:10], "yyyy-MM-dd")
    if date_value.isValid():
        return date_value.toString("MM/dd/yyyy")
    return value


def _new_date_edit(date: Optional[QtCore.QDate] = None) -> QtWidgets.QDateEdit:
    edit = QtWidgets.QDateEdit(date or QtCore.QDate.currentDate())
    edit.setCalendarPopup(True)
    edit.setDisplayFormat("MM/dd/yyyy")
    return edit


def _iso(edit: QtWidgets.QDateEdit) -> str:
    return edit.date().toString("yyyy-MM-dd")


def _ensure_documents_dir(parent: QtWidgets.QWidget, config_path: Path) -> Path | None:
    settings = load_documents_settings(config_path)
    if settings.documents_dir:
        candidate = Path(settings.documents_dir)
        if candidate.exists():
            return candidate

    selected = QtWidgets.QFileDialog.getExistingDirectory(
        parent,
        "Choose the default folder for PDFs",
        str(get_pdfs_dir()),
    )
    if not selected:
        return None
    chosen_path = Path(selected)
    chosen_path.mkdir(parents=True, exist_ok=True)
    save_documents_settings(config_path, DocumentsSettings(documents_dir=str(chosen_path)))
    return chosen_path


def _choose_document_path(parent: QtWidgets.QWidget, default_path: Path) -> Path | None:
    message = QtWidgets.QMessageBox(parent)
    message.setWindowTitle("Save PDF")
    message.setText("Save to the default folder or choose another location?")
    default_button = message.addButton(
        "Save to default folder", QtWidgets.QMessageBox.AcceptRole
    )
    save_as_button = message.addButton("Save as...", QtWidgets.QMessageBox.ActionRole)
    message.addButton("Cancel", QtWidgets.QMessageBox.RejectRole)
    message.exec()

    if message.clickedButton() == default_button:
        return default_path
    if message.clickedButton() == save_as_button:
        selected, _ = QtWidgets.QFileDialog.getSaveFileName(
            parent, "Save PDF", str(default_path), "PDF (*.pdf)"
        )
        if not selected:
            return None
        chosen = Path(selected)
        if chosen.suffix.lower() != ".pdf":
            chosen = chosen.with_suffix(".pdf")
        return chosen
    return None


def export_bundle_pdf(parent: QtWidgets.QWidget, bundle: DocumentBundle) -> Optional[Path]:
    """Ask where to save and write the PDF; errors are reported in a message box."""
    logger = get_logger(__name__)
    try:
        documents_dir = _ensure_documents_dir(parent, get_config_path())
        if not documents_dir:
            return None
        file_name = build_document_filename(bundle.kind, bundle.document.number)
        output_path = _choose_document_path(parent, documents_dir / file_name)
        if not output_path:
            return None
        generate_document_pdf(bundle, output_path)
    except Exception:
        logger.exception("Failed to generate PDF for %s", bundle.document.number)
        QtWidgets.QMessageBox.critical(parent, TITLE_ERROR, "Failed to generate PDF.")
        return None
    QtWidgets.QMessageBox.information(parent, TITLE_SUCCESS, f"PDF saved to:\n{output_path}")
    return output_path


def bundle_to_html(bundle: DocumentBundle) -> str:
    """Printable HTML for the preview and the print dialog."""
    document = bundle.document
    esc = html.escape
    title = bundle.kind.value.upper()
    if bundle.kind is DocumentKind.INVOICE:
        meta = [
            (f"{title} #", document.number),
            ("Invoice Date", _format_date(document.invoice_date)),
            ("Due Date", _format_date(document.due_date)),
            ("Work Completed", _format_date(document.work_completed_date)),
        ]
        totals = [
            ("TOTAL", document.total_amount),
            ("PAID", document.amount_paid),
            ("BALANCE DUE", document.amount_due),
        ]
    else:
        meta = [
            (f"{title} #", document.number),
            ("Date", _format_date(document.estimate_date)),
            ("Expires", _format_date(document.expiry_date)),
        ]
        totals = [("TOTAL", document.total_amount)]

    parts = [f"<h1 style='color:#1e50a0'>{title}</h1><table cellpadding='2'>"]
    for label, value in meta:
        parts.append(f"<tr><td><b>{esc(label)}:</b></td><td>{esc(value or '-')}</td></tr>")
    parts.append("</table>")

    customer = bundle.customer
    parts.append("<h3>BILL TO</h3>")
    parts.append(f"<b>{esc(customer.name)}</b><br/>")
    for value in (customer.address, customer.email, customer.phone):
        if value:
            parts.append(f"{esc(value)}<br/>")
    parts.append(f"<h3>TECHNICIAN</h3><b>{esc(document.tech_name or '-')}</b>")

    parts.append(
        "<h3>LINE ITEMS</h3><table width='100%' border='1' cellspacing='0' cellpadding='4'>"
        "<tr style='background:#1e50a0;color:white'>"
        + "".join(f"<th>{name}</th>" for name in ITEM_COLUMNS)
        + "</tr>"
    )
    for item in bundle.items:
        parts.append(
            f"<tr><td>{esc(item.description)}</td>"
            f"<td align='right'>{format_currency(item.material_cost)}</td>"
            f"<td align='right'>{format_currency(item.labor_cost)}</td>"
            f"<td align='right'>{format_currency(item.total_cost)}</td></tr>"
        )
    parts.append("</table><br/><table align='right' cellpadding='4'>")
    for label, amount in totals:
        parts.append(
            f"<tr><td><b>{label}</b></td><td align='right'><b>{format_currency(amount)}</b></td></tr>"
        )
    parts.append("</table><br clear='all'/>")

    if bundle.payments:
        parts.append("<h3>PAYMENT HISTORY</h3><table cellpadding='3'>")
        for payment in bundle.payments:
            parts.append(
                f"<tr><td>{_format_date(payment.payment_date)}</td>"
                f"<td>{format_currency(payment.amount)}</td>"
                f"<td>{payment.payment_method.value.upper()}</td>"
                f"<td>{esc(payment.reference_number or '-')}</td></tr>"
            )
        parts.append("</table>")

    if document.notes:
        notes = esc(document.notes).replace("\n", "<br/>")
        parts.append(f"<h3>NOTES</h3><p>{notes}</p>")
    return "".join(parts)


class DocumentPreviewDialog(QtWidgets.QDialog):
    """Read-only view of a saved document with PDF and print actions."""

    def __init__(self, bundle: DocumentBundle, parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__(parent)
        self._bundle = bundle
        self._logger = get_logger(self.__class__.__name__)
        self.setWindowTitle(f"{kind_label(bundle.kind)} {bundle.document.number}")
        self.resize(720, 800)

        layout = QtWidgets.QVBoxLayout(self)
        self._browser = QtWidgets.QTextBrowser()
        self._browser.setHtml(bundle_to_html(bundle))
        layout.addWidget(self._browser)

        buttons = QtWidgets.QHBoxLayout()
        back_button = QtWidgets.QPushButton("Close")
        print_button = QtWidgets.QPushButton("Print")
        pdf_button = QtWidgets.QPushButton("Download PDF")
        back_button.clicked.connect(self.accept)
        print_button.clicked.connect(self._on_print)
        pdf_button.clicked.connect(lambda: export_bundle_pdf(self, self._bundle))
        buttons.addWidget(back_button)
        buttons.addStretch()
        buttons.addWidget(print_button)
        buttons.addWidget(pdf_button)
        layout.addLayout(buttons)

    def _on_print(self) -> None:
        printer = QtPrintSupport.QPrinter(QtPrintSupport.QPrinter.HighResolution)
        dialog = QtPrintSupport.QPrintDialog(printer, self)
        if dialog.exec() != QtWidgets.QDialog.Accepted:
            return
        self._browser.document().print_(printer)
        self._logger.info("Sent %s to printer", self._bundle.document.number)


class DocumentFormDialog(QtWidgets.QDialog):
    """Create an estimate or invoice with a dynamic list of line items."""

    def __init__(
        self,
        services: AppServices,
        kind: DocumentKind,
        parent: QtWidgets.QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._services = services
        self._kind = kind
        self._customers: list[Customer] = []
        self._bundle: Optional[DocumentBundle] = None
        self._updating_items = False
        self.setWindowTitle(f"New {kind_label(kind)}")
        self.resize(760, 680)
        self._build_ui()
        self._load_customers()
        self.number_input.setText(
            services.document_service.numbering.suggest_number(kind)
        )
        self._add_item_row()

    @property
    def bundle(self) -> Optional[DocumentBundle]:
        return self._bundle

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        form = QtWidgets.QFormLayout()

        self.number_input = QtWidgets.QLineEdit()
        self.customer_combo = QtWidgets.QComboBox()
        self.tech_input = QtWidgets.QLineEdit()
        self.date_input = _new_date_edit()
        form.addRow(f"{kind_label(self._kind)} # *", self.number_input)
        form.addRow("Customer *", self.customer_combo)
        form.addRow("Technician *", self.tech_input)

        if self._kind is DocumentKind.INVOICE:
            self.due_date_input = _new_date_edit(QtCore.QDate.currentDate().addDays(30))
            self.work_date_input = _new_date_edit()
            form.addRow("Invoice date *", self.date_input)
            form.addRow("Due date *", self.due_date_input)
            form.addRow("Work completed *", self.work_date_input)
        else:
            self.expiry_check = QtWidgets.QCheckBox("Expires")
            self.expiry_input = _new_date_edit(QtCore.QDate.currentDate().addDays(30))
            self.expiry_input.setEnabled(False)
            self.expiry_check.toggled.connect(self.expiry_input.setEnabled)
            expiry_row = QtWidgets.QHBoxLayout()
            expiry_row.addWidget(self.expiry_check)
            expiry_row.addWidget(self.expiry_input)
            expiry_row.addStretch()
            form.addRow("Estimate date *", self.date_input)
            form.addRow("Expiry", expiry_row)

        self.status_combo = QtWidgets.QComboBox()
        for status in self._kind.status_enum:
            self.status_combo.addItem(status_label(status.value), status.value)
        form.addRow("Status", self.status_combo)
        layout.addLayout(form)

        items_group = QtWidgets.QGroupBox("Line items")
        items_layout = QtWidgets.QVBoxLayout(items_group)
        self.items_table = QtWidgets.QTableWidget(0, len(ITEM_COLUMNS))
        self.items_table.setHorizontalHeaderLabels(ITEM_COLUMNS)
        self.items_table.verticalHeader().setVisible(False)
        header = self.items_table.horizontalHeader()
        header.setSectionResizeMode(0, QtWidgets.QHeaderView.Stretch)
        for column in range(1, len(ITEM_COLUMNS)):
            header.setSectionResizeMode(column, QtWidgets.QHeaderView.ResizeToContents)
        self.items_table.itemChanged.connect(self._on_item_changed)
        apply_table_theme(
            self.items_table,
            "dark" if self._services.theme_manager.is_dark() else "light",
        )
        items_layout.addWidget(self.items_table)

        item_buttons = QtWidgets.QHBoxLayout()
        add_button = QtWidgets.QPushButton("Add line item")
        remove_button = QtWidgets.QPushButton("Remove selected")
        add_button.clicked.connect(self._add_item_row)
        remove_button.clicked.connect(self._remove_selected_row)
        item_buttons.addWidget(add_button)
        item_buttons.addWidget(remove_button)
        item_buttons.addStretch()
        self.total_label = QtWidgets.QLabel(f"Total: {format_currency(0)}")
        self.total_label.setStyleSheet("font-size: 18px; font-weight: 600;")
        item_buttons.addWidget(self.total_label)
        items_layout.addLayout(item_buttons)
        layout.addWidget(items_group)

        self.notes_input = QtWidgets.QPlainTextEdit()
        self.notes_input.setPlaceholderText(
            "Scope of work" if self._kind is DocumentKind.INVOICE else "Notes"
        )
        self.notes_input.setFixedHeight(90)
        layout.addWidget(self.notes_input)

        self.button_box = QtWidgets.QDialogButtonBox(
            QtWidgets.QDialogButtonBox.Save | QtWidgets.QDialogButtonBox.Cancel
        )
        self.button_box.accepted.connect(self._on_save)
        self.button_box.rejected.connect(self.reject)
        layout.addWidget(self.button_box)

    def _load_customers(self) -> None:
        try:
            self._customers = self._services.customer_repo.list_all()
        except Exception:
            get_logger(self.__class__.__name__).exception("Failed to load customers")
            QtWidgets.QMessageBox.critical(self, TITLE_ERROR, "Could not load customers.")
            return
        self.customer_combo.clear()
        self.customer_combo.addItem("Select a customer", None)
        for customer in self._customers:
            self.customer_combo.addItem(customer.name, customer.id)

    def _add_item_row(self) -> None:
        self._updating_items = True
        row = self.items_table.rowCount()
        self.items_table.insertRow(row)
        for column in range(len(ITEM_COLUMNS)):
            item = QtWidgets.QTableWidgetItem("")
            if column > 0:
                item.setTextAlignment(QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter)
            self.items_table.setItem(row, column, item)
        total_item = self.items_table.item(row, 3)
        total_item.setFlags(total_item.flags() & ~QtCore.Qt.ItemIsEditable)
        total_item.setText(format_currency(0))
        self._updating_items = False

    def _remove_selected_row(self) -> None:
        row = self.items_table.currentRow()
        if row < 0 or self.items_table.rowCount() <= 1:
            return
        self.items_table.removeRow(row)
        self._update_total()

    def _cell_text(self, row: int, column: int) -> str:
        item = self.items_table.item(row, column)
        return item.text().strip() if item else ""

    def _on_item_changed(self, item: QtWidgets.QTableWidgetItem) -> None:
        if self._updating_items or item.column() not in (1, 2):
            return
        row = item.row()
        self._updating_items = True
        self.items_table.item(row, 3).setText(
            format_currency(line_total(self._cell_text(row, 1), self._cell_text(row, 2)))
        )
        self._updating_items = False
        self._update_total()

    def _drafts(self) -> list[LineItemDraft]:
        drafts = []
        for row in range(self.items_table.rowCount()):
            description = self._cell_text(row, 0)
            material = self._cell_text(row, 1)
            labor = self._cell_text(row, 2)
            if not (description or material or labor):
                continue
            drafts.append(LineItemDraft(description, material, labor))
        return drafts

    def _update_total(self) -> None:
        total = grand_total(self._drafts())
        self.total_label.setText(f"Total: {format_currency(total)}")

    def _on_save(self) -> None:
        service = self._services.document_service
        common = dict(
            customer_id=self.customer_combo.currentData() or "",
            tech_name=self.tech_input.text(),
            notes=self.notes_input.toPlainText().strip() or None,
            items=self._drafts(),
            status=self.status_combo.currentData(),
        )
        try:
            if self._kind is DocumentKind.INVOICE:
                bundle = service.create_invoice(
                    invoice_number=self.number_input.text(),
                    invoice_date=_iso(self.date_input),
                    due_date=_iso(self.due_date_input),
                    work_completed_date=_iso(self.work_date_input),
                    **common,
                )
            else:
                bundle = service.create_estimate(
                    estimate_number=self.number_input.text(),
                    estimate_date=_iso(self.date_input),
                    expiry_date=(
                        _iso(self.expiry_input) if self.expiry_check.isChecked() else None
                    ),
                    **common,
                )
        except ValidationError as exc:
            QtWidgets.QMessageBox.warning(self, TITLE_WARNING, str(exc))
            return
        except Exception as exc:
            get_logger(self.__class__.__name__).exception(
                "Failed to save %s", self._kind.value
            )
            QtWidgets.QMessageBox.critical(
                self, TITLE_ERROR, f"Error saving {self._kind.value}: {exc}"
            )
            return
        self._bundle = bundle
        self.accept()


class DocumentsScreen(BaseScreen):
    """List of estimates or invoices with per-row status and actions."""

    def __init__(self, services: AppServices, kind: DocumentKind) -> None:
        super().__init__(services)
        self._kind = kind
        self._documents: list[Document] = []
        self._build_ui()

    def _columns(self) -> list[str]:
        if self._kind is DocumentKind.INVOICE:
            return [
                "Invoice #",
                "Customer",
                "Date",
                "Due",
                "Total",
                "Paid",
                "Balance",
                "Status",
                "Actions",
            ]
        return ["Estimate #", "Customer", "Date", "Expires", "Total", "Status", "Actions"]

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)

        header_row = QtWidgets.QHBoxLayout()
        title = QtWidgets.QLabel(kind_label(self._kind, plural=True))
        title.setStyleSheet("font-size: 24px; font-weight: 600;")
        self.new_button = QtWidgets.QPushButton(f"New {kind_label(self._kind)}")
        self.new_button.setMinimumHeight(40)
        self.new_button.clicked.connect(self._on_new)
        header_row.addWidget(title)
        header_row.addStretch()
        header_row.addWidget(self.new_button)
        layout.addLayout(header_row)

        columns = self._columns()
        self.table = QtWidgets.QTableWidget(0, len(columns))
        self.table.setHorizontalHeaderLabels(columns)
        self.table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.table.verticalHeader().setVisible(False)
        header = self.table.horizontalHeader()
        for column in range(len(columns)):
            header.setSectionResizeMode(column, QtWidgets.QHeaderView.ResizeToContents)
        header.setSectionResizeMode(1, QtWidgets.QHeaderView.Stretch)
        apply_table_theme(
            self.table, "dark" if self._services.theme_manager.is_dark() else "light"
        )
        self._services.theme_manager.theme_changed.connect(
            lambda theme, table=self.table: apply_table_theme(table, theme)
        )
        layout.addWidget(self.table)

        self._status_label = QtWidgets.QLabel()
        self._status_label.setStyleSheet("color: #666;")
        layout.addWidget(self._status_label)

    def refresh(self) -> None:
        try:
            self._documents = self._services.document_service.list_documents(self._kind)
        except Exception as exc:
            self.show_error(exc, f"Could not load {self._kind.value}s.")
            return
        self._render()

    def _render(self) -> None:
        self.table.setRowCount(len(self._documents))
        if not self._documents:
            self._status_label.setText(f"No {self._kind.value}s yet.")
        else:
            self._status_label.setText(f"{len(self._documents)} {self._kind.value}(s).")
        for row, document in enumerate(self._documents):
            if self._kind is DocumentKind.INVOICE:
                values = [
                    document.number,
                    document.customer_name or "-",
                    _format_date(document.invoice_date),
                    _format_date(document.due_date),
                    format_currency(document.total_amount),
                    format_currency(document.amount_paid),
                    format_currency(document.amount_due),
                ]
            else:
                values = [
                    document.number,
                    document.customer_name or "-",
                    _format_date(document.estimate_date),
                    _format_date(document.expiry_date),
                    format_currency(document.total_amount),
                ]
            for column, value in enumerate(values):
                item = QtWidgets.QTableWidgetItem(value)
                if value.startswith(("$", "-$")):
                    item.setTextAlignment(QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter)
                self.table.setItem(row, column, item)
            status_column = len(values)
            self.table.setCellWidget(row, status_column, self._build_status_cell(document))
            self.table.setCellWidget(row, status_column + 1, self._build_actions_cell(document))
        self.table.resizeRowsToContents()

    def _build_status_cell(self, document: Document) -> QtWidgets.QComboBox:
        combo = QtWidgets.QComboBox()
        for status in self._kind.status_enum:
            combo.addItem(status_label(status.value), status.value)
        combo.setCurrentIndex(max(combo.findData(document.status.value), 0))
        color = STATUS_COLORS.get(document.status.value)
        if color:
            combo.setStyleSheet(f"color: {color}; font-weight: 600;")
        combo.currentIndexChanged.connect(
            lambda _index, doc=document, box=combo: self._on_status_changed(doc, box.currentData())
        )
        return combo

    def _build_actions_cell(self, document: Document) -> QtWidgets.QWidget:
        container = QtWidgets.QWidget()
        layout = QtWidgets.QHBoxLayout(container)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)
        for label, handler in (
            ("View", self._on_view),
            ("PDF", self._on_pdf),
            ("Delete", self._on_delete),
        ):
            button = QtWidgets.QPushButton(label)
            button.clicked.connect(lambda _checked=False, doc=document, fn=handler: fn(doc))
            layout.addWidget(button)
        layout.addStretch()
        return container

    def _on_new(self) -> None:
        dialog = DocumentFormDialog(self._services, self._kind, self)
        if dialog.exec() != QtWidgets.QDialog.Accepted or dialog.bundle is None:
            return
        self._services.data_bus.notify(
            f"{kind_label(self._kind)} {dialog.bundle.document.number} saved."
        )
        DocumentPreviewDialog(dialog.bundle, self).exec()

    def _load_bundle(self, document: Document) -> Optional[DocumentBundle]:
        try:
            return self._services.document_service.load_bundle(self._kind, document.id)
        except Exception as exc:
            self.show_error(exc, f"Could not load {self._kind.value} {document.number}.")
            return None

    def _on_view(self, document: Document) -> None:
        bundle = self._load_bundle(document)
        if bundle is not None:
            DocumentPreviewDialog(bundle, self).exec()

    def _on_pdf(self, document: Document) -> None:
        bundle = self._load_bundle(document)
        if bundle is not None:
            export_bundle_pdf(self, bundle)

    def _on_status_changed(self, document: Document, status: str) -> None:
        if status == document.status.value:
            return
        try:
            self._services.document_service.set_status(self._kind, document.id, status)
        except Exception as exc:
            self.show_error(exc, "Failed to update status.")
            return
        self._services.data_bus.notify(
            f"{kind_label(self._kind)} {document.number} marked {status_label(status)}."
        )

    def _on_delete(self, document: Document) -> None:
        response = QtWidgets.QMessageBox.question(
            self,
            TITLE_CONFIRMATION,
            f"Delete {self._kind.value} {document.number}? This cannot be undone.",
            QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
        )
        if response != QtWidgets.QMessageBox.Yes:
            return
        try:
            self._services.document_service.delete_document(self._kind, document.id)
        except Exception as exc:
            self.show_error(exc, f"Could not delete {self._kind.value} {document.number}.")
            return
        self._services.data_bus.notify(f"{kind_label(self._kind)} {document.number} deleted.")
