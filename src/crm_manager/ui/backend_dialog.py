"""Dialog asking for the backend URL and public key."""

from __future__ import annotations

from PySide6 import QtGui, QtWidgets

from crm_manager.config import SUPABASE_KEY_ENV, SUPABASE_URL_ENV
from crm_manager.db.client import BackendSettings
from crm_manager.db.schema import SCHEMA_SQL
from crm_manager.ui.strings import TITLE_WARNING


class BackendSettingsDialog(QtWidgets.QDialog):
    def __init__(self, message: str, parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Backend connection")
        self.setMinimumWidth(520)

        layout = QtWidgets.QVBoxLayout(self)
        info = QtWidgets.QLabel(
            f"{message}\n\nEnter the project URL and public (anon) key. They can also "
            f"be provided with {SUPABASE_URL_ENV} and {SUPABASE_KEY_ENV}."
        )
        info.setWordWrap(True)
        layout.addWidget(info)

        form = QtWidgets.QFormLayout()
        self.url_input = QtWidgets.QLineEdit()
        self.url_input.setPlaceholderText("https://<project>.supabase.co")
        self.key_input = QtWidgets.QLineEdit()
        self.key_input.setEchoMode(QtWidgets.QLineEdit.Password)
        form.addRow("Project URL", self.url_input)
        form.addRow("Anon key", self.key_input)
        layout.addLayout(form)

        button_box = QtWidgets.QDialogButtonBox(
            QtWidgets.QDialogButtonBox.Save | QtWidgets.QDialogButtonBox.Cancel
        )
        button_box.accepted.connect(self._on_accept)
        button_box.rejected.connect(self.reject)
        schema_button = button_box.addButton(
            "Copy schema SQL", QtWidgets.QDialogButtonBox.ActionRole
        )
        schema_button.setToolTip("Tables to create in a new project's SQL editor")
        schema_button.clicked.connect(self._copy_schema)
        layout.addWidget(button_box)

    def _copy_schema(self) -> None:
        QtGui.QGuiApplication.clipboard().setText(SCHEMA_SQL.strip())
        QtWidgets.QMessageBox.information(
            self, "Backend connection", "Schema SQL copied to the clipboard."
        )

    def _on_accept(self) -> None:
        if not self.url_input.text().strip() or not self.key_input.text().strip():
            QtWidgets.QMessageBox.warning(
                self, TITLE_WARNING, "Both the URL and the key are required."
            )
            return
        self.accept()

    def get_settings(self) -> BackendSettings:
        return BackendSettings(
            url=self.url_input.text().strip(),
            anon_key=self.key_input.text().strip(),
        )
