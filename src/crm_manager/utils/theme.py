"""Light/dark theming for the Qt application."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from PySide6 import QtCore, QtGui, QtWidgets

from crm_manager.logging_config import get_logger
from crm_manager.utils.config_store import load_config_data, update_config_value

ThemeChoice = Literal["light", "dark", "system"]
THEME_CHOICES = ("light", "dark", "system")


@dataclass(frozen=True)
class ThemeSettings:
    theme: ThemeChoice = "system"


def load_theme_settings(config_path: Path) -> ThemeSettings:
    data = load_config_data(config_path)
    theme = data.get("theme", "system")
    if theme not in THEME_CHOICES:
        theme = "system"
    return ThemeSettings(theme=theme)


def save_theme_settings(config_path: Path, settings: ThemeSettings) -> None:
    update_config_value(config_path, "theme", settings.theme)


def resolve_theme_choice(choice: ThemeChoice) -> str:
    """Map a stored choice to "light" or "dark", asking Qt for "system"."""
    if choice in ("light", "dark"):
        return choice
    app = QtGui.QGuiApplication.instance()
    if app is None:
        return "light"
    scheme = QtGui.QGuiApplication.styleHints().colorScheme()
    return "dark" if scheme == QtCore.Qt.ColorScheme.Dark else "light"


class ThemeManager(QtCore.QObject):
    """Applies the configured theme and notifies screens when it changes."""

    theme_changed = QtCore.Signal(str)

    def __init__(self, app: QtWidgets.QApplication, config_path: Path) -> None:
        super().__init__()
        self._app = app
        self._config_path = config_path
        self._settings = load_theme_settings(config_path)
        self._resolved_theme = "light"
        self._logger = get_logger(self.__class__.__name__)
        self._apply_theme()

    @property
    def theme_choice(self) -> ThemeChoice:
        return self._settings.theme

    def is_dark(self) -> bool:
        return self._resolved_theme == "dark"

    def set_theme(self, choice: ThemeChoice) -> None:
        if choice not in THEME_CHOICES:
            choice = "system"
        self._settings = ThemeSettings(theme=choice)
        try:
            save_theme_settings(self._config_path, self._settings)
        except OSError:
            self._logger.warning("Could not save the theme preference.")
        self._apply_theme()
        self.theme_changed.emit(self._resolved_theme)

    def _apply_theme(self) -> None:
        self._resolved_theme = resolve_theme_choice(self._settings.theme)
        self._app.setStyle("Fusion")
        if self._resolved_theme == "dark":
            self._app.setPalette(_build_dark_palette())
            self._app.setStyleSheet(_DARK_STYLESHEET)
        else:
            self._app.setPalette(self._app.style().standardPalette())
            self._app.setStyleSheet("")
        self._logger.info(
            "Theme applied: %s (configured: %s)",
            self._resolved_theme,
            self._settings.theme,
        )


def apply_table_theme(table: QtWidgets.QTableView, theme_name: str) -> None:
    """Table colors for the current theme without touching the global palette."""
    table.setAlternatingRowColors(True)
    if theme_name == "dark":
        palette = table.palette()
        palette.setColor(QtGui.QPalette.Base, QtGui.QColor("#1f1f1f"))
        palette.setColor(QtGui.QPalette.AlternateBase, QtGui.QColor("#242424"))
        palette.setColor(QtGui.QPalette.Text, QtGui.QColor("#f0f0f0"))
        palette.setColor(QtGui.QPalette.Highlight, QtGui.QColor("#1e50a0"))
        palette.setColor(QtGui.QPalette.HighlightedText, QtGui.QColor("#ffffff"))
        table.setPalette(palette)
    else:
        table.setPalette(QtWidgets.QApplication.style().standardPalette())


def _build_dark_palette() -> QtGui.QPalette:
    palette = QtGui.QPalette()
    roles = {
        QtGui.QPalette.Window: (32, 34, 40),
        QtGui.QPalette.WindowText: (240, 240, 240),
        QtGui.QPalette.Base: (24, 26, 31),
        QtGui.QPalette.AlternateBase: (32, 34, 40),
        QtGui.QPalette.Text: (240, 240, 240),
        QtGui.QPalette.Button: (45, 48, 58),
        QtGui.QPalette.ButtonText: (240, 240, 240),
        QtGui.QPalette.Highlight: (30, 80, 160),
        QtGui.QPalette.HighlightedText: (255, 255, 255),
        QtGui.QPalette.PlaceholderText: (143, 152, 170),
    }
    for role, rgb in roles.items():
        palette.setColor(role, QtGui.QColor(*rgb))
    return palette


_DARK_STYLESHEET = """
QHeaderView::section {
    background-color: #2b2f36;
    color: #f1f1f1;
    padding: 6px 8px;
    border: 1px solid #3a3f48;
}
QFrame#sidebar {
    background-color: #1f232b;
}
QPushButton[nav="true"]:checked {
    background-color: #1e50a0;
    color: #ffffff;
}
QLineEdit, QTextEdit, QPlainTextEdit, QDoubleSpinBox, QDateEdit {
    border: 1px solid #4c566a;
    border-radius: 6px;
    padding: 4px;
}
"""
