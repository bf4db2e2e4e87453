"""Card widgets with theme-aware styling."""

from __future__ import annotations

from PySide6 import QtWidgets

from crm_manager.utils.theme import ThemeManager

_DARK_CARD = """
QFrame#KpiCard {
    background: #2b2f36;
    border: 1px solid #3a3f48;
    border-radius: 12px;
}
QLabel#KpiTitle {
    color: rgba(255, 255, 255, 0.82);
    font-weight: 600;
    font-size: 13px;
}
QLabel#KpiValue {
    color: #ffffff;
    font-size: 22px;
    font-weight: 700;
}
"""

_LIGHT_CARD = """
QFrame#KpiCard {
    background: #ffffff;
    border: 1px solid rgba(0, 0, 0, 0.10);
    border-radius: 12px;
}
QLabel#KpiTitle {
    color: rgba(0, 0, 0, 0.70);
    font-weight: 600;
    font-size: 13px;
}
QLabel#KpiValue {
    color: #1e50a0;
    font-size: 22px;
    font-weight: 700;
}
"""


class KpiCard(QtWidgets.QFrame):
    """Summary card with title and value."""

    def __init__(
        self,
        theme_manager: ThemeManager,
        title: str,
        value: str = "-",
        parent: QtWidgets.QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._theme_manager = theme_manager
        self.setObjectName("KpiCard")

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(16, 12, 16, 12)
        layout.setSpacing(6)

        self._title_label = QtWidgets.QLabel(title)
        self._title_label.setObjectName("KpiTitle")
        self._value_label = QtWidgets.QLabel(value)
        self._value_label.setObjectName("KpiValue")
        layout.addWidget(self._title_label)
        layout.addWidget(self._value_label)

        self._theme_manager.theme_changed.connect(self.apply_theme)
        self.apply_theme()

    def set_value(self, value: str) -> None:
        self._value_label.setText(value)

    def apply_theme(self) -> None:
        self.setStyleSheet(_DARK_CARD if self._theme_manager.is_dark() else _LIGHT_CARD)
