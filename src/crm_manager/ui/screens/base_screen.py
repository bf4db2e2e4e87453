"""Base class for screens that can refresh their data."""

from __future__ import annotations

from PySide6 import QtWidgets

from crm_manager.logging_config import get_logger
from crm_manager.services.errors import ValidationError
from crm_manager.ui.app_services import AppServices
from crm_manager.ui.strings import TITLE_ERROR, TITLE_WARNING


class BaseScreen(QtWidgets.QWidget):
    """Base screen with refresh hooks and data change handling."""

    def __init__(self, services: AppServices) -> None:
        super().__init__()
        self._services = services
        self._needs_refresh = False
        self._logger = get_logger(self.__class__.__name__)
        self._services.data_bus.data_changed.connect(self._on_data_changed)

    def refresh(self) -> None:
        """Reload data for this screen."""

    def show_error(self, exc: Exception, message: str) -> None:
        """Warn on validation problems, otherwise log and show ``message``."""
        if isinstance(exc, ValidationError):
            QtWidgets.QMessageBox.warning(self, TITLE_WARNING, str(exc))
            return
        self._logger.error("%s: %s", message, exc, exc_info=exc)
        QtWidgets.QMessageBox.critical(self, TITLE_ERROR, message)

    def _on_data_changed(self) -> None:
        if self.isVisible():
            self.refresh()
        else:
            self._needs_refresh = True

    def showEvent(self, event) -> None:
        super().showEvent(event)
        if self._needs_refresh:
            self._needs_refresh = False
            self.refresh()
