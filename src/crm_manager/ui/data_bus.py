"""Signals shared by every screen."""

from __future__ import annotations

from PySide6 import QtCore


class DataEventBus(QtCore.QObject):
    """Screens emit after writes; the main window and other screens listen."""

    data_changed = QtCore.Signal()
    status_message = QtCore.Signal(str)

    def notify(self, message: str) -> None:
        """Announce a completed write and ask screens to reload."""
        self.status_message.emit(message)
        self.data_changed.emit()
