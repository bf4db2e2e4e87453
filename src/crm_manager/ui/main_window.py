"""Main window for the CRM Manager application."""

from __future__ import annotations

from PySide6 import QtCore, QtGui, QtWidgets

from crm_manager.domain.models import DocumentKind
from crm_manager.ui.app_services import AppServices
from crm_manager.ui.screens import (
    CustomersScreen,
    DashboardScreen,
    DocumentsScreen,
    PaymentsScreen,
)
from crm_manager.ui.strings import APP_NAME
from crm_manager.version import __version__

STATUS_TIMEOUT_MS = 5000


class MainWindow(QtWidgets.QMainWindow):
    """Primary window with navigation and stacked screens."""

    def __init__(self, services: AppServices) -> None:
        super().__init__()
        self._services = services
        self._stack = QtWidgets.QStackedWidget()
        self._theme_manager = services.theme_manager
        self.setWindowTitle(f"{APP_NAME} - v{__version__}")
        self.resize(1200, 720)
        self._build_ui()

    def _build_ui(self) -> None:
        central = QtWidgets.QWidget(self)
        main_layout = QtWidgets.QHBoxLayout(central)
        main_layout.setContentsMargins(0, 0, 0, 0)

        sidebar = QtWidgets.QFrame()
        sidebar.setObjectName("sidebar")
        sidebar.setFixedWidth(220)
        sidebar_layout = QtWidgets.QVBoxLayout(sidebar)
        sidebar_layout.setContentsMargins(16, 16, 16, 16)
        sidebar_layout.setSpacing(12)

        title = QtWidgets.QLabel(APP_NAME)
        title.setStyleSheet("font-size: 18px; font-weight: 600;")
        sidebar_layout.addWidget(title)

        button_group = QtWidgets.QButtonGroup(self)
        button_group.setExclusive(True)

        screens = [
            ("Dashboard", DashboardScreen(self._services)),
            ("Customers", CustomersScreen(self._services)),
            ("Estimates", DocumentsScreen(self._services, DocumentKind.ESTIMATE)),
            ("Invoices", DocumentsScreen(self._services, DocumentKind.INVOICE)),
            ("Payments", PaymentsScreen(self._services)),
        ]
        for index, (label, screen) in enumerate(screens):
            button = QtWidgets.QPushButton(label)
            button.setCheckable(True)
            button.setProperty("nav", True)
            button.setMinimumHeight(48)
            button.clicked.connect(lambda _checked, idx=index: self._stack.setCurrentIndex(idx))
            button_group.addButton(button)
            sidebar_layout.addWidget(button)
            self._stack.addWidget(screen)

        sidebar_layout.addStretch()
        main_layout.addWidget(sidebar)
        main_layout.addWidget(self._stack)

        self.setCentralWidget(central)
        self.setStyleSheet(
            """
            QPushButton[nav="true"] {
                font-size: 16px;
                padding: 10px;
                text-align: left;
                border-radius: 8px;
            }
            """
        )
        self._build_menu()
        self._services.data_bus.status_message.connect(
            lambda message: self.statusBar().showMessage(message, STATUS_TIMEOUT_MS)
        )
        button_group.buttons()[0].setChecked(True)
        self._stack.currentChanged.connect(self._on_screen_changed)
        self._stack.setCurrentIndex(0)
        self._on_screen_changed(0)

    def _on_screen_changed(self, index: int) -> None:
        screen = self._stack.widget(index)
        refresh = getattr(screen, "refresh", None)
        if callable(refresh):
            refresh()

    def _build_menu(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("File")
        refresh_action = file_menu.addAction("Refresh")
        refresh_action.setShortcut(QtGui.QKeySequence.Refresh)
        refresh_action.triggered.connect(
            lambda: self._on_screen_changed(self._stack.currentIndex())
        )
        exit_action = file_menu.addAction("Exit")
        exit_action.triggered.connect(self.close)

        view_menu = menu_bar.addMenu("View")
        theme_menu = view_menu.addMenu("Theme")
        theme_group = QtGui.QActionGroup(self)
        theme_group.setExclusive(True)
        for key, label in (("light", "Light"), ("dark", "Dark"), ("system", "System")):
            action = theme_menu.addAction(label)
            action.setCheckable(True)
            action.setData(key)
            action.setChecked(key == self._theme_manager.theme_choice)
            theme_group.addAction(action)
        theme_group.triggered.connect(
            lambda action: self._theme_manager.set_theme(action.data())
        )

        help_menu = menu_bar.addMenu("Help")
        about_action = help_menu.addAction("About")
        about_action.triggered.connect(self._show_about)

    def _show_about(self) -> None:
        QtWidgets.QMessageBox.about(
            self, "About", f"{APP_NAME}\nVersion {__version__}"
        )

    def sizeHint(self) -> QtCore.QSize:
        return QtCore.QSize(1200, 720)
