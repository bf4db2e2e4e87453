"""Application entry point."""

from __future__ import annotations

import sys

from PySide6 import QtWidgets

from crm_manager.config import AppConfig
from crm_manager.db.client import get_client, load_backend_settings, save_backend_settings
from crm_manager.logging_config import configure_logging, get_logger
from crm_manager.paths import get_app_data_dir, get_config_path, get_logs_dir
from crm_manager.services.errors import ConfigurationError
from crm_manager.ui.app_services import AppServices
from crm_manager.ui.backend_dialog import BackendSettingsDialog
from crm_manager.ui.main_window import MainWindow
from crm_manager.utils.theme import ThemeManager


def _resolve_backend_settings(config_path):
    """Read backend settings, prompting once when none are configured."""
    logger = get_logger(__name__)
    try:
        return load_backend_settings(config_path)
    except ConfigurationError as exc:
        logger.warning("%s", exc)
        dialog = BackendSettingsDialog(str(exc))
        if dialog.exec() != QtWidgets.QDialog.Accepted:
            return None
        settings = dialog.get_settings()
        save_backend_settings(config_path, settings)
        return settings


def main() -> int:
    """Start the CRM Manager application."""
    configure_logging()
    get_app_data_dir()
    get_logs_dir()

    config = AppConfig()
    logger = get_logger(__name__)
    logger.info("Starting %s", config.app_name)

    app = QtWidgets.QApplication(sys.argv)
    app.setApplicationName(config.app_name)
    app.setOrganizationName(config.organization_name)
    app.setOrganizationDomain(config.organization_domain)
    config_path = get_config_path()
    theme_manager = ThemeManager(app, config_path)

    settings = _resolve_backend_settings(config_path)
    if settings is None:
        logger.info("No backend configured, exiting")
        return 1
    try:
        client = get_client(settings)
    except Exception:
        logger.exception("Failed to create the backend client")
        QtWidgets.QMessageBox.critical(
            None,
            config.app_name,
            "Could not connect to the backend. Check the URL and key in "
            f"{config_path}.",
        )
        return 1

    services = AppServices.build(client, theme_manager)
    window = MainWindow(services)
    window.show()

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
