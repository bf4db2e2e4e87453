"""Per-user folders for logs, generated PDFs and settings."""

from __future__ import annotations

import os
from pathlib import Path

from crm_manager.config import (
    APP_DATA_DIRNAME,
    CONFIG_FILENAME,
    DATA_DIR_ENV,
    LOGS_DIRNAME,
    PDF_DIRNAME,
)


def _ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def _base_dir() -> Path:
    override = os.getenv(DATA_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    appdata = os.getenv("APPDATA")
    if appdata:
        return Path(appdata) / APP_DATA_DIRNAME
    xdg_data = os.getenv("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data) / APP_DATA_DIRNAME
    return Path.home() / ".crm_manager"


def get_app_data_dir() -> Path:
    """Create and return the data folder.

    ``CRM_DATA_DIR`` wins when set; otherwise ``%APPDATA%`` on Windows,
    ``$XDG_DATA_HOME`` where defined, and ``~/.crm_manager`` as a last resort.
    """
    return _ensure_dir(_base_dir())


def get_logs_dir() -> Path:
    return _ensure_dir(get_app_data_dir() / LOGS_DIRNAME)


def get_pdfs_dir() -> Path:
    """Default folder offered when the user first saves a PDF."""
    return _ensure_dir(get_app_data_dir() / PDF_DIRNAME)


def get_config_path() -> Path:
    return get_app_data_dir() / CONFIG_FILENAME
