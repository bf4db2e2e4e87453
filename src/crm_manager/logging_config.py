"""Logging configuration for CRM Manager."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from crm_manager.config import (
    LOG_BACKUP_COUNT,
    LOG_FILENAME,
    LOG_LEVEL_ENV,
    LOG_MAX_BYTES,
)
from crm_manager.paths import get_logs_dir

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
# HTTP client libraries used by supabase log every request
NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").strip().upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: Optional[str] = None) -> None:
    """Send records to the rotating log file and to the console.

    ``level`` falls back to ``CRM_LOG_LEVEL``, then INFO.
    """
    resolved = _resolve_level(level)
    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = RotatingFileHandler(
        get_logs_dir() / LOG_FILENAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    console_handler = logging.StreamHandler()
    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)
        handler.setLevel(resolved)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))

    def handle_exception(
        exc_type: type[BaseException],
        exc: BaseException,
        traceback: object,
    ) -> None:
        root_logger.error("Unhandled exception", exc_info=(exc_type, exc, traceback))

    sys.excepthook = handle_exception


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger."""
    return logging.getLogger(name)
