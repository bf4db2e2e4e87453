"""Backend connection helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from supabase import Client, create_client

from crm_manager.config import SUPABASE_KEY_ENV, SUPABASE_URL_ENV
from crm_manager.logging_config import get_logger
from crm_manager.services.errors import ConfigurationError
from crm_manager.utils.config_store import load_config_data, update_config_value


@dataclass(frozen=True)
class BackendSettings:
    """Connection settings for the hosted backend."""

    url: str
    anon_key: str


def _clean(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def load_backend_settings(config_path: Path) -> BackendSettings:
    """Load backend settings from the environment, falling back to config JSON."""
    backend = load_config_data(config_path).get("backend")
    if not isinstance(backend, dict):
        backend = {}
    url = _clean(os.getenv(SUPABASE_URL_ENV)) or _clean(backend.get("url"))
    anon_key = _clean(os.getenv(SUPABASE_KEY_ENV)) or _clean(backend.get("anon_key"))
    if not url or not anon_key:
        raise ConfigurationError(
            f"Backend not configured. Set {SUPABASE_URL_ENV} and {SUPABASE_KEY_ENV} "
            f"or add a 'backend' section to {config_path}."
        )
    return BackendSettings(url=url, anon_key=anon_key)


def save_backend_settings(config_path: Path, settings: BackendSettings) -> None:
    """Persist backend settings to config JSON."""
    update_config_value(
        config_path, "backend", {"url": settings.url, "anon_key": settings.anon_key}
    )


def get_client(settings: BackendSettings) -> Client:
    """Create a Supabase client for the configured project."""
    client = create_client(settings.url, settings.anon_key)
    get_logger(__name__).info("Backend client initialized for %s", settings.url)
    return client
