"""Per-user JSON settings file shared by theme, documents and backend settings."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def load_config_data(config_path: Path) -> dict[str, Any]:
    """Load settings from disk; a missing or corrupt file reads as empty."""
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config_data(config_path: Path, data: dict[str, Any]) -> None:
    """Replace the settings file, writing through a temporary sibling."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = config_path.with_suffix(config_path.suffix + ".tmp")
    temp_path.write_text(
        json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )
    temp_path.replace(config_path)


def update_config_value(config_path: Path, key: str, value: Any) -> None:
    """Set one top-level key, keeping every other section as stored."""
    payload = load_config_data(config_path)
    payload[key] = value
    save_config_data(config_path, payload)
