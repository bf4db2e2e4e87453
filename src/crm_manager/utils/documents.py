"""Document settings storage."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from crm_manager.domain.models import DocumentKind
from crm_manager.utils.config_store import load_config_data, update_config_value


@dataclass(frozen=True)
class DocumentsSettings:
    """Configuration for document storage paths."""

    documents_dir: str | None = None


def sanitize_filename(value: str) -> str:
    """Normalize text to be safe for filenames."""
    cleaned = " ".join(value.strip().split())
    cleaned = cleaned.replace(" ", "_")
    cleaned = re.sub(r"[^A-Za-z0-9_-]", "", cleaned)
    return cleaned or "document"


def build_document_filename(kind: DocumentKind, number: str) -> str:
    """Default filename, e.g. ``invoice-INV-0007.pdf``."""
    return f"{kind.value}-{sanitize_filename(number or '')}.pdf"


def load_documents_settings(config_path: Path) -> DocumentsSettings:
    """Load document settings from config JSON."""
    data = load_config_data(config_path)
    value = data.get("documents_dir")
    if isinstance(value, str) and value.strip():
        return DocumentsSettings(documents_dir=value)
    return DocumentsSettings()


def save_documents_settings(config_path: Path, settings: DocumentsSettings) -> None:
    update_config_value(config_path, "documents_dir", settings.documents_dir)
