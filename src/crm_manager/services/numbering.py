"""Sequential document numbers (EST-0001, INV-0001, ...)."""

from __future__ import annotations

import re
from typing import Mapping, Optional

from crm_manager.config import NUMBER_WIDTH
from crm_manager.domain.models import DocumentKind
from crm_manager.logging_config import get_logger
from crm_manager.repositories.document_repo import DocumentRepository


def first_document_number(prefix: str) -> str:
    return f"{prefix}-{1:0{NUMBER_WIDTH}d}"


def next_document_number(last_number: Optional[str], prefix: str) -> str:
    """Return the number following ``last_number`` for ``prefix``.

    A missing or unparsable ``last_number`` starts the sequence over at 1.
    The pattern is searched anywhere in ``last_number``, so surrounding text
    is ignored.
    """
    if not last_number:
        return first_document_number(prefix)
    match = re.search(rf"{re.escape(prefix)}-(\d+)", last_number)
    if not match:
        return first_document_number(prefix)
    return f"{prefix}-{int(match.group(1)) + 1:0{NUMBER_WIDTH}d}"


class NumberingService:
    """Reads the latest document of a kind and proposes the next number."""

    def __init__(self, repos: Mapping[DocumentKind, DocumentRepository]) -> None:
        self._repos = repos
        self._logger = get_logger(self.__class__.__name__)

    def next_number(self, kind: DocumentKind) -> str:
        last_number = self._repos[kind].get_latest_number()
        return next_document_number(last_number, kind.prefix)

    def suggest_number(self, kind: DocumentKind) -> str:
        """Like ``next_number`` but falls back to the first number on fetch errors."""
        try:
            return self.next_number(kind)
        except Exception:
            self._logger.exception("Error generating %s number", kind.value)
            return first_document_number(kind.prefix)
