"""Application configuration."""

from __future__ import annotations

from dataclasses import dataclass

from crm_manager.version import __app_name__, __company__

APP_NAME = __app_name__
APP_DATA_DIRNAME = "CRMManager"
LOGS_DIRNAME = "logs"
LOG_FILENAME = "app.log"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3
PDF_DIRNAME = "pdfs"
CONFIG_FILENAME = "config.json"
DATA_DIR_ENV = "CRM_DATA_DIR"
LOG_LEVEL_ENV = "CRM_LOG_LEVEL"

SUPABASE_URL_ENV = "SUPABASE_URL"
SUPABASE_KEY_ENV = "SUPABASE_ANON_KEY"
LOGO_URL_ENV = "CRM_LOGO_URL"
LOGO_URL: str | None = None
LOGO_FETCH_TIMEOUT = 10

NUMBER_WIDTH = 4
NUMBER_RETRY_ATTEMPTS = 3
RECONCILE_ATTEMPTS = 3

ESTIMATE_TAX_RATE = 0.0


@dataclass(frozen=True)
class PdfIssuerInfo:
    """Company details printed on estimates and invoices."""

    name: str
    phone: str
    email: str
    website: str


PDF_ISSUER = PdfIssuerInfo(
    name="Your Company LLC",
    phone="(555) 010-0000",
    email="office@example.com",
    website="www.example.com",
)


@dataclass(frozen=True)
class AppConfig:
    """Static configuration values for CRM Manager."""

    app_name: str = APP_NAME
    organization_name: str = __company__
    organization_domain: str = "crm-manager.local"
