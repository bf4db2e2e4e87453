import pytest

from crm_manager.config import DATA_DIR_ENV, SUPABASE_KEY_ENV, SUPABASE_URL_ENV
from crm_manager.db.client import (
    BackendSettings,
    load_backend_settings,
    save_backend_settings,
)
from crm_manager.domain.models import DocumentKind
from crm_manager.paths import get_config_path, get_pdfs_dir
from crm_manager.services.errors import ConfigurationError
from crm_manager.utils.config_store import load_config_data
from crm_manager.utils.documents import (
    DocumentsSettings,
    build_document_filename,
    load_documents_settings,
    sanitize_filename,
    save_documents_settings,
)


@pytest.fixture
def no_backend_env(monkeypatch):
    monkeypatch.delenv(SUPABASE_URL_ENV, raising=False)
    monkeypatch.delenv(SUPABASE_KEY_ENV, raising=False)


@pytest.mark.parametrize(
    "kind, number, expected",
    [
        (DocumentKind.INVOICE, "INV-0007", "invoice-INV-0007.pdf"),
        (DocumentKind.ESTIMATE, "EST 12/A", "estimate-EST_12A.pdf"),
        (DocumentKind.ESTIMATE, "", "estimate-document.pdf"),
    ],
)
def test_build_document_filename(kind, number, expected):
    assert build_document_filename(kind, number) == expected


def test_sanitize_filename():
    assert sanitize_filename("  Jane   O'Neil ") == "Jane_ONeil"
    assert sanitize_filename("***") == "document"


def test_documents_settings_round_trip(tmp_path):
    config_path = tmp_path / "config.json"
    assert load_documents_settings(config_path) == DocumentsSettings()

    save_documents_settings(config_path, DocumentsSettings(documents_dir="/srv/pdfs"))

    assert load_documents_settings(config_path).documents_dir == "/srv/pdfs"


def test_corrupt_config_reads_as_empty(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text("{not json", encoding="utf-8")

    assert load_config_data(config_path) == {}


def test_backend_settings_from_config_file(tmp_path, no_backend_env):
    config_path = tmp_path / "config.json"
    save_documents_settings(config_path, DocumentsSettings(documents_dir="/srv/pdfs"))
    save_backend_settings(config_path, BackendSettings("https://demo.supabase.co", "anon"))

    settings = load_backend_settings(config_path)

    assert settings == BackendSettings("https://demo.supabase.co", "anon")
    assert load_documents_settings(config_path).documents_dir == "/srv/pdfs"


def test_environment_overrides_config_file(tmp_path, monkeypatch):
    config_path = tmp_path / "config.json"
    save_backend_settings(config_path, BackendSettings("https://file.supabase.co", "file-key"))
    monkeypatch.setenv(SUPABASE_URL_ENV, "https://env.supabase.co")
    monkeypatch.setenv(SUPABASE_KEY_ENV, "env-key")

    assert load_backend_settings(config_path) == BackendSettings(
        "https://env.supabase.co", "env-key"
    )


def test_missing_backend_settings(tmp_path, no_backend_env, monkeypatch):
    monkeypatch.setenv(SUPABASE_URL_ENV, "https://env.supabase.co")

    with pytest.raises(ConfigurationError, match=SUPABASE_KEY_ENV):
        load_backend_settings(tmp_path / "config.json")


def test_data_dir_override(tmp_path, monkeypatch):
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path / "crm"))

    assert get_config_path() == tmp_path / "crm" / "config.json"
    assert get_pdfs_dir().is_dir()


def test_saving_leaves_no_temp_file(tmp_path):
    config_path = tmp_path / "nested" / "config.json"

    save_documents_settings(config_path, DocumentsSettings(documents_dir="/srv/pdfs"))

    assert [p.name for p in config_path.parent.iterdir()] == ["config.json"]
