"""Tests for pydantic-settings configuration."""

from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from sipm.config import get_settings, validate_all_settings
from sipm.config.settings import AppSettings, ReportSettings, StorageSettings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Defaults and environment overrides."""

    def test_storage_defaults(self, monkeypatch):
        monkeypatch.delenv("SIPM_STORAGE_BACKEND", raising=False)
        settings = StorageSettings()
        assert settings.backend == "json"
        assert settings.storage_key == "sipm_premium_v1"
        assert settings.data_dir == Path(".sipm")

    def test_storage_from_env(self, monkeypatch):
        monkeypatch.setenv("SIPM_STORAGE_BACKEND", "google_sheets")
        monkeypatch.setenv("SIPM_STORAGE_STORAGE_KEY", "desa_lain")
        settings = StorageSettings()
        assert settings.backend == "google_sheets"
        assert settings.storage_key == "desa_lain"

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("SIPM_STORAGE_BACKEND", "postgres")
        with pytest.raises(ValueError):
            StorageSettings()

    def test_report_timezone(self):
        settings = ReportSettings()
        assert settings.tzinfo == ZoneInfo("Asia/Jakarta")
        assert settings.village_name == "PARUNGKAMAL"

    def test_unknown_timezone_rejected(self, monkeypatch):
        monkeypatch.setenv("SIPM_REPORT_TIMEZONE", "Mars/Olympus")
        with pytest.raises(ValueError, match="Unknown timezone"):
            ReportSettings()

    def test_app_attachment_limits(self, monkeypatch):
        monkeypatch.setenv("MAX_ATTACHMENT_SIZE_MB", "2")
        monkeypatch.setenv("SUPPORTED_IMAGE_FORMATS", "PNG, jpg")
        settings = AppSettings()
        assert settings.max_attachment_size_bytes == 2 * 1024 * 1024
        assert settings.supported_formats_list == ["png", "jpg"]

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestValidateAllSettings:
    """Startup checks."""

    def test_json_backend_skips_sheets(self, monkeypatch):
        monkeypatch.setenv("SIPM_STORAGE_BACKEND", "json")
        results = validate_all_settings()
        assert results["storage"] and results["report"] and results["app"]
        assert "google_sheets" not in results

    def test_sheets_backend_without_credentials(self, monkeypatch):
        monkeypatch.setenv("SIPM_STORAGE_BACKEND", "google_sheets")
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        results = validate_all_settings()
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results

    def test_bad_report_section_is_reported(self, monkeypatch):
        monkeypatch.setenv("SIPM_REPORT_TIMEZONE", "Mars/Olympus")
        results = validate_all_settings()
        assert results["report"] is False
        assert "Unknown timezone" in results["report_error"]
