"""Tests for environment-driven configuration."""

import pytest
from pydantic import ValidationError

from household_budget.config import (
    AppSettings,
    BackendSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "BUDGET_BACKEND_URL",
        "BUDGET_BACKEND_API_KEY",
        "BUDGET_BACKEND_ACCESS_TOKEN",
        "DEFAULT_CURRENCY",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


class TestBackendSettings:
    """Tests for backend connection settings."""

    def test_loads_from_prefixed_env(self, clean_env):
        clean_env.setenv("BUDGET_BACKEND_URL", "https://xyz.example.co/")
        clean_env.setenv("BUDGET_BACKEND_API_KEY", "anon-key")
        settings = BackendSettings()
        assert settings.url == "https://xyz.example.co"
        assert settings.api_key == "anon-key"
        assert settings.rest_path == "/rest/v1"
        assert settings.access_token is None
        assert settings.max_retries == 3

    def test_rejects_non_http_url(self):
        with pytest.raises(ValidationError, match="http"):
            BackendSettings(url="ftp://example.com", api_key="k")

    def test_requires_api_key(self, clean_env):
        clean_env.setenv("BUDGET_BACKEND_URL", "https://xyz.example.co")
        with pytest.raises(ValidationError):
            BackendSettings()


class TestAppSettings:
    """Tests for application settings."""

    def test_defaults(self, clean_env):
        settings = AppSettings()
        assert settings.default_currency == "AUD"
        assert settings.snapshot_tolerance_days == 5
        assert settings.projection_horizon_months == 60
        assert settings.max_payoff_months == 360
        assert settings.upcoming_bill_days == 14
        assert settings.cashflow_days == 30

    def test_currency_upper_cased(self):
        assert AppSettings(default_currency="nzd").default_currency == "NZD"

    def test_bounds(self):
        with pytest.raises(ValidationError):
            AppSettings(snapshot_tolerance_days=90)


class TestValidateAllSettings:
    """Tests for the startup check."""

    def test_reports_missing_backend(self, clean_env):
        results = validate_all_settings()
        assert results["app"] is True
        assert results["backend"] is False
        assert "backend_error" in results

    def test_all_valid(self, clean_env):
        clean_env.setenv("BUDGET_BACKEND_URL", "https://xyz.example.co")
        clean_env.setenv("BUDGET_BACKEND_API_KEY", "anon-key")
        results = validate_all_settings()
        assert results == {"backend": True, "app": True}
