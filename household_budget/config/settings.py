"""
Configuration Management for Household Budget

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BackendSettings(BaseSettings):
    """Hosted database-as-a-service (REST API) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_BACKEND_",
        extra="ignore"
    )

    url: str = Field(
        ...,
        description="Base URL of the hosted backend, e.g. https://xyz.example.co"
    )
    api_key: str = Field(
        ...,
        description="Public API key sent with every request"
    )
    access_token: Optional[str] = Field(
        default=None,
        description="User access token; row-level security scopes rows to it"
    )
    rest_path: str = Field(
        default="/rest/v1",
        description="Path prefix of the REST endpoint"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Per-request timeout"
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for requests failing at the transport level"
    )

    @field_validator('url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalise the base URL so paths can be joined safely."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Backend URL must be http(s): {v}")
        return v.rstrip("/")


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Display
    default_currency: str = Field(
        default="AUD",
        min_length=3,
        max_length=3,
        description="ISO 4217 code used when no currency is given"
    )

    # Net worth
    snapshot_tolerance_days: int = Field(
        default=5,
        ge=0,
        le=31,
        description="How far a snapshot may sit from a target date and still count"
    )
    projection_horizon_months: int = Field(
        default=60,
        ge=1,
        le=600,
        description="Furthest month a net worth projection looks ahead"
    )

    # Debt planner
    max_payoff_months: int = Field(
        default=360,
        ge=1,
        le=1200,
        description="Cap on payoff schedule length (30 years)"
    )

    # Bills
    upcoming_bill_days: int = Field(
        default=14,
        ge=1,
        le=366,
        description="Window for the upcoming bills list"
    )

    # Cash flow
    cashflow_days: int = Field(
        default=30,
        ge=1,
        le=366,
        description="Days projected by the cash flow timeline"
    )

    @field_validator('default_currency')
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def backend(self) -> BackendSettings:
        return BackendSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid} plus "<name>_error" entries
    for the ones that failed. Useful for startup checks.
    """
    results: dict[str, object] = {}

    settings = get_settings()

    for name in ("backend", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
