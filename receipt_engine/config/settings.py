"""
Configuration Management for Receipt Engine

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Values that shape the ledger's arithmetic (precision, phase policy) are only
read at instantiation and then persisted in the Config record, so changing
the environment later can never reinterpret existing balances.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Ledger arithmetic and query configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RECEIPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    precision_exponent: int = Field(
        default=18,
        ge=1,
        le=38,
        description="Accumulator precision factor is 10 ** precision_exponent"
    )
    phase_policy: Literal["windowed", "always_open"] = Field(
        default="windowed",
        description="Whether the administrator may close registration"
    )

    # Pagination
    default_page_limit: int = Field(
        default=10,
        ge=1,
        description="Page size used when a listing query gives no limit"
    )
    max_page_limit: int = Field(
        default=30,
        ge=1,
        description="Largest page a listing query may return"
    )

    @field_validator('max_page_limit')
    @classmethod
    def validate_max_page_limit(cls, v: int, info: ValidationInfo) -> int:
        """The maximum page cannot be smaller than the default page."""
        default = info.data.get("default_page_limit")
        if default is not None and v < default:
            raise ValueError(
                f"max_page_limit ({v}) must be >= default_page_limit ({default})"
            )
        return v

    @property
    def precision(self) -> int:
        """Get the precision factor P."""
        return 10 ** self.precision_exponent


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RECEIPT_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Minimum log level for local audit output"
    )
    json_output: bool = Field(
        default=True,
        description="Render log lines as JSON (False renders for consoles)"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
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

    @property
    def engine(self) -> EngineSettings:
        return EngineSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.engine
        results["engine"] = True
    except Exception as e:
        results["engine"] = False
        results["engine_error"] = str(e)

    try:
        _ = settings.logging
        results["logging"] = True
    except Exception as e:
        results["logging"] = False
        results["logging_error"] = str(e)

    return results
