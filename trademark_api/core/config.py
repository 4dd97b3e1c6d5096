"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename
_env_file = str(_env_path) if _env_path.is_file() else None

# Nested BaseSettings don't inherit env_file, so populate os.environ up front.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


QuotaKind = Literal["token_bucket", "fixed_window"]


def _build_llm_settings() -> "LLMSettings":
    return LLMSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class LLMSettings(BaseSettings):
    """Text-generation provider configuration.

    The API key is optional at startup: a missing credential is reported as a
    configuration error when a generation is attempted, not at boot.
    """

    provider: str = Field(
        "openai",
        description="LLM provider name (currently: openai)",
    )
    model: str = Field(
        "gpt-4o-mini",
        description="Model name used for name generation",
    )
    api_key: str | None = Field(
        None,
        description="API key for the provider (required to generate names)",
    )
    base_url: str | None = Field(
        None,
        description="Custom API endpoint (OpenAI-compatible gateways)",
    )
    timeout_seconds: float = Field(
        45.0,
        description="Request timeout in seconds",
    )
    temperature: float = Field(
        0.95,
        ge=0.0,
        le=2.0,
        description="Sampling temperature; high values favour novel coinages",
    )
    max_tokens: int = Field(
        1000,
        ge=1,
        description="Completion token budget (sized for ~10 short JSON records)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )

    # Client identifier shape accepted by the generation endpoint
    client_id_prefix: str = Field(
        "fp-",
        description="Required prefix for client identifiers",
    )
    client_id_min_length: int = Field(
        6,
        ge=1,
        description="Minimum client identifier length (prefix included)",
    )
    client_id_max_length: int = Field(
        64,
        ge=1,
        description="Maximum client identifier length (prefix included)",
    )

    # Generation
    naming_theme: str = Field(
        "retail",
        description="Thematic framing for the naming prompt",
    )
    max_names: int = Field(
        10,
        ge=1,
        le=10,
        description="Maximum number of names returned per generation",
    )
    description_max_chars: int = Field(
        100,
        ge=1,
        le=100,
        description="Descriptions longer than this are truncated",
    )

    # Persistence
    result_store_path: str | None = Field(
        None,
        description="JSON file for result batches; in-memory when unset",
    )
    result_store_timeout_seconds: float = Field(
        5.0,
        gt=0,
        description="Timeout for a single result store read or write",
    )

    # Rate limiting tiers (a tier with rate 0 is disabled)
    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting",
    )
    rate_limit_minute_kind: QuotaKind = Field("fixed_window")
    rate_limit_minute_rate: int = Field(3, ge=0)
    rate_limit_minute_capacity: int | None = Field(None, ge=1)
    rate_limit_hour_kind: QuotaKind = Field("token_bucket")
    rate_limit_hour_rate: int = Field(20, ge=0)
    rate_limit_hour_capacity: int | None = Field(10, ge=1)
    rate_limit_day_kind: QuotaKind = Field("fixed_window")
    rate_limit_day_rate: int = Field(50, ge=0)
    rate_limit_day_capacity: int | None = Field(None, ge=1)
    rate_limit_include_headers: bool = Field(
        True,
        description="Include a Retry-After header when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field("json", description="Log line format")
    output: Literal["stdout", "file"] = Field("stdout", description="Log destination")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        ge=0,
        description="Rotate the log file at this size (0 disables rotation)",
    )
    backup_count: int = Field(5, ge=0, description="Rotated files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header carrying the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    """

    app_env: str = APP_ENV
    llm: LLMSettings = Field(default_factory=_build_llm_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
