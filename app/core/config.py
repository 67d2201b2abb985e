"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_supabase_settings() -> "SupabaseSettings":
    """Build Supabase settings from environment."""

    return SupabaseSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment."""

    return AppSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    """Build log settings from environment."""

    return LogSettings()  # type: ignore[call-arg]


class SupabaseSettings(BaseSettings):
    """Managed backend (PostgREST + GoTrue) configuration.

    Only required when APP_BACKEND=supabase. Presence of url/anon_key is
    validated by the adapter factories, not at import time.
    """

    url: str | None = Field(
        None,
        description="Project URL, e.g. https://xyz.supabase.co",
    )
    anon_key: str | None = Field(
        None,
        description="Public anon key sent as the apikey header",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Timeout for store and auth calls in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    backend: str = Field(
        "supabase",
        description="Collaborator backend: 'supabase' or 'memory'",
    )
    static_tokens: str | None = Field(
        None,
        description="Comma-separated token:user_id pairs for the memory backend",
    )

    cors_allow_origin: str = Field(
        "*",
        description="Value of Access-Control-Allow-Origin on every response",
    )
    cors_allow_headers: str = Field(
        "authorization, x-client-info, apikey, content-type",
        description="Value of Access-Control-Allow-Headers on every response",
    )

    review_rate_limit_enabled: bool = Field(
        True,
        description="Enable the rolling-window limit on review submissions",
    )
    review_rate_limit_requests: int = Field(
        10,
        description="Maximum reviews a user may create per window",
        ge=1,
    )
    review_rate_limit_window_seconds: int = Field(
        3600,
        description="Trailing window size in seconds",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="'json' or 'plain'")
    output: str = Field("stdout", description="'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        0,
        description="Rotate the log file at this size (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and propagate the request id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.
    """

    app_env: str = APP_ENV
    supabase: SupabaseSettings = Field(default_factory=_build_supabase_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
