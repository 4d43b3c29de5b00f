"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import AliasChoices, Field
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

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_smtp_settings() -> "SmtpSettings":
    return SmtpSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    session_secret: str = Field(
        "secret-key",
        description="Secret used to sign the session cookie",
        validation_alias=AliasChoices("APP_SESSION_SECRET", "SESSION_SECRET"),
    )
    admin_username: str = Field(
        "admin",
        description="Operator login name",
    )
    admin_password: str = Field(
        "admin",
        description="Operator login password",
    )
    max_upload_size_mb: int = Field(
        10,
        description="Maximum attachment size in megabytes",
        ge=1,
    )
    email_log_path: Path = Field(
        PROJECT_ROOT / "email_log.json",
        description="JSON file holding timestamps of successful sends",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
        populate_by_name=True,
    )


class SmtpSettings(BaseSettings):
    """Outbound mail relay configuration.

    Field names follow the relay's ``SMTP_*`` variables. ``SMTP_PASS`` and
    ``SENDER_EMAIL`` are accepted for compatibility with existing deployments.
    """

    server: str | None = Field(
        None,
        description="SMTP relay hostname",
    )
    port: int = Field(
        587,
        description="SMTP relay port",
    )
    user: str | None = Field(
        None,
        description="SMTP login name (omit for unauthenticated relays)",
    )
    password: str | None = Field(
        None,
        description="SMTP login password",
        validation_alias=AliasChoices("SMTP_PASSWORD", "SMTP_PASS"),
    )
    sender_email: str | None = Field(
        None,
        description="Address placed in the From header",
        validation_alias=AliasChoices("SMTP_SENDER_EMAIL", "SENDER_EMAIL"),
    )
    use_tls: bool = Field(
        False,
        description="Connect with implicit TLS (port 465 style)",
    )
    start_tls: bool | None = Field(
        None,
        description="Force STARTTLS on/off; unset upgrades when the server offers it",
    )
    timeout_seconds: float = Field(
        30.0,
        description="Connection and command timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        case_sensitive=False,
        populate_by_name=True,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field(
        "INFO",
        description="Root log level",
    )
    format: str = Field(
        "json",
        description="Log format: 'json' or 'plain'",
    )
    output: str = Field(
        "stdout",
        description="Log destination: 'stdout' or 'file'",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file'",
    )
    max_bytes: int | None = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (None disables rotation)",
    )
    backup_count: int = Field(
        5,
        description="Number of rotated log files to keep",
    )
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    smtp: SmtpSettings = Field(default_factory=_build_smtp_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
