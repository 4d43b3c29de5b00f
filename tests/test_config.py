"""Tests for environment-driven settings."""

from pathlib import Path

import pytest

from mailgate.core.config import AppSettings, LogSettings, SmtpSettings


def test_app_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("APP_ADMIN_USERNAME", "APP_ADMIN_PASSWORD", "APP_EMAIL_LOG_PATH"):
        monkeypatch.delenv(name, raising=False)

    cfg = AppSettings()

    assert cfg.admin_username == "admin"
    assert cfg.admin_password == "admin"
    assert cfg.max_upload_size_mb == 10
    assert cfg.email_log_path.name == "email_log.json"


def test_app_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("APP_ADMIN_USERNAME", "ops")
    monkeypatch.setenv("APP_EMAIL_LOG_PATH", str(tmp_path / "log.json"))
    monkeypatch.setenv("APP_MAX_UPLOAD_SIZE_MB", "2")

    cfg = AppSettings()

    assert cfg.admin_username == "ops"
    assert cfg.email_log_path == tmp_path / "log.json"
    assert cfg.max_upload_size_mb == 2


def test_session_secret_accepts_unprefixed_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("APP_SESSION_SECRET", raising=False)
    monkeypatch.setenv("SESSION_SECRET", "from-legacy-name")

    assert AppSettings().session_secret == "from-legacy-name"


def test_upload_size_must_be_positive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_MAX_UPLOAD_SIZE_MB", "0")

    with pytest.raises(ValueError):
        AppSettings()


def test_smtp_settings_legacy_names(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SMTP_PASSWORD", raising=False)
    monkeypatch.delenv("SMTP_SENDER_EMAIL", raising=False)
    monkeypatch.setenv("SMTP_SERVER", "mail.example.com")
    monkeypatch.setenv("SMTP_PORT", "465")
    monkeypatch.setenv("SMTP_PASS", "pw")
    monkeypatch.setenv("SENDER_EMAIL", "from@example.com")

    cfg = SmtpSettings()

    assert cfg.server == "mail.example.com"
    assert cfg.port == 465
    assert cfg.password == "pw"
    assert cfg.sender_email == "from@example.com"


def test_log_settings_defaults() -> None:
    cfg = LogSettings()

    assert cfg.request_id_header == "X-Request-ID"
    assert cfg.format in {"json", "plain"}
