"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It points the app at the testing environment and a throwaway send log
before settings are imported.
"""

import os
import tempfile
from pathlib import Path

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ["TESTING"] = "true"

_TMP_DIR = Path(tempfile.mkdtemp(prefix="mailgate-tests-"))

os.environ.setdefault("APP_EMAIL_LOG_PATH", str(_TMP_DIR / "email_log.json"))
os.environ.setdefault("APP_SESSION_SECRET", "test-session-secret")
os.environ.setdefault("APP_ADMIN_USERNAME", "operator")
os.environ.setdefault("APP_ADMIN_PASSWORD", "correct-horse")
os.environ.setdefault("SMTP_SERVER", "smtp.test.invalid")
os.environ.setdefault("SENDER_EMAIL", "sender@test.invalid")

import pytest

from mailgate.adapters.event_log.in_memory import InMemoryEventLogStorage
from mailgate.services.event_log import RateLimitedEventLog

T0 = 1_700_000_000_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> InMemoryEventLogStorage:
    return InMemoryEventLogStorage()


@pytest.fixture
def event_log(storage: InMemoryEventLogStorage, clock: FakeClock) -> RateLimitedEventLog:
    return RateLimitedEventLog(storage, clock=clock)


@pytest.fixture
def admin_credentials() -> dict[str, str]:
    return {
        "username": os.environ["APP_ADMIN_USERNAME"],
        "password": os.environ["APP_ADMIN_PASSWORD"],
    }
