"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    hint: str
    limit: int
    count: int
    reset_in_ms: int
    reset_in_human: str
    max_bytes: int
    smtp_code: int
    path: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class AuthenticationAppError(AppError):
    """Raised when authentication/authorization fails."""


class MailDeliveryAppError(AppError):
    """Raised when the mail relay refuses or fails to accept a message."""


class SendLimitExceededError(AppError):
    """Raised when the rolling send window is already full.

    ``details`` always carries ``limit``, ``count``, ``reset_in_ms`` and
    ``reset_in_human``.
    """


class StorageCorrupt(AppError):
    """Raised when the persisted event log cannot be parsed.

    Recovered inside the event log; never reaches a request handler.
    """


class StorageUnavailable(AppError):
    """Raised when the event log backend cannot be read or written."""


class LoginRequired(Exception):
    """Raised by route dependencies when no operator session is present."""
