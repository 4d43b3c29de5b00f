"""Send-limit wiring for FastAPI routes.

This module builds the process-wide event log and send service and exposes
them as dependencies, so routes depend on a function rather than on module
globals and tests can swap them with ``app.dependency_overrides``.

Strategy:
- One JSON timestamp log per deployment (single operator, no partitioning).
- Rolling 24-hour window, 10 sends.
- The log file location comes from settings; everything else is fixed.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

from mailgate.adapters.event_log.file_storage import JsonFileEventLogStorage
from mailgate.adapters.mail.base import AbstractMailSender
from mailgate.adapters.mail.factory import (
    UnconfiguredMailSender,
    create_mail_sender,
    resolve_sender_address,
)
from mailgate.core.config import settings
from mailgate.core.errors import ValidationAppError
from mailgate.services.event_log import RateLimitedEventLog
from mailgate.services.send_service import EmailSendService

logger = logging.getLogger(__name__)


_event_log: RateLimitedEventLog | None = None
_event_log_path: Path | None = None

_send_service: EmailSendService | None = None
_send_service_config: tuple | None = None


def get_event_log() -> RateLimitedEventLog:
    """Return the process-wide event log.

    The instance is cached in-module. If the configured log path changes
    (primarily in tests), the log is rebuilt.

    Returns:
        RateLimitedEventLog: Log backed by the configured JSON file.
    """

    global _event_log, _event_log_path

    path = Path(settings.app.email_log_path)
    if _event_log is None or _event_log_path != path:
        _event_log = RateLimitedEventLog(JsonFileEventLogStorage(path))
        _event_log_path = path
        logger.debug("event_log.opened", extra={"path": str(path)})

    return _event_log


def get_send_service() -> EmailSendService:
    """Return the process-wide send service.

    Never fails on incomplete relay settings: the send-limit check still runs
    for every request, and an admitted send then fails with
    MailDeliveryAppError naming the missing setting.
    """

    global _send_service, _send_service_config

    event_log = get_event_log()
    config = (id(event_log), settings.smtp.model_dump_json())
    if _send_service is None or _send_service_config != config:
        mail_sender: AbstractMailSender
        try:
            mail_sender = create_mail_sender()
            sender_address = resolve_sender_address()
        except ValidationAppError as exc:
            logger.error("mail.not_configured", extra={"error_code": exc.code})
            mail_sender = UnconfiguredMailSender(exc)
            sender_address = ""
        _send_service = EmailSendService(
            event_log=event_log,
            mail_sender=mail_sender,
            sender_address=sender_address,
        )
        _send_service_config = config

    return _send_service


def rate_limit_headers(limit: int, count: int, reset_in_ms: int) -> dict[str, str]:
    """Build X-RateLimit-* and Retry-After headers for the send window."""

    headers = {
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Remaining": str(max(limit - count, 0)),
    }
    if reset_in_ms > 0:
        headers["Retry-After"] = str(math.ceil(reset_in_ms / 1000))
    return headers
