"""Send-email workflow guarded by the rolling send window.

This service is the only place that combines the event log with the mail
transport. It handles:
- Input validation
- Admission against the 24-hour limit
- Delivery through the configured relay
- Recording the send once the relay accepted it
"""

import asyncio
import logging
from typing import Sequence

from mailgate.adapters.mail.base import AbstractMailSender, Attachment, OutgoingEmail
from mailgate.core.errors import SendLimitExceededError, StorageUnavailable, ValidationAppError
from mailgate.schemas.email import SendEmailRequest
from mailgate.services.event_log import QuotaSnapshot, RateLimitedEventLog

logger = logging.getLogger(__name__)


class EmailSendService:
    """Send operator emails while enforcing the rolling send limit.

    Check, send and record run under one asyncio lock, so concurrent requests
    served by the same process cannot push the log past its limit. Separate
    worker processes share only the log file and are not coordinated.

    Attributes:
        event_log: Persisted send counter.
        mail_sender: Transport adapter for the relay.
        sender_address: Address used in the From header.
    """

    def __init__(
        self,
        event_log: RateLimitedEventLog,
        mail_sender: AbstractMailSender,
        sender_address: str,
    ) -> None:
        self.event_log = event_log
        self.mail_sender = mail_sender
        self.sender_address = sender_address
        self._lock = asyncio.Lock()

    def quota(self, now: int | None = None) -> QuotaSnapshot:
        """Return the current window state (prunes and persists the log)."""
        return self.event_log.snapshot(now)

    def _validate(self, request: SendEmailRequest) -> None:
        if not request.to:
            raise ValidationAppError(
                code="missing_recipient",
                message="A recipient address is required.",
            )
        if not request.subject:
            raise ValidationAppError(
                code="missing_subject",
                message="A subject is required.",
            )

    def _admit(self) -> None:
        """Raise SendLimitExceededError when the window is full."""
        snapshot = self.event_log.snapshot()
        if not snapshot.exhausted:
            return

        logger.warning(
            "send_limit.exceeded",
            extra={
                "count": snapshot.count,
                "limit": snapshot.limit,
                "reset_in_ms": snapshot.reset_in_ms,
            },
        )
        raise SendLimitExceededError(
            code="send_limit_exceeded",
            message=(
                f"You have reached the limit of {snapshot.limit} emails in 24 hours."
            ),
            details={
                "limit": snapshot.limit,
                "count": snapshot.count,
                "reset_in_ms": snapshot.reset_in_ms,
                "reset_in_human": str(snapshot.reset_in),
            },
        )

    def _record(self) -> QuotaSnapshot | None:
        try:
            self.event_log.record()
            return self.event_log.snapshot()
        except StorageUnavailable as exc:
            # The message is already with the relay; report the send as done.
            logger.error(
                "send_limit.record_failed",
                extra={"error_code": exc.code},
            )
            return None

    async def send(
        self,
        request: SendEmailRequest,
        attachments: Sequence[Attachment] = (),
    ) -> QuotaSnapshot | None:
        """Validate, admit, deliver and record one email.

        Args:
            request: Form fields for the message.
            attachments: Files to attach, already read into memory.

        Returns:
            Window state after the send was recorded, or None when the send
            went out but could not be recorded.

        Raises:
            ValidationAppError: If required fields are blank.
            SendLimitExceededError: If the 24-hour limit is already reached.
            StorageUnavailable: If the send log cannot be read (nothing is sent).
            MailDeliveryAppError: If the relay fails; nothing is recorded.
        """
        self._validate(request)

        email = OutgoingEmail(
            sender=self.sender_address,
            to=request.to,
            cc=request.cc,
            subject=request.subject,
            html_body=request.body,
            attachments=list(attachments),
        )

        async with self._lock:
            self._admit()
            await self.mail_sender.send(email)
            snapshot = self._record()

        logger.info(
            "send.completed",
            extra={
                "count": snapshot.count if snapshot else None,
                "recorded": snapshot is not None,
                "attachment_count": len(email.attachments),
            },
        )
        return snapshot
