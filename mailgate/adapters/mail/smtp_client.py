"""SMTP mail sender adapter."""

import logging

import aiosmtplib

from mailgate.adapters.mail.base import AbstractMailSender, OutgoingEmail, build_mime_message
from mailgate.core.errors import MailDeliveryAppError

logger = logging.getLogger(__name__)


class SmtpMailSender(AbstractMailSender):
    """Deliver messages to a single SMTP relay.

    Uses aiosmtplib so the event loop is not blocked while the relay answers.
    A new connection is opened per message.
    """

    def __init__(
        self,
        hostname: str,
        port: int,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = False,
        start_tls: bool | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize the SMTP sender.

        Args:
            hostname: Relay hostname.
            port: Relay port.
            username: Login name; authentication is skipped when unset.
            password: Login password.
            use_tls: Connect over implicit TLS.
            start_tls: True/False forces STARTTLS on/off; None upgrades when
                the server advertises it.
            timeout_seconds: Timeout for connect and each SMTP command.
        """
        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.start_tls = start_tls
        self.timeout_seconds = timeout_seconds

    async def send(self, email: OutgoingEmail) -> None:
        """Send the message through the relay.

        Raises:
            MailDeliveryAppError: On connection failures, timeouts, or SMTP
                error replies.
        """
        message = build_mime_message(email)

        credentials = {}
        if self.username:
            credentials = {"username": self.username, "password": self.password or ""}

        try:
            await aiosmtplib.send(
                message,
                hostname=self.hostname,
                port=self.port,
                use_tls=self.use_tls,
                start_tls=self.start_tls,
                timeout=self.timeout_seconds,
                **credentials,
            )
        except aiosmtplib.SMTPResponseException as exc:
            logger.warning(
                "mail.rejected",
                extra={"smtp_code": exc.code, "relay": self.hostname},
            )
            raise MailDeliveryAppError(
                code="smtp_rejected",
                message=f"Mail relay rejected the message ({exc.code})",
                details={"smtp_code": exc.code},
            ) from exc
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.warning(
                "mail.delivery_failed",
                extra={"error_type": type(exc).__name__, "relay": self.hostname},
            )
            raise MailDeliveryAppError(
                code="smtp_unavailable",
                message="Mail relay could not be reached",
            ) from exc

        logger.info(
            "mail.sent",
            extra={
                "relay": self.hostname,
                "recipient_count": len(email.recipients),
                "attachment_count": len(email.attachments),
            },
        )
