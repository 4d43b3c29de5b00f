"""Factory for the configured mail sender."""

from mailgate.adapters.mail.base import AbstractMailSender, OutgoingEmail
from mailgate.adapters.mail.smtp_client import SmtpMailSender
from mailgate.core.config import SmtpSettings, settings
from mailgate.core.errors import MailDeliveryAppError, ValidationAppError


def create_mail_sender(smtp_settings: SmtpSettings | None = None) -> AbstractMailSender:
    """Instantiate the SMTP sender from settings.

    Reads configuration from mailgate.core.config.settings unless explicit
    settings are given.

    Returns:
        AbstractMailSender: Configured sender instance.

    Raises:
        ValidationAppError: If the relay host is not configured.
    """
    cfg = smtp_settings or settings.smtp

    if not cfg.server:
        raise ValidationAppError(
            code="smtp_missing_server",
            message="Mail delivery requires the SMTP_SERVER environment variable",
        )

    return SmtpMailSender(
        hostname=cfg.server,
        port=cfg.port,
        username=cfg.user,
        password=cfg.password,
        use_tls=cfg.use_tls,
        start_tls=cfg.start_tls,
        timeout_seconds=cfg.timeout_seconds,
    )


def resolve_sender_address(smtp_settings: SmtpSettings | None = None) -> str:
    """Return the From address for outgoing mail.

    Falls back to the SMTP login name, which most relays require to match
    the sender anyway.

    Raises:
        ValidationAppError: If neither SENDER_EMAIL nor SMTP_USER is set.
    """
    cfg = smtp_settings or settings.smtp

    sender = cfg.sender_email or cfg.user
    if not sender:
        raise ValidationAppError(
            code="smtp_missing_sender",
            message="Mail delivery requires the SENDER_EMAIL environment variable",
        )
    return sender


class UnconfiguredMailSender(AbstractMailSender):
    """Stand-in used while the relay settings are incomplete.

    Lets the app build its send service (and run the send-limit check) before
    SMTP is configured; every delivery attempt then fails with the
    configuration problem.
    """

    def __init__(self, error: ValidationAppError) -> None:
        self.error = error

    async def send(self, email: OutgoingEmail) -> None:
        raise MailDeliveryAppError(
            code=self.error.code,
            message=self.error.message,
        )
