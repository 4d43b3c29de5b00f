"""Mail transport layer - abstracts over how messages reach the relay."""

from mailgate.adapters.mail.base import (
    AbstractMailSender,
    Attachment,
    OutgoingEmail,
    build_mime_message,
)
from mailgate.adapters.mail.factory import (
    UnconfiguredMailSender,
    create_mail_sender,
    resolve_sender_address,
)
from mailgate.adapters.mail.smtp_client import SmtpMailSender

__all__ = [
    "AbstractMailSender",
    "Attachment",
    "OutgoingEmail",
    "SmtpMailSender",
    "UnconfiguredMailSender",
    "build_mime_message",
    "create_mail_sender",
    "resolve_sender_address",
]
