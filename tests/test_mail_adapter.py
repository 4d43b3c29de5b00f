"""Tests for the mail transport adapter and its factory."""

from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from mailgate.adapters.mail import (
    Attachment,
    OutgoingEmail,
    SmtpMailSender,
    UnconfiguredMailSender,
    build_mime_message,
    create_mail_sender,
    resolve_sender_address,
)
from mailgate.core.config import SmtpSettings
from mailgate.core.errors import MailDeliveryAppError, ValidationAppError


def _email(**overrides) -> OutgoingEmail:
    fields = {
        "sender": "sender@example.com",
        "to": "to@example.com",
        "subject": "Report",
        "html_body": "<h1>Hi</h1>",
    }
    fields.update(overrides)
    return OutgoingEmail(**fields)


class TestBuildMimeMessage:
    def test_headers_and_html_body(self) -> None:
        msg = build_mime_message(_email())

        assert msg["From"] == "sender@example.com"
        assert msg["To"] == "to@example.com"
        assert msg["Subject"] == "Report"
        assert msg["Cc"] is None
        assert msg.get_content_type() == "text/html"
        assert "<h1>Hi</h1>" in msg.get_content()

    def test_cc_header_when_present(self) -> None:
        msg = build_mime_message(_email(cc="a@example.com, b@example.com"))

        assert msg["Cc"] == "a@example.com, b@example.com"

    def test_blank_cc_is_omitted(self) -> None:
        msg = build_mime_message(_email(cc="   "))

        assert msg["Cc"] is None

    def test_attachment_is_added(self) -> None:
        attachment = Attachment(filename="report.pdf", content=b"%PDF-1.4", content_type="application/pdf")

        msg = build_mime_message(_email(attachments=[attachment]))

        assert msg.is_multipart()
        parts = list(msg.iter_attachments())
        assert len(parts) == 1
        assert parts[0].get_filename() == "report.pdf"
        assert parts[0].get_content_type() == "application/pdf"
        assert parts[0].get_content() == b"%PDF-1.4"


class TestAttachmentMimeParts:
    def test_uses_declared_type(self) -> None:
        assert Attachment("x.bin", b"", "image/png").mime_parts() == ("image", "png")

    def test_guesses_from_filename(self) -> None:
        assert Attachment("notes.txt", b"").mime_parts() == ("text", "plain")

    def test_falls_back_to_octet_stream(self) -> None:
        assert Attachment("blob", b"").mime_parts() == ("application", "octet-stream")


def test_recipients_include_cc() -> None:
    email = _email(cc="a@example.com, ,b@example.com")

    assert email.recipients == ["to@example.com", "a@example.com", "b@example.com"]


class TestSmtpMailSender:
    @pytest.mark.asyncio
    async def test_send_passes_connection_options(self) -> None:
        sender = SmtpMailSender(
            hostname="smtp.example.com",
            port=465,
            username="user",
            password="pw",
            use_tls=True,
            timeout_seconds=5.0,
        )

        with patch("mailgate.adapters.mail.smtp_client.aiosmtplib.send", new=AsyncMock()) as mock_send:
            await sender.send(_email())

        mock_send.assert_awaited_once()
        kwargs = mock_send.await_args.kwargs
        assert kwargs["hostname"] == "smtp.example.com"
        assert kwargs["port"] == 465
        assert kwargs["use_tls"] is True
        assert kwargs["timeout"] == 5.0
        assert kwargs["username"] == "user"
        assert kwargs["password"] == "pw"

    @pytest.mark.asyncio
    async def test_send_without_credentials(self) -> None:
        sender = SmtpMailSender(hostname="localhost", port=25)

        with patch("mailgate.adapters.mail.smtp_client.aiosmtplib.send", new=AsyncMock()) as mock_send:
            await sender.send(_email())

        assert "username" not in mock_send.await_args.kwargs

    @pytest.mark.asyncio
    async def test_rejection_is_wrapped(self) -> None:
        sender = SmtpMailSender(hostname="localhost", port=25)
        error = aiosmtplib.SMTPResponseException(550, "Mailbox unavailable")

        with patch("mailgate.adapters.mail.smtp_client.aiosmtplib.send", new=AsyncMock(side_effect=error)):
            with pytest.raises(MailDeliveryAppError) as exc_info:
                await sender.send(_email())

        assert exc_info.value.code == "smtp_rejected"
        assert exc_info.value.details == {"smtp_code": 550}

    @pytest.mark.asyncio
    async def test_connection_failure_is_wrapped(self) -> None:
        sender = SmtpMailSender(hostname="localhost", port=25)
        error = aiosmtplib.SMTPConnectError("Connection refused")

        with patch("mailgate.adapters.mail.smtp_client.aiosmtplib.send", new=AsyncMock(side_effect=error)):
            with pytest.raises(MailDeliveryAppError) as exc_info:
                await sender.send(_email())

        assert exc_info.value.code == "smtp_unavailable"

    @pytest.mark.asyncio
    async def test_os_error_is_wrapped(self) -> None:
        sender = SmtpMailSender(hostname="localhost", port=25)

        with patch(
            "mailgate.adapters.mail.smtp_client.aiosmtplib.send",
            new=AsyncMock(side_effect=ConnectionRefusedError()),
        ):
            with pytest.raises(MailDeliveryAppError) as exc_info:
                await sender.send(_email())

        assert exc_info.value.code == "smtp_unavailable"


class TestFactory:
    def test_creates_smtp_sender(self) -> None:
        cfg = SmtpSettings(server="smtp.example.com", port=2525, user="u", password="p")

        sender = create_mail_sender(cfg)

        assert isinstance(sender, SmtpMailSender)
        assert sender.hostname == "smtp.example.com"
        assert sender.port == 2525

    def test_missing_server_raises(self) -> None:
        cfg = SmtpSettings(server=None)

        with pytest.raises(ValidationAppError) as exc_info:
            create_mail_sender(cfg)

        assert exc_info.value.code == "smtp_missing_server"

    def test_sender_address_prefers_sender_email(self) -> None:
        cfg = SmtpSettings(user="login@example.com", sender_email="from@example.com")

        assert resolve_sender_address(cfg) == "from@example.com"

    def test_sender_address_falls_back_to_user(self) -> None:
        cfg = SmtpSettings(user="login@example.com", sender_email=None)

        assert resolve_sender_address(cfg) == "login@example.com"

    def test_missing_sender_raises(self) -> None:
        cfg = SmtpSettings(user=None, sender_email=None)

        with pytest.raises(ValidationAppError) as exc_info:
            resolve_sender_address(cfg)

        assert exc_info.value.code == "smtp_missing_sender"


class TestUnconfiguredMailSender:
    @pytest.mark.asyncio
    async def test_send_reports_missing_setting(self) -> None:
        error = ValidationAppError(code="smtp_missing_server", message="Mail delivery requires SMTP_SERVER")
        sender = UnconfiguredMailSender(error)

        with pytest.raises(MailDeliveryAppError) as exc_info:
            await sender.send(_email())

        assert exc_info.value.code == "smtp_missing_server"
