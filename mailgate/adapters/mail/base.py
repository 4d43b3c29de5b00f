from __future__ import annotations

import mimetypes
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from email.message import EmailMessage


@dataclass(frozen=True)
class Attachment:
	"""A file to attach, already read into memory."""

	filename: str
	content: bytes
	content_type: str | None = None

	def mime_parts(self) -> tuple[str, str]:
		"""Return (maintype, subtype), guessing from the filename when needed."""
		content_type = self.content_type
		if not content_type or "/" not in content_type:
			content_type, _ = mimetypes.guess_type(self.filename)
		if not content_type:
			content_type = "application/octet-stream"
		maintype, _, subtype = content_type.partition("/")
		return maintype, subtype


@dataclass(frozen=True)
class OutgoingEmail:
	"""Everything needed to hand one message to a relay."""

	sender: str
	to: str
	subject: str
	html_body: str
	cc: str | None = None
	attachments: list[Attachment] = field(default_factory=list)

	@property
	def recipients(self) -> list[str]:
		addresses = [self.to, *(self.cc or "").split(",")]
		return [a.strip() for a in addresses if a and a.strip()]


def build_mime_message(email: OutgoingEmail) -> EmailMessage:
	"""Render an OutgoingEmail as a MIME message with an HTML body."""
	msg = EmailMessage()
	msg["From"] = email.sender
	msg["To"] = email.to
	if email.cc and email.cc.strip():
		msg["Cc"] = email.cc
	msg["Subject"] = email.subject
	msg.set_content(email.html_body, subtype="html")
	for attachment in email.attachments:
		maintype, subtype = attachment.mime_parts()
		msg.add_attachment(
			attachment.content,
			maintype=maintype,
			subtype=subtype,
			filename=attachment.filename,
		)
	return msg


class AbstractMailSender(ABC):
	"""Interface for transports that deliver a message to a mail relay."""

	@abstractmethod
	async def send(self, email: OutgoingEmail) -> None:
		"""Deliver one message.

		Args:
			email: Message to deliver.

		Raises:
			MailDeliveryAppError: If the relay cannot be reached or rejects the message.
		"""
		...
