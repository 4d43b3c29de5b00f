import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse

from mailgate.api.rendering import templates
from mailgate.core.auth import require_login
from mailgate.core.errors import (
    MailDeliveryAppError,
    SendLimitExceededError,
    StorageUnavailable,
    ValidationAppError,
)
from mailgate.core.file_validation import read_attachment
from mailgate.core.rate_limit import get_event_log, get_send_service, rate_limit_headers
from mailgate.schemas.email import EmailQuotaResponse, SendEmailRequest
from mailgate.services.event_log import RateLimitedEventLog
from mailgate.services.send_service import EmailSendService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Email"])


def _message_page(
    request: Request,
    lines: list[str],
    *,
    status_code: int = 200,
    success: bool = False,
    headers: dict[str, str] | None = None,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "message.html",
        {"lines": lines, "success": success},
        status_code=status_code,
        headers=headers,
    )


@router.get(
    "/email-count",
    response_model=EmailQuotaResponse,
    response_model_by_alias=True,
)
def email_count(
    user: dict = Depends(require_login),
    event_log: RateLimitedEventLog = Depends(get_event_log),
) -> EmailQuotaResponse:
    """Report how much of the rolling 24-hour window is used.

    Reading the count prunes expired entries from the stored log.

    Returns:
        EmailQuotaResponse: ``count``, ``limit``, ``remaining``,
        ``resetInMs`` and ``resetInHuman``.

    Raises:
        StorageUnavailable: If the log cannot be read (503).
    """

    return EmailQuotaResponse.from_snapshot(event_log.snapshot())


@router.post("/send-email", response_class=HTMLResponse)
async def send_email(
    request: Request,
    to: str = Form(""),
    cc: str = Form(""),
    subject: str = Form(""),
    body: str = Form(""),
    attachment: UploadFile | None = File(None),
    user: dict = Depends(require_login),
    service: EmailSendService = Depends(get_send_service),
) -> HTMLResponse:
    """Send one email from the dashboard form.

    The message goes out only while fewer than 10 sends are recorded in the
    last 24 hours; a refused send renders the time until capacity frees up.

    Args:
        request: Incoming request (used for template rendering).
        to: Recipient address(es).
        cc: Optional CC address(es).
        subject: Subject line.
        body: HTML body.
        attachment: Optional single file, read into memory.
        user: Logged-in operator.
        service: Send workflow with the rolling limit.

    Returns:
        HTML result page: 200 on success, 400 for missing fields, 429 when
        the limit is reached, 500 when the relay fails, 503 when the send
        log is unavailable.

    Raises:
        HTTPException: 413 if the attachment exceeds the upload limit.
    """

    attachments = []
    upload = await read_attachment(attachment)
    if upload is not None:
        attachments.append(upload)

    send_request = SendEmailRequest(to=to, cc=cc, subject=subject, body=body)

    try:
        await service.send(send_request, attachments)
    except ValidationAppError as exc:
        return _message_page(request, [exc.message], status_code=400)
    except SendLimitExceededError as exc:
        details = exc.details or {}
        return _message_page(
            request,
            [
                f"Email NOT sent. {exc.message}",
                f"Emails sent in the last 24 hours: {details.get('count')}.",
                f"Your limit will reset in about {details.get('reset_in_human')}.",
            ],
            status_code=429,
            headers=rate_limit_headers(
                details["limit"], details["count"], details["reset_in_ms"]
            ),
        )
    except MailDeliveryAppError as exc:
        logger.error("send.failed", extra={"error_code": exc.code})
        return _message_page(request, ["Failed to send email."], status_code=500)
    except StorageUnavailable as exc:
        logger.error("send.refused_storage_unavailable", extra={"error_code": exc.code})
        return _message_page(
            request,
            ["Email NOT sent. The send log is unavailable, please try again later."],
            status_code=503,
        )

    return _message_page(request, ["Email sent successfully!"], success=True)
