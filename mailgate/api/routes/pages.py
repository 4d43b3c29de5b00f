from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from mailgate.api.rendering import templates
from mailgate.core.auth import require_login
from mailgate.services.event_log import EMAIL_LIMIT

router = APIRouter(tags=["Pages"])


@router.get("/", response_class=RedirectResponse)
async def index() -> RedirectResponse:
    return RedirectResponse("/dashboard", status_code=303)


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(request: Request, user: dict = Depends(require_login)) -> HTMLResponse:
    """Render the send form.

    The quota panel is filled in by the page script from ``/email-count``.
    """
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"username": user.get("username"), "limit": EMAIL_LIMIT},
    )
