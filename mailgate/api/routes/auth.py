from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from mailgate.adapters.auth.base import AbstractCredentialVerifier
from mailgate.api.rendering import templates
from mailgate.core.auth import (
    authenticate,
    current_user,
    get_credential_verifier,
    login_session,
    logout_session,
)
from mailgate.core.errors import AuthenticationAppError

router = APIRouter(tags=["Auth"])


@router.get("/login", response_class=HTMLResponse, response_model=None)
async def login_page(request: Request) -> HTMLResponse | RedirectResponse:
    """Render the login form; logged-in operators go straight to the dashboard."""
    if current_user(request) is not None:
        return RedirectResponse("/dashboard", status_code=303)

    return templates.TemplateResponse(
        request,
        "login.html",
        {"error": request.query_params.get("error") == "1"},
    )


@router.post("/login", response_class=RedirectResponse)
async def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    verifier: AbstractCredentialVerifier = Depends(get_credential_verifier),
) -> RedirectResponse:
    """Open an operator session.

    Always answers with a 303 so the browser follows up with a GET: to the
    dashboard on success, back to the form with ``?error=1`` otherwise.
    """
    try:
        authenticate(username, password, verifier)
    except AuthenticationAppError:
        return RedirectResponse("/login?error=1", status_code=303)

    login_session(request, username)
    return RedirectResponse("/dashboard", status_code=303)


@router.post("/logout", response_class=RedirectResponse)
async def logout(request: Request) -> RedirectResponse:
    logout_session(request)
    return RedirectResponse("/login", status_code=303)
