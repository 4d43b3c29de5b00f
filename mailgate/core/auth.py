"""Operator session authentication.

A successful login stores ``{"username": ...}`` under the ``user`` key of the
signed session cookie (Starlette SessionMiddleware). Protected routes depend
on ``require_login``, which raises ``LoginRequired``; the exception handler
turns that into a redirect to the login page.

The credential check itself is delegated to an AbstractCredentialVerifier so
the single configured account can be replaced without touching the routes.
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import Request

from mailgate.adapters.auth.base import AbstractCredentialVerifier
from mailgate.adapters.auth.static import StaticCredentialVerifier
from mailgate.core.config import settings
from mailgate.core.errors import AuthenticationAppError, LoginRequired

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user"

_verifier: AbstractCredentialVerifier | None = None
_verifier_config: tuple[str, str] | None = None


def get_credential_verifier() -> AbstractCredentialVerifier:
    """Return the process-wide verifier built from settings.

    Rebuilt when the configured credentials change (primarily in tests).
    """

    global _verifier, _verifier_config

    config = (settings.app.admin_username, settings.app.admin_password)
    if _verifier is None or _verifier_config != config:
        _verifier = StaticCredentialVerifier(*config)
        _verifier_config = config
    return _verifier


def _username_hash(username: str) -> str:
    """Hash the submitted username for logging without echoing it."""
    return hashlib.sha256(username.encode()).hexdigest()[:16]


def authenticate(
    username: str,
    password: str,
    verifier: AbstractCredentialVerifier,
) -> None:
    """Check login form credentials.

    Args:
        username: Submitted login name.
        password: Submitted password.
        verifier: Credential backend to consult.

    Raises:
        AuthenticationAppError: If the credentials are rejected.
    """

    if verifier.verify(username, password):
        logger.info("auth.login_succeeded", extra={"username_hash": _username_hash(username)})
        return

    logger.warning("auth.login_failed", extra={"username_hash": _username_hash(username)})
    raise AuthenticationAppError(
        code="invalid_credentials",
        message="Invalid username or password",
    )


def current_user(request: Request) -> dict | None:
    """Return the session user, or None when nobody is logged in."""
    user = request.session.get(SESSION_USER_KEY)
    return user if isinstance(user, dict) else None


def login_session(request: Request, username: str) -> None:
    request.session[SESSION_USER_KEY] = {"username": username}


def logout_session(request: Request) -> None:
    request.session.clear()


async def require_login(request: Request) -> dict:
    """FastAPI dependency guarding operator-only routes.

    Usage:
        @router.get("/dashboard")
        async def dashboard(user: dict = Depends(require_login)):
            ...

    Raises:
        LoginRequired: If the request has no operator session.
    """

    user = current_user(request)
    if user is None:
        logger.debug("auth.session_missing", extra={"path": request.url.path})
        raise LoginRequired()
    return user
