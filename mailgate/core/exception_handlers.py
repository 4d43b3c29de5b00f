"""Global exception handlers for consistent error responses.

Design:
- AppError subclasses → HTTP status by type (400, 403, 429, 502, 503)
- LoginRequired → 303 redirect to the login page
- Unexpected Exception → generic 500 (safety net)
- All JSON error bodies include request_id for tracing
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse

from mailgate.core.errors import (
    AppError,
    AuthenticationAppError,
    LoginRequired,
    MailDeliveryAppError,
    SendLimitExceededError,
    StorageCorrupt,
    StorageUnavailable,
)
from mailgate.core.logging import get_request_id
from mailgate.core.rate_limit import rate_limit_headers

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"


def status_code_for(exc: AppError) -> int:
    """Map a domain error to its HTTP status code."""
    if isinstance(exc, AuthenticationAppError):
        return 403
    if isinstance(exc, SendLimitExceededError):
        return 429
    if isinstance(exc, MailDeliveryAppError):
        return 502
    if isinstance(exc, StorageUnavailable):
        return 503
    if isinstance(exc, StorageCorrupt) or type(exc) is AppError:
        return 500
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Response body:
    - error.code: Machine-readable error code
    - error.message: Human-readable message
    - error.request_id: For tracing
    - error.details: Optional structured context

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = status_code_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    headers = None
    if isinstance(exc, SendLimitExceededError) and exc.details:
        headers = rate_limit_headers(
            exc.details["limit"], exc.details["count"], exc.details["reset_in_ms"]
        )

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers,
    )


async def login_required_handler(request: Request, exc: LoginRequired) -> RedirectResponse:
    """Send anonymous visitors of protected pages to the login form."""
    return RedirectResponse(LOGIN_PATH, status_code=303)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs the failure for debugging while returning a generic message; no
    exception text or stack trace reaches the client.
    """
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={
            "error_type": type(exc).__name__,
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(LoginRequired)(login_required_handler)
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
