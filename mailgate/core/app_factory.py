"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build a fresh instance with patched settings.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from mailgate.api.routes import auth_router, email_router, health_router, pages_router
from mailgate.core.config import settings
from mailgate.core.errors import StorageUnavailable
from mailgate.core.exception_handlers import setup_exception_handlers
from mailgate.core.logging import configure_logging
from mailgate.core.middleware import request_id_middleware
from mailgate.core.openapi import SESSION_COOKIE_NAME, apply_openapi_customizations
from mailgate.core.rate_limit import get_event_log

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parents[1] / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        get_event_log().ensure_initialized()
    except StorageUnavailable as exc:
        # Sends fail closed until the log becomes writable.
        logger.error("event_log.init_failed", extra={"error_code": exc.code})
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Mailgate",
        description=(
            "Single-operator console for sending email through an SMTP relay, "
            "limited to 10 sends per rolling 24 hours."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    # Middleware
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.app.session_secret,
        session_cookie=SESSION_COOKIE_NAME,
        same_site="lax",
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers and static assets
    app.include_router(pages_router)
    app.include_router(auth_router)
    app.include_router(email_router)
    app.include_router(health_router)
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    apply_openapi_customizations(app)

    return app
