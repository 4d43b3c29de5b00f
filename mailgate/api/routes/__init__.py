from __future__ import annotations

from mailgate.api.routes.auth import router as auth_router
from mailgate.api.routes.email import router as email_router
from mailgate.api.routes.health import router as health_router
from mailgate.api.routes.pages import router as pages_router

__all__ = ["auth_router", "email_router", "health_router", "pages_router"]
