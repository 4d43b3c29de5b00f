"""OpenAPI customization.

Documents the session cookie as the security scheme for operator routes and
adds tag descriptions. Public routes (health, login) are marked as needing no
authentication.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

SESSION_COOKIE_NAME = "session"

PUBLIC_PATHS = {"/health", "/login"}

TAGS_METADATA = [
    {
        "name": "Email",
        "description": "Send email and inspect the rolling 24-hour send limit.",
    },
    {
        "name": "Auth",
        "description": "Operator login and logout.",
    },
    {
        "name": "Pages",
        "description": "HTML pages of the operator console.",
    },
    {
        "name": "Health",
        "description": "Liveness checks.",
    },
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add the session scheme and tags."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        components.setdefault("securitySchemes", {}).setdefault(
            "SessionCookie",
            {
                "type": "apiKey",
                "in": "cookie",
                "name": SESSION_COOKIE_NAME,
                "description": "Signed session cookie set by POST /login.",
            },
        )
        schema.setdefault("security", [{"SessionCookie": []}])

        tags = schema.setdefault("tags", [])
        known = {t.get("name") for t in tags}
        tags.extend(t for t in TAGS_METADATA if t["name"] not in known)

        for path, methods in schema.get("paths", {}).items():
            if path in PUBLIC_PATHS:
                for method_obj in methods.values():
                    if isinstance(method_obj, dict):
                        method_obj["security"] = []

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
