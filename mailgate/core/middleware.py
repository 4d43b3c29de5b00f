"""Per-request correlation id and access logging.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import re
import time
import uuid

from fastapi import Request, Response

from mailgate.core.config import settings
from mailgate.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

# Incoming ids end up in log lines and response headers.
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

_QUIET_PREFIXES = ("/static/", "/health")


def resolve_request_id(candidate: str | None) -> str:
    """Return the client's id when well-formed, else a fresh UUID4."""
    if candidate and _REQUEST_ID_PATTERN.match(candidate):
        return candidate
    return str(uuid.uuid4())


async def request_id_middleware(request: Request, call_next) -> Response:
    """Tag the request with a correlation id and log one access line for it.

    The id comes from the configured header (``X-Request-ID`` by default)
    when it is well-formed; otherwise one is generated. It is visible to
    every log record emitted while the request runs and is echoed back
    together with ``X-Request-Duration-ms``.

    Access lines (``http.request``) carry method, path, status and duration.
    Static assets and health probes are logged at debug level.
    """

    header_name = settings.log.request_id_header
    request_id = resolve_request_id(request.headers.get(header_name))
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        path = request.url.path
        level = logging.DEBUG if path.startswith(_QUIET_PREFIXES) else logging.INFO
        logger.log(
            level,
            "http.request",
            extra={
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers["X-Request-Duration-ms"] = f"{duration_ms:.2f}"
    return response
