from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe.

    Does not touch the send log or the mail relay, so it stays green while
    either is unavailable.

    Returns:
        dict: ``{"status": "ok"}``.
    """

    return {"status": "ok"}
