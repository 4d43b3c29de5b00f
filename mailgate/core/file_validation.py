"""Attachment upload handling."""
from __future__ import annotations

import logging

from fastapi import HTTPException, UploadFile

from mailgate.adapters.mail.base import Attachment
from mailgate.core.config import settings

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 8192


def _too_large() -> HTTPException:
    return HTTPException(
        status_code=413,
        detail=f"Attachment too large. Maximum size: {settings.app.max_upload_size_mb}MB",
    )


async def read_upload_file_limited(file: UploadFile) -> bytes:
    """Read an uploaded file in chunks enforcing the max size limit.

    Uses file.size if available (multipart headers), falls back to chunked
    reading with enforcement.

    Args:
        file: FastAPI upload file instance.

    Returns:
        File content as bytes if within the allowed size limit.

    Raises:
        HTTPException: 413 if the file exceeds the configured size limit.
    """
    max_bytes = settings.app.max_upload_size_mb * 1024 * 1024

    file_size = getattr(file, "size", None)
    if file_size is not None and file_size > max_bytes:
        logger.warning(
            "upload.rejected_by_header",
            extra={"file_size": file_size, "max_bytes": max_bytes},
        )
        raise _too_large()

    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(_CHUNK_SIZE)
        if not chunk:
            break

        size += len(chunk)
        if size > max_bytes:
            logger.warning(
                "upload.rejected_by_chunked_read",
                extra={"size": size, "max_bytes": max_bytes},
            )
            raise _too_large()
        chunks.append(chunk)

    return b"".join(chunks)


async def read_attachment(file: UploadFile | None) -> Attachment | None:
    """Turn the optional form upload into an Attachment.

    Browsers submit an empty part with no filename when the file input is
    left blank; that counts as no attachment.
    """
    if file is None or not file.filename:
        return None

    content = await read_upload_file_limited(file)
    logger.debug(
        "upload.accepted",
        extra={"size": len(content), "content_type": file.content_type},
    )
    return Attachment(
        filename=file.filename,
        content=content,
        content_type=file.content_type,
    )
