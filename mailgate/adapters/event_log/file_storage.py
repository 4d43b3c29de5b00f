"""JSON file backend for the event log.

Notes:
- Single file shared by every request in the process.
- Writes go to a sibling temp file and are moved into place, so a reader
  never sees a half-written array.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from mailgate.adapters.event_log.base import EventLogStorage
from mailgate.core.errors import StorageUnavailable

logger = logging.getLogger(__name__)


class JsonFileEventLogStorage(EventLogStorage):
    """Store the event log as a text file on the local filesystem."""

    def __init__(self, path: str | os.PathLike[str], *, encoding: str = "utf-8") -> None:
        """Initialize the file backend.

        Args:
            path: Location of the JSON log file. Parent directories are
                created on first write.
            encoding: Text encoding used for reads and writes.
        """
        self._path = Path(path)
        self._encoding = encoding

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> str | None:
        try:
            return self._path.read_text(encoding=self._encoding)
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.error(
                "event_log.read_failed",
                extra={"path": str(self._path), "error_type": type(exc).__name__},
            )
            raise StorageUnavailable(
                code="event_log_unreadable",
                message="Send log could not be read",
                details={"path": str(self._path)},
            ) from exc

    def write(self, text: str) -> None:
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=self._path.parent,
            )
            with os.fdopen(fd, "w", encoding=self._encoding) as handle:
                handle.write(text)
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as exc:
            logger.error(
                "event_log.write_failed",
                extra={"path": str(self._path), "error_type": type(exc).__name__},
            )
            raise StorageUnavailable(
                code="event_log_unwritable",
                message="Send log could not be written",
                details={"path": str(self._path)},
            ) from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
