"""In-memory event log backend.

Per-process only; contents are lost on restart. Used by tests and for
throwaway instances where persistence does not matter.
"""

from __future__ import annotations

import threading

from mailgate.adapters.event_log.base import EventLogStorage


class InMemoryEventLogStorage(EventLogStorage):
    """Hold the event log text in a single attribute."""

    def __init__(self, initial: str | None = None) -> None:
        self._text = initial
        self._lock = threading.Lock()
        self.writes = 0

    def read(self) -> str | None:
        with self._lock:
            return self._text

    def write(self, text: str) -> None:
        with self._lock:
            self._text = text
            self.writes += 1
