"""Event log storage interface.

The event log should depend on this abstraction (not the concrete backend)
so the JSON file can be replaced later with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class EventLogStorage(ABC):
    """Interface for the persisted representation of the event log."""

    @abstractmethod
    def read(self) -> str | None:
        """Return the stored text, or None when nothing has been stored yet.

        Raises:
            StorageUnavailable: If the backend cannot be read.
        """
        raise NotImplementedError

    @abstractmethod
    def write(self, text: str) -> None:
        """Replace the stored text.

        Raises:
            StorageUnavailable: If the backend cannot be written.
        """
        raise NotImplementedError
