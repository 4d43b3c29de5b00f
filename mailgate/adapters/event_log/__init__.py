"""Event log storage adapters.

The send-count log talks to a tiny read/write text interface so the JSON file
on disk can be swapped for another store (or an in-memory one in tests)
without touching the window logic.
"""

from mailgate.adapters.event_log.base import EventLogStorage
from mailgate.adapters.event_log.file_storage import JsonFileEventLogStorage
from mailgate.adapters.event_log.in_memory import InMemoryEventLogStorage

__all__ = [
    "EventLogStorage",
    "InMemoryEventLogStorage",
    "JsonFileEventLogStorage",
]
