"""Rolling-window send counter backed by a persisted timestamp log.

The log is a JSON array of epoch-millisecond timestamps in insertion order.
Every read prunes entries that have left the trailing window, so the stored
array stays bounded by the number of sends inside one window.

Admission is decided by the caller: check ``count()`` against ``limit``,
perform the side effect, then ``record()``. Each single operation is atomic
within the process, but the three steps together are not; callers needing a
hard cap serialize them (see EmailSendService).
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, NamedTuple, Sequence

from mailgate.adapters.event_log.base import EventLogStorage
from mailgate.core.errors import StorageCorrupt

logger = logging.getLogger(__name__)

EMAIL_LIMIT = 10
WINDOW_MS = 24 * 60 * 60 * 1000

_MS_PER_HOUR = 60 * 60 * 1000
_MS_PER_MINUTE = 60 * 1000

Clock = Callable[[], int]


def system_clock_ms() -> int:
    """Return the current UNIX time in whole milliseconds."""
    return int(time.time() * 1000)


class HoursMinutes(NamedTuple):
    """Whole hours and minutes of a duration; seconds are dropped."""

    h: int
    m: int

    def __str__(self) -> str:
        return f"{self.h}h {self.m}m"


def ms_to_hh_mm(ms: int) -> HoursMinutes:
    """Split a millisecond duration into whole hours and minutes.

    Truncates rather than rounds. Non-positive durations give ``0h 0m``.

    Examples:
        >>> ms_to_hh_mm(24 * 60 * 60 * 1000)
        HoursMinutes(h=24, m=0)
        >>> ms_to_hh_mm(90 * 60 * 1000 + 59_999)
        HoursMinutes(h=1, m=30)
    """
    if ms <= 0:
        return HoursMinutes(0, 0)
    return HoursMinutes(ms // _MS_PER_HOUR, (ms % _MS_PER_HOUR) // _MS_PER_MINUTE)


@dataclass(frozen=True)
class QuotaSnapshot:
    """Point-in-time view of the send window.

    Attributes:
        count: Sends inside the trailing window.
        limit: Maximum sends per window.
        remaining: Sends still allowed (never negative).
        reset_in_ms: Time until the oldest counted send leaves the window;
            0 while under the limit.
    """

    count: int
    limit: int
    remaining: int
    reset_in_ms: int

    @property
    def reset_in(self) -> HoursMinutes:
        return ms_to_hh_mm(self.reset_in_ms)

    @property
    def exhausted(self) -> bool:
        return self.count >= self.limit


def _parse_log(text: str) -> list[int]:
    """Decode the persisted representation.

    Whole-number floats such as ``1700000000000.0`` are read as integers.

    Raises:
        StorageCorrupt: If the text is not a JSON array of integers.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StorageCorrupt(
            code="event_log_invalid_json",
            message="Send log is not valid JSON",
        ) from exc

    if not isinstance(data, list):
        raise StorageCorrupt(
            code="event_log_not_a_list",
            message="Send log must be a JSON array",
        )
    log: list[int] = []
    for ts in data:
        # bool is an int subclass but never a timestamp
        if isinstance(ts, int) and not isinstance(ts, bool):
            log.append(ts)
        elif isinstance(ts, float) and ts.is_integer():
            log.append(int(ts))
        else:
            raise StorageCorrupt(
                code="event_log_bad_entry",
                message="Send log entries must be integer timestamps",
            )
    return log


def _dump_log(log: Sequence[int]) -> str:
    return json.dumps(list(log), indent=2)


def prune(log: Sequence[int], now: int, *, window_ms: int = WINDOW_MS) -> list[int]:
    """Return the entries of ``log`` still inside the window ending at ``now``.

    An entry exactly ``window_ms`` old is dropped. Order is preserved.
    """
    return [ts for ts in log if now - ts < window_ms]


class RateLimitedEventLog:
    """Persisted, time-windowed counter of send events.

    Single-tenant: one log shared by every caller. The component never
    rejects anything itself; it reports counts and reset times.

    Important:
        Every read-modify-write of the backing store holds an instance
        lock, so a count running in a worker thread cannot overwrite a
        concurrent ``record``. Other processes sharing the same file are
        not covered. Check-then-record is still two operations: two callers
        that both check before either records can overshoot ``limit``.
    """

    def __init__(
        self,
        storage: EventLogStorage,
        *,
        clock: Clock = system_clock_ms,
        limit: int = EMAIL_LIMIT,
        window_ms: int = WINDOW_MS,
    ) -> None:
        """Initialize the event log.

        Args:
            storage: Backend holding the JSON text.
            clock: Time source returning UNIX time in milliseconds.
            limit: Maximum events per window.
            window_ms: Window length in milliseconds.

        Raises:
            ValueError: If limit or window_ms are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")

        self._storage = storage
        self._clock = clock
        self._limit = limit
        self._window_ms = window_ms
        # Reentrant: snapshot() calls count() and time_until_reset().
        self._lock = threading.RLock()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def _now(self, now: int | None) -> int:
        return self._clock() if now is None else now

    def _save(self, log: Sequence[int]) -> None:
        self._storage.write(_dump_log(log))

    def ensure_initialized(self) -> None:
        """Create an empty log if the backend holds nothing yet."""
        with self._lock:
            if self._storage.read() is None:
                self._save([])
                logger.info("event_log.initialized")

    def load(self) -> list[int]:
        """Return the persisted timestamps, oldest first.

        A missing log is created empty. A corrupt log is logged and reset to
        empty instead of failing the caller.

        Raises:
            StorageUnavailable: If the backend cannot be read or written.
        """
        with self._lock:
            text = self._storage.read()
            if text is None:
                self._save([])
                return []
            if not text.strip():
                return []

            try:
                return _parse_log(text)
            except StorageCorrupt as exc:
                logger.warning(
                    "event_log.corrupt",
                    extra={"error_code": exc.code, "action": "reset_to_empty"},
                )
                self._save([])
                return []

    def prune(self, log: Sequence[int], now: int | None = None) -> list[int]:
        return prune(log, self._now(now), window_ms=self._window_ms)

    def count(self, now: int | None = None) -> int:
        """Count events inside the window and write the pruned log back."""
        with self._lock:
            log = self.prune(self.load(), now)
            self._save(log)
            return len(log)

    def time_until_reset(self, now: int | None = None) -> int:
        """Milliseconds until the oldest counted event leaves the window.

        Only meaningful at or over the limit; returns 0 below it.
        """
        now = self._now(now)
        with self._lock:
            log = self.prune(self.load(), now)
        if len(log) < self._limit:
            return 0
        return self._window_ms - (now - log[0])

    def record(self, now: int | None = None) -> None:
        """Append one event at ``now``. Call only after the send succeeded."""
        now = self._now(now)
        with self._lock:
            log = self.prune(self.load(), now)
            log.append(now)
            self._save(log)
        logger.debug("event_log.recorded", extra={"count": len(log), "limit": self._limit})

    def snapshot(self, now: int | None = None) -> QuotaSnapshot:
        """Count, then compute the reset time, at the same ``now``."""
        now = self._now(now)
        with self._lock:
            count = self.count(now)
            reset_in_ms = self.time_until_reset(now)
        return QuotaSnapshot(
            count=count,
            limit=self._limit,
            remaining=max(self._limit - count, 0),
            reset_in_ms=reset_in_ms,
        )
