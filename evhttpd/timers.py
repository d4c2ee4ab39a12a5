"""Queue of connection deadlines used to kick clients that stop pinging."""

from __future__ import annotations

import bisect
import itertools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class TimerEntry:
    """A connection together with its sequence number when it was queued."""

    conn: Any
    sequence: int

    @property
    def is_stale(self) -> bool:
        """True once the connection slot has changed hands since queuing."""
        return self.conn.current_sequence != self.sequence


class TimerQueue:
    """Deadlines ordered by time; entries with equal times keep insertion order.

    Each deadline lies ``wait_time`` seconds after the moment it was set.
    When ``timeout_kick`` is off, an overdue entry is put back with a fresh
    deadline as it is taken out, so the connection keeps being checked.
    """

    def __init__(self, wait_time: float = 5, timeout_kick: bool = False) -> None:
        if wait_time <= 0:
            raise ValueError("wait_time must be positive")
        self.wait_time = wait_time
        self.timeout_kick = timeout_kick
        self._entries: list[tuple[float, int, TimerEntry]] = []
        self._counter = itertools.count()
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"TimerQueue(size={len(self)}, earliest={self.earliest_time()})"

    def _insert(self, expires: float, entry: TimerEntry) -> None:
        bisect.insort(self._entries, (expires, next(self._counter), entry))

    def add(self, conn, now: Optional[float] = None) -> TimerEntry:
        """Queue a deadline for *conn* ``wait_time`` seconds after *now*."""
        if now is None:
            now = time.time()
        entry = TimerEntry(conn, conn.current_sequence)
        with self._lock:
            self._insert(now + self.wait_time, entry)
        return entry

    def earliest_time(self) -> float:
        """The nearest deadline, or 0 when the queue is empty."""
        with self._lock:
            return self._entries[0][0] if self._entries else 0

    def pop_first(self) -> Optional[TimerEntry]:
        """Remove and return the entry with the nearest deadline."""
        with self._lock:
            if not self._entries:
                return None
            return self._entries.pop(0)[2]

    def pop_overdue(self, now: float) -> Optional[TimerEntry]:
        """Take out one entry whose deadline is at or before *now*."""
        with self._lock:
            if not self._entries or self._entries[0][0] > now:
                return None
            entry = self._entries.pop(0)[2]
            if not self.timeout_kick:
                self._insert(now + self.wait_time, entry)
            return entry

    def expired(self, now: Optional[float] = None) -> list[TimerEntry]:
        """Take out every entry overdue at *now*, nearest deadline first."""
        if now is None:
            now = time.time()
        overdue: list[TimerEntry] = []
        while (entry := self.pop_overdue(now)) is not None:
            overdue.append(entry)
        return overdue

    def remove_connection(self, conn) -> int:
        """Drop every entry for *conn*; return how many were dropped."""
        with self._lock:
            kept = [item for item in self._entries if item[2].conn is not conn]
            removed = len(self._entries) - len(kept)
            self._entries = kept
        if removed:
            logger.debug("removed %d timer entries", removed)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()