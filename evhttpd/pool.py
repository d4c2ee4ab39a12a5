"""Pool of reusable connection slots with delayed recycling."""

from __future__ import annotations

import logging
import socket
import threading
from collections import deque
from typing import Any, Callable, Optional

from .connection import Connection

logger = logging.getLogger(__name__)

ContextFactory = Callable[[], Any]


class ConnectionPool:
    """Hands out :class:`Connection` slots and takes them back.

    The pool starts with ``worker_connections`` slots and grows by that many
    whenever no free slot is left. Slots of closed clients are parked in a
    recycle queue for ``recycle_wait_time`` seconds before they become free
    again, so work still queued for them can notice they changed hands.
    """

    def __init__(
        self,
        worker_connections: int = 1,
        recycle_wait_time: float = 600,
        *,
        context_factory: Optional[ContextFactory] = None,
    ) -> None:
        if worker_connections < 1:
            raise ValueError("worker_connections must be at least 1")
        self.worker_connections = worker_connections
        self.recycle_wait_time = recycle_wait_time
        self._context_factory = context_factory
        self._lock = threading.Lock()
        self._recycle_lock = threading.Lock()
        self.connections: list[Connection] = []
        self._free: deque[Connection] = deque()
        self._recycle: list[Connection] = []
        self.online_count = 0
        self._grow()

    def __repr__(self) -> str:
        return (
            f"ConnectionPool(total={self.total_count}, free={self.free_count}, "
            f"recycling={self.recycle_count}, online={self.online_count})"
        )

    @property
    def total_count(self) -> int:
        return len(self.connections)

    @property
    def free_count(self) -> int:
        return len(self._free)

    @property
    def recycle_count(self) -> int:
        return len(self._recycle)

    def _new_context(self) -> Any:
        return self._context_factory() if self._context_factory is not None else None

    def _grow(self) -> None:
        """Add ``worker_connections`` fresh slots; caller holds the lock or owns the pool."""
        base = len(self.connections)
        for offset in range(self.worker_connections):
            conn = Connection(base + offset, self._new_context())
            conn.get_one_to_use(None)
            self.connections.append(conn)
            self._free.append(conn)

    def get_connection(self, sock: Optional[socket.socket]) -> Connection:
        """Take a free slot, growing the pool if needed, and bind it to *sock*."""
        with self._lock:
            if not self._free:
                self._grow()
            logger.debug("free connections: %d", len(self._free))
            conn = self._free.popleft()
            conn.get_one_to_use(sock)
            self.online_count += 1
            return conn

    def free_connection(self, conn: Connection) -> None:
        """Return *conn* to the back of the free list."""
        with self._lock:
            conn.put_one_to_free()
            self._free.append(conn)
            logger.debug("free connections: %d", len(self._free))

    def close_connection(self, conn: Connection) -> None:
        """Close the socket of *conn* and free the slot at once."""
        conn.close_socket()
        self.free_connection(conn)

    def enqueue_recycle(self, conn: Connection, now: float) -> bool:
        """Park *conn* for delayed freeing; False if it is already parked."""
        with self._recycle_lock:
            if any(parked.id == conn.id for parked in self._recycle):
                logger.debug(
                    "connection already in recycle queue, size: %d", len(self._recycle)
                )
                return False
            conn.in_recycle_time = now
            conn.current_sequence += 1
            self.online_count -= 1
            self._recycle.append(conn)
            logger.debug("recycle queue size: %d", len(self._recycle))
            return True

    def reap_recycled(self, now: float) -> list[Connection]:
        """Free every parked slot whose wait has run out; return those freed."""
        if not self.connections:
            return []
        freed: list[Connection] = []
        with self._recycle_lock:
            remaining: list[Connection] = []
            for conn in self._recycle:
                if conn.in_recycle_time + self.recycle_wait_time <= now:
                    self.free_connection(conn)
                    freed.append(conn)
                else:
                    remaining.append(conn)
            self._recycle = remaining
        return freed

    def clear(self) -> None:
        """Forget every slot."""
        with self._lock:
            self.connections.clear()
            self._free.clear()
        with self._recycle_lock:
            self._recycle.clear()