"""State kept for one client connection drawn from the pool."""

from __future__ import annotations

import logging
import socket
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

Handler = Callable[["Connection"], Any]


class Connection:
    """A reusable slot bound to one accepted socket at a time.

    ``current_sequence`` is bumped whenever the slot is handed out or
    returned, so messages queued for an earlier client can be recognised
    as stale.
    """

    def __init__(self, conn_id: int = 0, context: Any = None) -> None:
        self.id = conn_id
        self.sock: Optional[socket.socket] = None
        self.listening: Any = None
        self.peer: Any = None
        self.read_handler: Optional[Handler] = None
        self.write_handler: Optional[Handler] = None
        self.events = 0

        self.current_sequence = 0
        self.sequence = 0
        self.send_sequence = 0
        self.send_buffer = bytearray()

        self.in_recycle_time = 0.0
        self.last_ping_time = 0.0
        self.flood_kick_last_time = 0
        self.flood_attack_count = 0
        self.send_count = 0
        self.http_close = True

        self.context = context
        self.lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"Connection(id={self.id}, open={self.is_open}, "
            f"sequence={self.current_sequence})"
        )

    @property
    def is_open(self) -> bool:
        return self.sock is not None

    def fileno(self) -> int:
        """Descriptor of the bound socket, or -1 when none is bound."""
        return self.sock.fileno() if self.sock is not None else -1

    def get_one_to_use(self, sock: Optional[socket.socket]) -> None:
        """Reset per-client state and bind the slot to *sock*."""
        self.in_recycle_time = 0.0
        self.last_ping_time = 0.0
        self.flood_kick_last_time = 0
        self.flood_attack_count = 0
        self.send_count = 0
        self.http_close = True
        if self.context is not None:
            self.context.reset()
        self.sequence = 0
        self.current_sequence += 1
        self.sock = sock

    def put_one_to_free(self) -> None:
        """Mark the slot as returned so pending work for it is discarded."""
        self.current_sequence += 1

    def close_socket(self) -> None:
        """Close the bound socket, if any, and unbind it."""
        if self.sock is None:
            return
        try:
            self.sock.close()
        except OSError as exc:
            logger.warning("closing connection %d failed: %s", self.id, exc)
        self.sock = None