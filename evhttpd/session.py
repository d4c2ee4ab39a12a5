"""HTTP sessions: per-client key/value data tracked through a cookie."""

from __future__ import annotations

import logging
import secrets
import time
from typing import Callable, Iterator, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = 3600
COOKIE_NAME = "sessionId"

Clock = Callable[[], float]


def session_id_from_cookie(cookie: str) -> str:
    """Return the session id carried in a Cookie header value, or ''."""
    if not cookie:
        return ""
    marker = COOKIE_NAME + "="
    pos = cookie.find(marker)
    if pos == -1:
        return ""
    start = pos + len(marker)
    end = cookie.find(";", start)
    return cookie[start:] if end == -1 else cookie[start:end]


def session_cookie(session_id: str) -> str:
    """Return the Set-Cookie value that hands *session_id* to a client."""
    return f"{COOKIE_NAME}={session_id}; Path=/; HttpOnly"


class Session:
    """A client session holding string data and an expiry time."""

    def __init__(
        self,
        session_id: str,
        manager: Optional["SessionManager"] = None,
        max_age: int = DEFAULT_MAX_AGE,
        *,
        clock: Clock = time.time,
    ) -> None:
        self.session_id = session_id
        self.manager = manager
        self.max_age = max_age
        self.data: dict[str, str] = {}
        self._clock = clock
        self.expiry_time = 0.0
        self.refresh()

    def __repr__(self) -> str:
        return f"Session({self.session_id!r}, expiry_time={self.expiry_time})"

    def is_expired(self) -> bool:
        """True once the current time is past the expiry time."""
        return self._clock() > self.expiry_time

    def refresh(self) -> None:
        """Push the expiry time to max_age seconds from now."""
        self.expiry_time = self._clock() + self.max_age

    def set_value(self, key: str, value: str) -> None:
        """Store a value; the owning manager, if any, saves the session."""
        self.data[key] = value
        if self.manager is not None:
            self.manager.update_session(self)

    def get_value(self, key: str) -> str:
        """Return the stored value, or '' when the key is absent."""
        return self.data.get(key, "")

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def clear(self) -> None:
        self.data.clear()


class MemorySessionStorage:
    """Keeps sessions in a dictionary keyed by session id."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._sessions))

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def save(self, session: Session) -> None:
        self._sessions[session.session_id] = session

    def load(self, session_id: str) -> Optional[Session]:
        """Return a live session, dropping it instead if it has expired."""
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.is_expired():
            del self._sessions[session_id]
            return None
        return session

    def remove(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)


class SessionManager:
    """Finds or creates the session for each request.

    Requests expose a ``headers`` mapping; responses an
    ``add_header(name, value)`` method.
    """

    def __init__(
        self,
        storage: Optional[MemorySessionStorage] = None,
        *,
        max_age: int = DEFAULT_MAX_AGE,
        clock: Clock = time.time,
    ) -> None:
        self.storage = storage if storage is not None else MemorySessionStorage()
        self.max_age = max_age
        self._clock = clock

    def get_session(self, request, response) -> Session:
        """Load the session named by the request cookie, or start a new one."""
        session_id = session_id_from_cookie(request.headers.get("Cookie", ""))
        session = self.storage.load(session_id) if session_id else None

        if session is None or session.is_expired():
            session_id = self.generate_session_id()
            session = Session(session_id, self, self.max_age, clock=self._clock)
            response.add_header("Set-Cookie", session_cookie(session_id))
        else:
            session.manager = self

        session.refresh()
        self.storage.save(session)
        return session

    def generate_session_id(self) -> str:
        """Return 32 random hexadecimal digits."""
        return secrets.token_hex(16)

    def update_session(self, session: Session) -> None:
        self.storage.save(session)

    def destroy_session(self, session_id: str) -> None:
        self.storage.remove(session_id)

    def clean_expired_sessions(self) -> int:
        """Drop every expired session from the storage; return how many went."""
        before = len(self.storage)
        for session_id in self.storage:
            self.storage.load(session_id)
        removed = before - len(self.storage)
        if removed:
            logger.debug("removed %d expired sessions", removed)
        return removed