import re

import pytest

from evhttpd.session import (
    MemorySessionStorage,
    Session,
    SessionManager,
    session_cookie,
    session_id_from_cookie,
)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class FakeRequest:
    def __init__(self, headers=None):
        self.headers = headers or {}


class FakeResponse:
    def __init__(self):
        self.headers = []

    def add_header(self, name, value):
        self.headers.append((name, value))


@pytest.fixture
def clock():
    return FakeClock()


def test_session_expiry_follows_clock(clock):
    session = Session("abc", max_age=10, clock=clock)
    assert not session.is_expired()
    clock.now += 10
    assert not session.is_expired()
    clock.now += 1
    assert session.is_expired()


def test_refresh_extends_expiry(clock):
    session = Session("abc", max_age=10, clock=clock)
    clock.now += 8
    session.refresh()
    clock.now += 8
    assert not session.is_expired()


def test_values_set_get_remove_clear(clock):
    session = Session("abc", clock=clock)
    session.set_value("user", "alice")
    session.set_value("role", "admin")
    assert session.get_value("user") == "alice"
    assert session.get_value("missing") == ""
    session.remove("user")
    assert session.get_value("user") == ""
    session.remove("user")
    session.clear()
    assert session.data == {}


def test_set_value_saves_through_manager(clock):
    storage = MemorySessionStorage()
    manager = SessionManager(storage, clock=clock)
    session = Session("abc", manager, clock=clock)
    assert storage.load("abc") is None
    session.set_value("k", "v")
    assert storage.load("abc") is session


def test_storage_load_drops_expired(clock):
    storage = MemorySessionStorage()
    session = Session("abc", max_age=5, clock=clock)
    storage.save(session)
    assert storage.load("abc") is session
    clock.now += 6
    assert storage.load("abc") is None
    assert "abc" not in storage


def test_storage_remove(clock):
    storage = MemorySessionStorage()
    storage.save(Session("abc", clock=clock))
    storage.remove("abc")
    storage.remove("abc")
    assert storage.load("abc") is None
    assert len(storage) == 0


@pytest.mark.parametrize(
    "cookie, expected",
    [
        ("sessionId=abc123", "abc123"),
        ("theme=dark; sessionId=abc123; lang=en", "abc123"),
        ("theme=dark", ""),
        ("", ""),
    ],
)
def test_session_id_from_cookie(cookie, expected):
    assert session_id_from_cookie(cookie) == expected


def test_session_cookie_round_trip():
    value = session_cookie("abc123")
    assert value == "sessionId=abc123; Path=/; HttpOnly"
    assert session_id_from_cookie(value) == "abc123"


def test_generate_session_id_format():
    manager = SessionManager()
    ids = {manager.generate_session_id() for _ in range(20)}
    assert len(ids) == 20
    assert all(re.fullmatch(r"[0-9a-f]{32}", i) for i in ids)


def test_get_session_creates_and_sets_cookie(clock):
    manager = SessionManager(clock=clock)
    response = FakeResponse()
    session = manager.get_session(FakeRequest(), response)
    assert response.headers == [("Set-Cookie", session_cookie(session.session_id))]
    assert manager.storage.load(session.session_id) is session
    assert session.manager is manager


def test_get_session_reuses_existing(clock):
    manager = SessionManager(clock=clock)
    first = manager.get_session(FakeRequest(), FakeResponse())
    first.set_value("user", "alice")
    response = FakeResponse()
    request = FakeRequest({"Cookie": session_cookie(first.session_id)})
    second = manager.get_session(request, response)
    assert second is first
    assert second.get_value("user") == "alice"
    assert response.headers == []


def test_get_session_replaces_expired(clock):
    manager = SessionManager(max_age=5, clock=clock)
    first = manager.get_session(FakeRequest(), FakeResponse())
    clock.now += 6
    response = FakeResponse()
    request = FakeRequest({"Cookie": f"sessionId={first.session_id}"})
    second = manager.get_session(request, response)
    assert second.session_id != first.session_id
    assert len(response.headers) == 1


def test_get_session_with_unknown_id_creates_new(clock):
    manager = SessionManager(clock=clock)
    response = FakeResponse()
    session = manager.get_session(FakeRequest({"Cookie": "sessionId=unknown"}), response)
    assert session.session_id != "unknown"
    assert len(response.headers) == 1


def test_destroy_session(clock):
    manager = SessionManager(clock=clock)
    session = manager.get_session(FakeRequest(), FakeResponse())
    manager.destroy_session(session.session_id)
    assert manager.storage.load(session.session_id) is None


def test_clean_expired_sessions(clock):
    storage = MemorySessionStorage()
    manager = SessionManager(storage, clock=clock)
    storage.save(Session("old", max_age=5, clock=clock))
    storage.save(Session("new", max_age=50, clock=clock))
    clock.now += 10
    assert manager.clean_expired_sessions() == 1
    assert list(storage) == ["new"]