# evhttpd

Building blocks for an event-driven HTTP server: reusable connection slots
with delayed recycling, deadline tracking for idle clients, flood detection,
request routing, cookie-based sessions and master/worker signal handling.
There are no dependencies outside the standard library.

## Modules

- `evhttpd.connection` — `Connection`, one reusable slot bound to a client
  socket at a time. `get_one_to_use(sock)` resets the per-client state and
  binds the socket; `put_one_to_free()` marks the slot as returned;
  `close_socket()` closes and unbinds the socket. Its `current_sequence`
  changes every time the slot is handed out or returned, so work queued for
  an earlier client can be recognised as stale.
- `evhttpd.pool` — `ConnectionPool(worker_connections, recycle_wait_time)`.
  `get_connection(sock)` takes a free slot, growing the pool by
  `worker_connections` slots when none is free. `enqueue_recycle(conn, now)`
  parks a closed client's slot (returning `False` if it is already parked),
  and `reap_recycled(now)` frees the slots whose wait has run out.
  `free_connection`, `close_connection` and `clear` round it off.
- `evhttpd.timers` — `TimerQueue(wait_time, timeout_kick)` keeps a deadline
  per connection, `wait_time` seconds after it was set. `expired(now)` and
  `pop_overdue(now)` take out overdue `TimerEntry` objects; unless
  `timeout_kick` is set, each one is put back with a fresh deadline.
  `TimerEntry.is_stale` tells whether the slot changed hands since it was
  queued. `remove_connection(conn)` drops a connection's entries.
- `evhttpd.policy` — `SocketSettings.from_mapping(mapping)` reads settings
  such as `worker_connections`, `ListenPort`, `Sock_WaitTimeEnable`,
  `Sock_MaxWaitTime` (never below 5), `Sock_TimeOutKick`,
  `Sock_FloodAttackKickEnable`, `Sock_FloodTimeInterval` and
  `Sock_FloodKickCounter`, keeping defaults for missing keys and raising
  `ValueError` for values that are not integers. `FloodDetector.check(conn,
  now_ms)` returns `True` once a connection has sent too many packets too
  close together.
- `evhttpd.router` — `Router` maps a method and path to a handler (an object
  with `handle(request, response)`) or a callback (a callable taking
  `(request, response)`), by exact path or by a regular expression that must
  match the whole path.
- `evhttpd.session` — `Session`, `MemorySessionStorage` and `SessionManager`
  for sessions tracked through a `sessionId` cookie, plus the helpers
  `session_id_from_cookie` and `session_cookie`.
- `evhttpd.signals` — `SignalState` with a `ProcessRole` (`MASTER` or
  `WORKER`). `install()` sets its handler for SIGHUP, SIGINT, SIGTERM,
  SIGCHLD, SIGQUIT and SIGIO and ignores SIGSYS; `handle_signal` sets
  `stop_requested` on SIGTERM or SIGQUIT and, in the master, `reap` on
  SIGCHLD, collecting finished children with `collect_child_status()`.

## Example

```python
import time

from evhttpd.pool import ConnectionPool
from evhttpd.timers import TimerQueue

pool = ConnectionPool(worker_connections=4, recycle_wait_time=60)
timers = TimerQueue(wait_time=20)

conn = pool.get_connection(None)
timers.add(conn)

now = time.time()
for entry in timers.expired(now):
    if not entry.is_stale:
        timers.remove_connection(entry.conn)
        pool.enqueue_recycle(entry.conn, now)

pool.reap_recycled(now + 60)
```

Routing and sessions work with any request object that has `method`, `path`
and a `headers` mapping, and any response object with an
`add_header(name, value)` method:

```python
from evhttpd.router import Router
from evhttpd.session import MemorySessionStorage, SessionManager

router = Router()
router.register_callback("GET", "/hello", lambda req, resp: resp.add_header("X-Hello", "1"))
router.add_regex_handler("GET", r"/users/(?P<user_id>\d+)", users_handler)

sessions = SessionManager(MemorySessionStorage())
session = sessions.get_session(request, response)
session.set_value("visits", "1")
```

`Router.route(request, response)` returns `True` when a route matched and
`False` otherwise, leaving the 404 decision to the caller. A regex handler
receives a copy of the request whose `path_params` hold the match groups
(`param1`, `param2`, … and any named groups).

## What this package does not do

It has no server of its own: there is no listening socket, no event loop,
no code that reads requests from or writes responses to a network socket,
no outgoing-message queue, no worker processes and no command to start
anything. It provides the pieces such a server keeps its state in; the
socket I/O and the process that drives them are left to the program that
uses it.

## Tests

```
pip install .[test]
pytest
```