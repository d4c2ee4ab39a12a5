"""Connection pooling, idle timers, flood checks, routing, sessions and signal handling for an HTTP server."""

__version__ = "0.1.0"

__all__ = [
    "connection",
    "policy",
    "pool",
    "router",
    "session",
    "signals",
    "timers",
]