"""Socket tuning read from configuration, and flood detection."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional

MIN_WAIT_TIME = 5


def _get_int(mapping: Mapping[str, Any], key: str, default: int) -> int:
    """Read an integer setting, falling back to *default* when absent."""
    if key not in mapping:
        return default
    value = mapping[key]
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"setting {key!r} is not an integer: {value!r}") from None


@dataclass
class SocketSettings:
    """Limits and switches that govern the listening socket and connections."""

    worker_connections: int = 1
    listen_port_count: int = 1
    listen_port: int = 10000
    recycle_wait_time: int = 600
    kick_timer_enabled: bool = False
    wait_time: int = MIN_WAIT_TIME
    timeout_kick: bool = False
    flood_check_enabled: bool = False
    flood_time_interval: int = 100
    flood_kick_count: int = 5
    send_threads: int = 5

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SocketSettings":
        """Build settings from configuration keys, keeping defaults for missing ones."""
        base = cls()
        wait_time = _get_int(mapping, "Sock_MaxWaitTime", base.wait_time)
        return cls(
            worker_connections=_get_int(
                mapping, "worker_connections", base.worker_connections
            ),
            listen_port_count=_get_int(
                mapping, "ListenPortCount", base.listen_port_count
            ),
            listen_port=_get_int(mapping, "ListenPort", base.listen_port),
            recycle_wait_time=_get_int(
                mapping, "Sock_RecyConnectionWaitTime", base.recycle_wait_time
            ),
            kick_timer_enabled=_get_int(mapping, "Sock_WaitTimeEnable", 0) == 1,
            wait_time=max(wait_time, MIN_WAIT_TIME),
            timeout_kick=_get_int(mapping, "Sock_TimeOutKick", 0) != 0,
            flood_check_enabled=_get_int(mapping, "Sock_FloodAttackKickEnable", 0)
            == 1,
            flood_time_interval=_get_int(
                mapping, "Sock_FloodTimeInterval", base.flood_time_interval
            ),
            flood_kick_count=_get_int(
                mapping, "Sock_FloodKickCounter", base.flood_kick_count
            ),
            send_threads=_get_int(
                mapping, "ProcMsgSendWorkThreadCount", base.send_threads
            ),
        )


class FloodDetector:
    """Counts packets that arrive too close together on one connection.

    A connection carries ``flood_kick_last_time`` (milliseconds) and
    ``flood_attack_count``; both are updated on each check.
    """

    def __init__(self, interval_ms: int = 100, kick_count: int = 5) -> None:
        self.interval_ms = interval_ms
        self.kick_count = kick_count

    @classmethod
    def from_settings(cls, settings: SocketSettings) -> "FloodDetector":
        return cls(settings.flood_time_interval, settings.flood_kick_count)

    def check(self, conn, now_ms: Optional[int] = None) -> bool:
        """Record a packet at *now_ms*; True when the connection should be kicked."""
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        if now_ms - conn.flood_kick_last_time < self.interval_ms:
            conn.flood_attack_count += 1
        else:
            conn.flood_attack_count = 0
        conn.flood_kick_last_time = now_ms
        return conn.flood_attack_count >= self.kick_count