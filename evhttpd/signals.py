"""Signal handling for the master and worker processes."""

from __future__ import annotations

import enum
import logging
import os
import signal
from typing import Optional

logger = logging.getLogger(__name__)


class ProcessRole(enum.Enum):
    MASTER = "master"
    WORKER = "worker"


def _signal_table() -> list[tuple[signal.Signals, bool]]:
    """Signals the server cares about; False marks ones to ignore."""
    names = [
        ("SIGHUP", True),
        ("SIGINT", True),
        ("SIGTERM", True),
        ("SIGCHLD", True),
        ("SIGQUIT", True),
        ("SIGIO", True),
        ("SIGSYS", False),
    ]
    return [
        (getattr(signal, name), handled)
        for name, handled in names
        if hasattr(signal, name)
    ]


class SignalState:
    """Flags set by signals, plus the handler that sets them."""

    def __init__(self, role: ProcessRole = ProcessRole.MASTER) -> None:
        self.role = role
        self.stop_requested = False
        self.reap = False

    def handle_signal(self, signo: int, frame=None) -> str:
        """React to *signo*; return the action taken ('' when none)."""
        action = ""
        if self.role is ProcessRole.MASTER:
            if signo == signal.SIGTERM:
                self.stop_requested = True
                action = "shutting down"
            elif signo == getattr(signal, "SIGQUIT", None):
                self.stop_requested = True
                action = "gracefully shutting down"
            elif signo == getattr(signal, "SIGCHLD", None):
                self.reap = True
        elif self.role is ProcessRole.WORKER:
            if signo in (signal.SIGTERM, getattr(signal, "SIGQUIT", None)):
                self.stop_requested = True
                action = "exiting"

        try:
            name = signal.Signals(signo).name
        except ValueError:
            name = str(signo)
        logger.info(
            "process %d signal %d (%s) received %s stopevent %d",
            os.getpid(), signo, name, action, int(self.stop_requested),
        )

        if signo == getattr(signal, "SIGCHLD", None):
            self.collect_child_status()
        return action

    def install(self) -> None:
        """Install the handler for each signal in the table; ignore SIGSYS."""
        for signo, handled in _signal_table():
            try:
                signal.signal(signo, self.handle_signal if handled else signal.SIG_IGN)
            except (OSError, ValueError):
                logger.critical("sigaction(%s) failed", signo.name)
                raise

    def collect_child_status(self) -> list[tuple[int, int]]:
        """Reap finished children without blocking; return (pid, status) pairs."""
        reaped: list[tuple[int, int]] = []
        while True:
            try:
                pid, status = os.waitpid(-1, os.WNOHANG)
            except InterruptedError:
                continue
            except ChildProcessError as exc:
                if not reaped:
                    logger.warning("waitpid() failed: %s", exc)
                return reaped
            except OSError as exc:
                logger.warning("waitpid() failed: %s", exc)
                return reaped
            if pid == 0:
                return reaped
            reaped.append((pid, status))
            if os.WIFSIGNALED(status):
                logger.warning("pid = %d exited on signal %d!", pid, os.WTERMSIG(status))
            else:
                logger.info("pid = %d exited with code %d!", pid, os.WEXITSTATUS(status))