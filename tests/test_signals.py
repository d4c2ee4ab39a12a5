import signal

import pytest

from evhttpd.signals import ProcessRole, SignalState


@pytest.fixture
def restore_signals():
    names = ["SIGHUP", "SIGINT", "SIGTERM", "SIGCHLD", "SIGQUIT", "SIGIO", "SIGSYS"]
    saved = {
        getattr(signal, n): signal.getsignal(getattr(signal, n))
        for n in names
        if hasattr(signal, n)
    }
    yield
    for signo, handler in saved.items():
        signal.signal(signo, handler)


def test_master_sigterm_requests_stop():
    state = SignalState(ProcessRole.MASTER)
    assert state.handle_signal(signal.SIGTERM, None) == "shutting down"
    assert state.stop_requested is True


def test_master_sigquit_requests_graceful_stop():
    state = SignalState(ProcessRole.MASTER)
    assert state.handle_signal(signal.SIGQUIT, None) == "gracefully shutting down"
    assert state.stop_requested is True


@pytest.mark.parametrize("signo", [signal.SIGTERM, signal.SIGQUIT])
def test_worker_stop_signals(signo):
    state = SignalState(ProcessRole.WORKER)
    assert state.handle_signal(signo, None) == "exiting"
    assert state.stop_requested is True


def test_sighup_changes_nothing():
    for role in ProcessRole:
        state = SignalState(role)
        assert state.handle_signal(signal.SIGHUP, None) == ""
        assert state.stop_requested is False
        assert state.reap is False


def test_master_sigchld_sets_reap():
    state = SignalState(ProcessRole.MASTER)
    assert state.handle_signal(signal.SIGCHLD, None) == ""
    assert state.reap is True
    assert state.stop_requested is False


def test_worker_sigchld_does_not_set_reap():
    state = SignalState(ProcessRole.WORKER)
    state.handle_signal(signal.SIGCHLD, None)
    assert state.reap is False


def test_collect_child_status_without_children():
    assert SignalState().collect_child_status() == []


def test_install_sets_handlers(restore_signals):
    state = SignalState(ProcessRole.MASTER)
    state.install()
    assert signal.getsignal(signal.SIGTERM) == state.handle_signal
    assert signal.getsignal(signal.SIGHUP) == state.handle_signal
    assert signal.getsignal(signal.SIGSYS) == signal.SIG_IGN


def test_installed_handler_reacts_to_raised_signal(restore_signals):
    state = SignalState(ProcessRole.WORKER)
    state.install()
    signal.raise_signal(signal.SIGTERM)
    assert state.stop_requested is True