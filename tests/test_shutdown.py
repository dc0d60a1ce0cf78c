from __future__ import annotations

import signal
import threading
import time

from marax.shutdown import ShutdownCoordinator
from marax.state import PumpState, WakeSignal


class FakeServer:
    def __init__(self) -> None:
        self.stops = 0

    def stop(self) -> None:
        self.stops += 1


def _coordinator() -> tuple[ShutdownCoordinator, PumpState, WakeSignal, FakeServer]:
    state, wake, server = PumpState(), WakeSignal(), FakeServer()
    return ShutdownCoordinator(state, wake, server), state, wake, server  # type: ignore[arg-type]


def test_interrupt_runs_shutdown_sequence() -> None:
    coord, state, wake, server = _coordinator()
    coord.interrupt()
    coord.run()
    assert state.shutting_down is True
    assert wake.pending is True
    assert server.stops == 1
    assert coord.fired.is_set()
    assert coord.reason == "interrupt"


def test_nothing_happens_before_interrupt() -> None:
    coord, state, wake, server = _coordinator()
    t = threading.Thread(target=coord.run, daemon=True)
    t.start()
    t.join(timeout=0.05)
    assert t.is_alive()
    assert state.shutting_down is False
    assert wake.pending is False
    coord.interrupt()
    t.join(timeout=2)
    assert not t.is_alive()
    assert server.stops == 1


def test_second_interrupt_is_a_no_op() -> None:
    coord, state, _, server = _coordinator()
    coord.interrupt("transport failure")
    coord.interrupt("interrupt")
    coord.run()
    assert coord.reason == "transport failure"
    assert server.stops == 1


def test_works_without_metrics_server() -> None:
    state, wake = PumpState(), WakeSignal()
    coord = ShutdownCoordinator(state, wake)
    coord.interrupt()
    coord.run()
    assert state.shutting_down is True


def test_sigint_triggers_interrupt() -> None:
    coord, _, _, _ = _coordinator()
    previous = signal.getsignal(signal.SIGINT)
    try:
        coord.install_signal_handler()
        signal.raise_signal(signal.SIGINT)
        deadline = time.monotonic() + 2
        while not coord.requested and time.monotonic() < deadline:
            time.sleep(0.01)
        assert coord.requested
        assert coord.reason == "interrupt"
    finally:
        signal.signal(signal.SIGINT, previous)
