"""Turns an operator interrupt into a cooperative shutdown."""

from __future__ import annotations

import logging
import signal
import threading
from typing import Optional

from .metrics import MetricsServer
from .state import PumpState, WakeSignal

logger = logging.getLogger(__name__)


class ShutdownCoordinator:
    """Fires the shutdown sequence exactly once.

    :meth:`interrupt` only records the request and is safe to call from a
    signal handler; :meth:`run` (normally in its own thread) then sets the
    shutdown flag, wakes the countdown controller and stops the metrics
    server.
    """

    def __init__(
        self,
        state: PumpState,
        wake: WakeSignal,
        metrics_server: Optional[MetricsServer] = None,
    ) -> None:
        self.state = state
        self.wake = wake
        self.metrics_server = metrics_server
        self.reason: Optional[str] = None
        self.fired = threading.Event()
        self._requested = threading.Event()

    @property
    def requested(self) -> bool:
        return self._requested.is_set()

    def interrupt(self, reason: str = "interrupt") -> None:
        if self._requested.is_set():
            return
        self.reason = reason
        self._requested.set()

    def install_signal_handler(self) -> None:
        """Route SIGINT to :meth:`interrupt`. Main thread only."""
        signal.signal(signal.SIGINT, self._on_signal)

    def _on_signal(self, signum, frame) -> None:
        self.interrupt("interrupt")

    def run(self) -> None:
        self._requested.wait()
        logger.info("shutting down (%s)", self.reason)
        self.state.request_shutdown()
        self.wake.notify()
        if self.metrics_server is not None:
            self.metrics_server.stop()
        self.fired.set()
