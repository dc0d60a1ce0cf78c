"""Wires the monitor's components together and runs them."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

from .config import Config
from .countdown import CountdownController
from .display import DigitPosition, Display, FakeDisplay, SSD1306Display
from .errors import TransportError
from .ingest import IngestLoop
from .metrics import MetricsRegistry, MetricsServer
from .shutdown import ShutdownCoordinator
from .state import PumpState, WakeSignal
from .transport import FakeTransport, SerialTransport, Transport

logger = logging.getLogger(__name__)

SIMULATION_LINE_DELAY = 0.5


class Monitor:
    """Telemetry ingest, shot timer and metrics endpoint for one machine.

    :meth:`run` returns once the countdown controller has terminated, which
    guarantees the display was left blank. The metrics server is not waited
    for.
    """

    def __init__(
        self,
        cfg: Config,
        transport: Transport,
        display: Display,
        registry: Optional[MetricsRegistry] = None,
    ) -> None:
        self.cfg = cfg
        self.transport = transport
        self.display = display
        self.registry = registry or MetricsRegistry()
        self.state = PumpState()
        self.wake = WakeSignal()
        self.server = MetricsServer(self.registry, cfg.metrics_host, cfg.metrics_port)
        self.ingest = IngestLoop(transport, self.registry, self.state, self.wake)
        self.countdown = CountdownController(
            display,
            self.state,
            self.wake,
            tick_period=cfg.tick_period,
            ticks=cfg.countdown_ticks,
        )
        self.coordinator = ShutdownCoordinator(self.state, self.wake, self.server)
        self.failures: List[str] = []

    def _run_ingest(self) -> None:
        try:
            self.ingest.run()
        except TransportError as exc:
            logger.error("transport failed: %s", exc)
            self.failures.append("ingest")
            self.coordinator.interrupt("transport failure")
            return
        except Exception:
            logger.exception("ingest crashed")
            self.failures.append("ingest")
            self.coordinator.interrupt("transport failure")
            return
        self.coordinator.interrupt("transport closed")

    def _run_countdown(self) -> None:
        try:
            self.countdown.run()
        except Exception:
            logger.exception("display failed")
            self.failures.append("countdown")
            self.coordinator.interrupt("display failure")

    def run(self) -> int:
        """Run until shutdown; returns the process exit code."""
        if threading.current_thread() is threading.main_thread():
            self.coordinator.install_signal_handler()
        try:
            self.server.start()
        except OSError:
            self.transport.close()
            self.display.close()
            raise

        coordinator = threading.Thread(target=self.coordinator.run, name="shutdown", daemon=True)
        countdown = threading.Thread(target=self._run_countdown, name="countdown")
        # the ingest thread may sit in a blocking read, it is never joined
        ingest = threading.Thread(target=self._run_ingest, name="ingest", daemon=True)
        coordinator.start()
        countdown.start()
        ingest.start()

        countdown.join()
        self.transport.close()
        self.display.close()
        if self.failures:
            logger.error("monitor stopped after failure in %s", ", ".join(self.failures))
            return 1
        logger.info("monitor stopped (%s)", self.coordinator.reason)
        return 0


def _log_frame(display: FakeDisplay) -> None:
    digits = "".join(str(display.showing[p]) for p in DigitPosition if p in display.showing)
    logger.debug("display: %s", digits or "(blank)")


def open_monitor(cfg: Config) -> Monitor:
    """Open the serial port and display described by *cfg*.

    With ``cfg.simulate`` set, recorded telemetry is replayed and the display
    only exists in memory. Initialisation errors are raised.
    """
    if cfg.simulate:
        logger.info("simulation mode, no hardware is touched")
        return Monitor(
            cfg,
            FakeTransport(delay=SIMULATION_LINE_DELAY, loop=True),
            FakeDisplay(on_flush=_log_frame, max_frames=100),
        )
    transport = SerialTransport(cfg)
    try:
        display = SSD1306Display(cfg.i2c_bus, cfg.i2c_address)
    except Exception:
        transport.close()
        raise
    return Monitor(cfg, transport, display)
