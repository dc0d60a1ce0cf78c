"""Reads telemetry lines, updates the gauges and spots pump starts."""

from __future__ import annotations

import logging

from .errors import DecodeError
from .metrics import MetricsRegistry
from .protocol import decode
from .state import PumpState, WakeSignal
from .transport import Transport

logger = logging.getLogger(__name__)


class IngestLoop:
    """Single reader of the telemetry stream.

    Runs until the transport reports it is closed. Transport errors are not
    caught here; they end the loop and are the caller's problem.
    """

    def __init__(
        self,
        transport: Transport,
        registry: MetricsRegistry,
        state: PumpState,
        wake: WakeSignal,
    ) -> None:
        self.transport = transport
        self.registry = registry
        self.state = state
        self.wake = wake
        self.previous_pump_on = False
        self.lines_read = 0
        self.decode_errors = 0
        self.sessions_signalled = 0

    def process_line(self, line: str) -> bool:
        """Handle one line; returns True if it was a pump start."""
        self.lines_read += 1
        try:
            reading = decode(line)
        except DecodeError as exc:
            self.decode_errors += 1
            logger.warning("dropping bad frame: %s", exc)
            return False

        self.registry.update(reading)
        edge = reading.pump_on and not self.previous_pump_on
        self.state.running = reading.pump_on
        if edge:
            self.sessions_signalled += 1
            logger.info("pump started")
            self.wake.notify()
        elif self.previous_pump_on and not reading.pump_on:
            logger.info("pump stopped")
        self.previous_pump_on = reading.pump_on
        return edge

    def run(self) -> None:
        logger.info("ingest started")
        while True:
            line = self.transport.readline()
            if line is None:
                break
            self.process_line(line)
        logger.info(
            "ingest finished after %s lines (%s bad)", self.lines_read, self.decode_errors
        )
