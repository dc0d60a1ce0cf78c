"""Line oriented transports delivering telemetry frames."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, List, Optional

import serial

from .config import Config
from .errors import TransportError

logger = logging.getLogger(__name__)


class Transport:
    """Abstract base class for transport implementations."""

    def readline(self) -> Optional[str]:
        """Return the next line without its terminator, or None once closed."""
        raise NotImplementedError

    def close(self) -> None:  # pragma: no cover - default
        """Close transport resources."""


class SerialTransport(Transport):
    """Serial port transport based on pyserial."""

    def __init__(self, cfg: Config) -> None:
        self.port = cfg.port
        self._closed = threading.Event()
        self._lock = threading.Lock()
        self._buffer = bytearray()
        try:
            self._serial = serial.Serial(
                port=cfg.port,
                baudrate=cfg.baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=cfg.timeout,
            )
        except (serial.SerialException, ValueError) as exc:
            raise TransportError(f"Serial connection failed on {cfg.port}: {exc}") from exc
        logger.info("opened %s @ %s baud", cfg.port, cfg.baudrate)

    def readline(self) -> Optional[str]:
        # serial.readline() hands back partial data when the read timeout
        # expires, so keep collecting until the terminator shows up.
        while not self._closed.is_set():
            try:
                chunk = self._serial.readline()
            except (serial.SerialException, OSError, TypeError) as exc:
                if self._closed.is_set():
                    return None
                raise TransportError(f"read from {self.port} failed: {exc}") from exc
            if not chunk:
                continue
            self._buffer.extend(chunk)
            if self._buffer.endswith(b"\n"):
                raw = bytes(self._buffer)
                self._buffer.clear()
                return raw.decode("ascii", errors="replace").rstrip("\r\n")
        return None

    def close(self) -> None:
        with self._lock:
            if self._closed.is_set():
                return
            self._closed.set()
            self._serial.close()
        logger.info("closed %s", self.port)


# Recorded from a machine heating up, pulling a shot and idling again.
SIMULATION_LINES: List[str] = (
    ["C1.19,116,124,095,0560,1,0"] * 4
    + ["C1.19,118,124,093,0000,1,1"] * 50
    + ["C1.19,121,124,096,0000,0,0"] * 10
    + ["V1.19,140,145,102,0000,1,0"] * 4
)


class FakeTransport(Transport):
    """In-memory transport replaying a fixed list of lines."""

    def __init__(
        self,
        lines: Optional[Iterable[str]] = None,
        delay: float = 0.0,
        loop: bool = False,
    ) -> None:
        self._lines = list(SIMULATION_LINES if lines is None else lines)
        self._delay = delay
        self._loop = loop
        self._index = 0
        self._closed = threading.Event()

    def readline(self) -> Optional[str]:
        if self._delay and self._closed.wait(self._delay):
            return None
        if self._closed.is_set():
            return None
        if self._index >= len(self._lines):
            if not self._loop or not self._lines:
                return None
            self._index = 0
        line = self._lines[self._index]
        self._index += 1
        return line

    def close(self) -> None:
        self._closed.set()
