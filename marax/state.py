"""Shared state between the monitor's worker threads."""

from __future__ import annotations

import queue
import threading
from typing import Optional


class PumpState:
    """Last known pump status plus the process wide shutdown flag.

    Both flags are backed by :class:`threading.Event` so reads and writes are
    atomic. ``shutting_down`` only ever goes from false to true.
    """

    def __init__(self) -> None:
        self._running = threading.Event()
        self._shutting_down = threading.Event()

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @running.setter
    def running(self, value: bool) -> None:
        if value:
            self._running.set()
        else:
            self._running.clear()

    @property
    def shutting_down(self) -> bool:
        return self._shutting_down.is_set()

    def request_shutdown(self) -> None:
        self._shutting_down.set()

    def wait_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block up to *timeout* seconds; True once shutdown was requested."""
        return self._shutting_down.wait(timeout)


class WakeSignal:
    """Single slot notification.

    Any number of :meth:`notify` calls before the next :meth:`wait` collapse
    into a single wake-up.
    """

    def __init__(self) -> None:
        self._slot: "queue.Queue[None]" = queue.Queue(maxsize=1)

    def notify(self) -> None:
        try:
            self._slot.put_nowait(None)
        except queue.Full:
            pass

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Consume a pending notification; False if *timeout* expired first."""
        try:
            self._slot.get(timeout=timeout)
        except queue.Empty:
            return False
        return True

    @property
    def pending(self) -> bool:
        return not self._slot.empty()
