"""Shot timer: counts seconds on the display while the pump runs."""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable

from .display import Display, DigitPosition
from .state import PumpState, WakeSignal

logger = logging.getLogger(__name__)

DEFAULT_TICKS = 99


class ControllerState(Enum):
    IDLE = "idle"
    COUNTING = "counting"
    TERMINATED = "terminated"


class CountdownController:
    """Drives the display through one timer session per pump start.

    The controller is idle until the wake signal fires. It then either counts
    (``0`` .. ``ticks - 1``, one tick per ``tick_period`` seconds) or, when a
    shutdown was requested, terminates. Pump status and the shutdown flag are
    looked at before every tick; whichever way a session ends, the display is
    cleared. Display errors are not handled and end :meth:`run`.
    """

    def __init__(
        self,
        display: Display,
        state: PumpState,
        wake: WakeSignal,
        tick_period: float = 1.0,
        ticks: int = DEFAULT_TICKS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not 1 <= ticks <= 100:
            raise ValueError(f"ticks must be between 1 and 100, got {ticks}")
        self.display = display
        self.state = state
        self.wake = wake
        self.tick_period = tick_period
        self.ticks = ticks
        self.clock = clock
        self.terminated = threading.Event()
        self.sessions_started = 0
        self.sessions_completed = 0
        self.sessions_aborted = 0
        self._state = ControllerState.IDLE

    @property
    def controller_state(self) -> ControllerState:
        return self._state

    def run(self) -> None:
        self._blank()
        while True:
            self._state = ControllerState.IDLE
            if self.state.shutting_down:
                break
            self.wake.wait()
            if self.state.shutting_down:
                break
            self._count()
        self._state = ControllerState.TERMINATED
        self._blank()
        self.terminated.set()
        logger.info(
            "countdown terminated (%s sessions, %s aborted)",
            self.sessions_started,
            self.sessions_aborted,
        )

    def _count(self) -> None:
        self._state = ControllerState.COUNTING
        self.sessions_started += 1
        logger.info("timer session %s started", self.sessions_started)
        deadline = self.clock()
        try:
            for tick in range(self.ticks):
                self._sleep_until(deadline)
                if not self._keep_counting():
                    self.sessions_aborted += 1
                    return
                self._render(tick)
                deadline += self.tick_period
                now = self.clock()
                if deadline < now:
                    deadline = now
            # hold the last value for a full tick
            self._sleep_until(deadline)
            self.sessions_completed += 1
            logger.info("timer session %s completed", self.sessions_started)
        finally:
            self._blank()

    def _keep_counting(self) -> bool:
        if self.state.shutting_down:
            logger.info("timer session %s interrupted by shutdown", self.sessions_started)
            return False
        if not self.state.running:
            logger.info("timer session %s stopped, pump off", self.sessions_started)
            return False
        return True

    def _sleep_until(self, deadline: float) -> None:
        remaining = deadline - self.clock()
        if remaining > 0:
            self.state.wait_shutdown(remaining)

    def _render(self, tick: int) -> None:
        tens, units = divmod(tick, 10)
        logger.debug("tick %s", tick)
        self.display.clear()
        if tens:
            self.display.draw_digit(tens, DigitPosition.TENS)
        self.display.draw_digit(units, DigitPosition.UNITS)
        self.display.flush()

    def _blank(self) -> None:
        self.display.clear()
        self.display.flush()
