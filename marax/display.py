"""Pixel display showing the shot timer digits."""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Callable, Deque, Dict, List, Optional, Sequence, Tuple, Union

from smbus2 import SMBus

from .errors import DisplayError

logger = logging.getLogger(__name__)

WIDTH = 128
HEIGHT = 64
PAGES = HEIGHT // 8

DIGIT_WIDTH = 22
DIGIT_HEIGHT = 40


class DigitPosition(Enum):
    """Top left pixel of each digit cell."""

    TENS = (30, 22)
    UNITS = (67, 22)


# Segment rectangles (x, y, w, h) inside a 22x40 digit cell.
SEGMENTS: Dict[str, Tuple[int, int, int, int]] = {
    "a": (3, 0, 16, 4),
    "b": (18, 2, 4, 17),
    "c": (18, 21, 4, 17),
    "d": (3, 36, 16, 4),
    "e": (0, 21, 4, 17),
    "f": (0, 2, 4, 17),
    "g": (3, 18, 16, 4),
}

DIGIT_SEGMENTS = {
    0: "abcdef",
    1: "bc",
    2: "abdeg",
    3: "abcdg",
    4: "bcfg",
    5: "acdfg",
    6: "acdefg",
    7: "abc",
    8: "abcdefg",
    9: "abcdfg",
}


def _check_digit(value: int) -> int:
    if value not in DIGIT_SEGMENTS:
        raise ValueError(f"not a single digit: {value!r}")
    return value


class Display:
    """Abstract base class for display implementations.

    Drawing goes to a frame buffer; :meth:`flush` puts it on the device.
    """

    def clear(self) -> None:
        raise NotImplementedError

    def draw_digit(self, value: int, position: DigitPosition) -> None:
        raise NotImplementedError

    def flush(self) -> None:
        raise NotImplementedError

    def close(self) -> None:  # pragma: no cover - default
        """Release display resources."""


class SSD1306Display(Display):
    """128x64 SSD1306 OLED on an I2C bus, driven through smbus2."""

    COMMAND = 0x00
    DATA = 0x40
    CHUNK = 16

    INIT_SEQUENCE: Sequence[int] = (
        0xAE,  # display off
        0xD5, 0x80,  # clock divide
        0xA8, HEIGHT - 1,  # multiplex
        0xD3, 0x00,  # display offset
        0x40,  # start line 0
        0x8D, 0x14,  # charge pump on
        0x20, 0x00,  # horizontal addressing
        0xA1,  # segment remap
        0xC8,  # COM scan descending
        0xDA, 0x12,  # COM pins
        0x81, 0xCF,  # contrast
        0xD9, 0xF1,  # pre-charge
        0xDB, 0x40,  # VCOMH deselect
        0xA4,  # follow RAM
        0xA6,  # normal, not inverted
        0xAF,  # display on
    )

    def __init__(self, bus: Union[int, SMBus] = 1, address: int = 0x3C) -> None:
        self.address = address
        self._owns_bus = isinstance(bus, int)
        if isinstance(bus, int):
            try:
                bus = SMBus(bus)
            except OSError as exc:
                raise DisplayError(f"cannot open I2C bus {bus}: {exc}") from exc
        self._bus = bus
        self.buffer = bytearray(WIDTH * PAGES)
        self._command(*self.INIT_SEQUENCE)
        self.flush()
        logger.info("SSD1306 ready at 0x%02X", address)

    def _write(self, control: int, data: Sequence[int]) -> None:
        try:
            self._bus.write_i2c_block_data(self.address, control, list(data))
        except OSError as exc:
            raise DisplayError(f"I2C write to 0x{self.address:02X} failed: {exc}") from exc

    def _command(self, *cmds: int) -> None:
        for i in range(0, len(cmds), self.CHUNK):
            self._write(self.COMMAND, cmds[i : i + self.CHUNK])

    def set_pixel(self, x: int, y: int) -> None:
        if 0 <= x < WIDTH and 0 <= y < HEIGHT:
            self.buffer[x + (y // 8) * WIDTH] |= 1 << (y % 8)

    def get_pixel(self, x: int, y: int) -> bool:
        return bool(self.buffer[x + (y // 8) * WIDTH] & (1 << (y % 8)))

    def fill_rect(self, x: int, y: int, w: int, h: int) -> None:
        for yy in range(y, y + h):
            for xx in range(x, x + w):
                self.set_pixel(xx, yy)

    def clear(self) -> None:
        self.buffer[:] = bytes(len(self.buffer))

    def draw_digit(self, value: int, position: DigitPosition) -> None:
        ox, oy = position.value
        for seg in DIGIT_SEGMENTS[_check_digit(value)]:
            x, y, w, h = SEGMENTS[seg]
            self.fill_rect(ox + x, oy + y, w, h)

    def flush(self) -> None:
        self._command(0x21, 0, WIDTH - 1, 0x22, 0, PAGES - 1)
        for i in range(0, len(self.buffer), self.CHUNK):
            self._write(self.DATA, self.buffer[i : i + self.CHUNK])

    def close(self) -> None:
        if self._owns_bus:
            self._bus.close()


class FakeDisplay(Display):
    """In-memory display recording every flushed frame."""

    def __init__(
        self,
        on_flush: Optional[Callable[["FakeDisplay"], None]] = None,
        max_frames: Optional[int] = None,
    ) -> None:
        self.on_flush = on_flush
        self.pending: Dict[DigitPosition, int] = {}
        self.frames: Deque[Dict[DigitPosition, int]] = deque(maxlen=max_frames)
        self.clears = 0
        self.flushes = 0
        self.closed = False

    @property
    def showing(self) -> Dict[DigitPosition, int]:
        """What is currently on the (virtual) panel."""
        return self.frames[-1] if self.frames else {}

    @property
    def digit_frames(self) -> List[Dict[DigitPosition, int]]:
        return [f for f in self.frames if f]

    def clear(self) -> None:
        self.clears += 1
        self.pending = {}

    def draw_digit(self, value: int, position: DigitPosition) -> None:
        self.pending[position] = _check_digit(value)

    def flush(self) -> None:
        self.flushes += 1
        self.frames.append(dict(self.pending))
        if self.on_flush is not None:
            self.on_flush(self)

    def close(self) -> None:
        self.closed = True
