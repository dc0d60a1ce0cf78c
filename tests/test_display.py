from __future__ import annotations

import pytest

from marax.display import (
    HEIGHT,
    PAGES,
    WIDTH,
    DigitPosition,
    FakeDisplay,
    SSD1306Display,
)
from marax.errors import DisplayError


class FakeBus:
    def __init__(self) -> None:
        self.writes: list[tuple[int, int, list[int]]] = []
        self.fail = False
        self.closed = False

    def write_i2c_block_data(self, addr: int, control: int, data: list[int]) -> None:
        if self.fail:
            raise OSError(121, "Remote I/O error")
        self.writes.append((addr, control, list(data)))

    def close(self) -> None:
        self.closed = True


def _display() -> tuple[SSD1306Display, FakeBus]:
    bus = FakeBus()
    disp = SSD1306Display(bus, address=0x3C)  # type: ignore[arg-type]
    bus.writes.clear()
    return disp, bus


def test_init_switches_display_on_and_blanks_it() -> None:
    bus = FakeBus()
    SSD1306Display(bus, address=0x3D)  # type: ignore[arg-type]
    commands = [b for addr, ctl, data in bus.writes if ctl == 0x00 for b in data]
    assert commands[0] == 0xAE
    assert 0xAF in commands
    data = [b for addr, ctl, chunk in bus.writes if ctl == 0x40 for b in chunk]
    assert len(data) == WIDTH * PAGES
    assert not any(data)
    assert {addr for addr, _, _ in bus.writes} == {0x3D}


def test_writes_fit_smbus_block_limit() -> None:
    disp, bus = _display()
    disp.draw_digit(8, DigitPosition.UNITS)
    disp.flush()
    assert all(len(data) <= 32 for _, _, data in bus.writes)


def test_flush_sends_whole_frame() -> None:
    disp, bus = _display()
    disp.draw_digit(8, DigitPosition.TENS)
    disp.flush()
    data = bytes(b for _, ctl, chunk in bus.writes if ctl == 0x40 for b in chunk)
    assert data == bytes(disp.buffer)
    assert any(data)


def test_digit_one_lights_right_segments_only() -> None:
    disp, _ = _display()
    ox, oy = DigitPosition.UNITS.value
    disp.draw_digit(1, DigitPosition.UNITS)
    assert disp.get_pixel(ox + 19, oy + 5)  # b
    assert disp.get_pixel(ox + 19, oy + 30)  # c
    assert not disp.get_pixel(ox + 10, oy + 1)  # a
    assert not disp.get_pixel(ox + 1, oy + 5)  # f


def test_digit_eight_lights_every_segment() -> None:
    disp, _ = _display()
    ox, oy = DigitPosition.TENS.value
    disp.draw_digit(8, DigitPosition.TENS)
    for x, y in [(10, 1), (19, 5), (19, 30), (10, 37), (1, 30), (1, 5), (10, 19)]:
        assert disp.get_pixel(ox + x, oy + y)


def test_digits_stay_on_panel() -> None:
    for pos in DigitPosition:
        x, y = pos.value
        assert x + 22 <= WIDTH
        assert y + 40 <= HEIGHT


def test_clear_blanks_buffer() -> None:
    disp, _ = _display()
    disp.draw_digit(8, DigitPosition.UNITS)
    disp.clear()
    assert not any(disp.buffer)


def test_bus_error_is_display_error() -> None:
    disp, bus = _display()
    bus.fail = True
    with pytest.raises(DisplayError):
        disp.flush()


def test_borrowed_bus_is_not_closed() -> None:
    disp, bus = _display()
    disp.close()
    assert not bus.closed


def test_invalid_digit() -> None:
    disp, _ = _display()
    with pytest.raises(ValueError):
        disp.draw_digit(10, DigitPosition.UNITS)
    with pytest.raises(ValueError):
        FakeDisplay().draw_digit(-1, DigitPosition.UNITS)


def test_fake_display_records_frames() -> None:
    flushed = []
    disp = FakeDisplay(on_flush=lambda d: flushed.append(d.showing))
    disp.draw_digit(4, DigitPosition.TENS)
    disp.draw_digit(2, DigitPosition.UNITS)
    disp.flush()
    disp.clear()
    disp.flush()
    assert flushed == [{DigitPosition.TENS: 4, DigitPosition.UNITS: 2}, {}]
    assert disp.digit_frames == [{DigitPosition.TENS: 4, DigitPosition.UNITS: 2}]
    assert disp.clears == 1
    assert disp.flushes == 2
