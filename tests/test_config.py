from __future__ import annotations

import pytest

from marax.config import Config

ENV = [
    "MARAX_PORT",
    "MARAX_BAUD",
    "MARAX_I2C_ADDRESS",
    "MARAX_METRICS_PORT",
    "MARAX_TICK_PERIOD",
    "MARAX_SIM",
    "MARAX_FAKE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in ENV:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    cfg = Config.from_env()
    assert cfg.baudrate == 9600
    assert cfg.metrics_port == 8081
    assert cfg.i2c_address == 0x3C
    assert cfg.countdown_ticks == 99
    assert cfg.tick_period == 1.0
    assert cfg.simulate is False


def test_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("MARAX_PORT", "/dev/ttyS0")
    monkeypatch.setenv("MARAX_I2C_ADDRESS", "0x3D")
    monkeypatch.setenv("MARAX_METRICS_PORT", "9100")
    monkeypatch.setenv("MARAX_TICK_PERIOD", "0.5")
    monkeypatch.setenv("MARAX_SIM", "yes")
    cfg = Config.from_env()
    assert cfg.port == "/dev/ttyS0"
    assert cfg.i2c_address == 0x3D
    assert cfg.metrics_port == 9100
    assert cfg.tick_period == 0.5
    assert cfg.simulate is True


def test_malformed_numbers_fall_back(monkeypatch) -> None:
    monkeypatch.setenv("MARAX_BAUD", "fast")
    monkeypatch.setenv("MARAX_TICK_PERIOD", "soon")
    cfg = Config.from_env()
    assert cfg.baudrate == 9600
    assert cfg.tick_period == 1.0


def test_leading_zero_decimal(monkeypatch) -> None:
    monkeypatch.setenv("MARAX_BAUD", "09600")
    monkeypatch.setenv("MARAX_METRICS_PORT", "08081")
    cfg = Config.from_env()
    assert cfg.baudrate == 9600
    assert cfg.metrics_port == 8081


@pytest.mark.parametrize("value, expected", [("0x3D", 0x3D), ("60", 60), ("nope", 0x3C)])
def test_i2c_address_forms(monkeypatch, value: str, expected: int) -> None:
    monkeypatch.setenv("MARAX_I2C_ADDRESS", value)
    assert Config.from_env().i2c_address == expected
