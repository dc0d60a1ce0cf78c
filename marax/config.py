"""Configuration handling for marax."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except Exception:
        return default


def _get_env_address(name: str, default: int) -> int:
    """Like :func:`_get_env_int` but also takes hex, e.g. ``0x3C``."""
    try:
        return int(os.getenv(name, str(default)), 0)
    except Exception:
        return default


def _get_env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except Exception:
        return default


def _get_env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Config:
    """Runtime configuration for the monitor."""

    port: str = "COM3" if os.name == "nt" else "/dev/ttyUSB0"
    baudrate: int = 9600
    timeout: float = 1.0
    i2c_bus: int = 1
    i2c_address: int = 0x3C
    metrics_host: str = "0.0.0.0"
    metrics_port: int = 8081
    tick_period: float = 1.0
    countdown_ticks: int = 99
    simulate: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        defaults = cls()
        return cls(
            port=os.getenv("MARAX_PORT", defaults.port),
            baudrate=_get_env_int("MARAX_BAUD", defaults.baudrate),
            timeout=_get_env_float("MARAX_TIMEOUT", defaults.timeout),
            i2c_bus=_get_env_int("MARAX_I2C_BUS", defaults.i2c_bus),
            i2c_address=_get_env_address("MARAX_I2C_ADDRESS", defaults.i2c_address),
            metrics_host=os.getenv("MARAX_METRICS_HOST", defaults.metrics_host),
            metrics_port=_get_env_int("MARAX_METRICS_PORT", defaults.metrics_port),
            tick_period=_get_env_float("MARAX_TICK_PERIOD", defaults.tick_period),
            countdown_ticks=_get_env_int("MARAX_COUNTDOWN_TICKS", defaults.countdown_ticks),
            simulate=_get_env_bool("MARAX_SIM") or _get_env_bool("MARAX_FAKE"),
        )
