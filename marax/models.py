"""Data models for the marax API."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class MachineMode(IntEnum):
    """Operating mode reported by the machine.

    The value is what gets exported on the machine mode gauge.
    """

    STEAM = 0
    COFFEE = 1


@dataclass(frozen=True)
class TelemetryReading:
    """One decoded telemetry line."""

    mode: MachineMode
    steam_temperature: int
    target_steam_temperature: int
    heat_exchanger_temperature: int
    boost_countdown: int
    heating_element_on: bool
    pump_on: bool


@dataclass(frozen=True)
class MetricsSnapshot:
    """Last written gauge values; ``None`` until the first write."""

    machine_mode: Optional[MachineMode] = None
    steam_temperature: Optional[int] = None
    target_steam_temperature: Optional[int] = None
    heat_exchanger_temperature: Optional[int] = None
    boost_countdown: Optional[int] = None
    heating_element_on: Optional[bool] = None
    pump_on: Optional[bool] = None
