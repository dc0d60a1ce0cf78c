"""Decoder for the machine's serial telemetry lines.

A line carries seven comma separated fields, for example::

    C1.19,116,124,095,0560,0,0

The first token is tagged with the machine mode (``C`` coffee, ``V`` steam);
only its first character is looked at. The next four are integers (steam
temperature, target steam temperature, heat exchanger temperature, boost
countdown) and the last two are 0/1 flags (heating element, pump).
"""

from __future__ import annotations

import re
from typing import List

from .errors import (
    FieldCountError,
    InvalidBooleanError,
    NumericError,
    UnknownModeError,
)
from .models import MachineMode, TelemetryReading

FIELD_COUNT = 7

# optional sign, ASCII digits, nothing else
INTEGER = re.compile(r"[+-]?[0-9]+")

MODES = {
    "C": MachineMode.COFFEE,
    "V": MachineMode.STEAM,
}


def _int(line: str, token: str) -> int:
    if not INTEGER.fullmatch(token):
        raise NumericError(line, f"not an integer: {token!r}")
    return int(token)


def _flag(line: str, token: str) -> bool:
    if not INTEGER.fullmatch(token):
        raise InvalidBooleanError(line, f"not a flag: {token!r}")
    value = int(token)
    if value not in (0, 1):
        raise InvalidBooleanError(line, f"flag out of range: {value}")
    return value == 1


def split_fields(line: str) -> List[str]:
    """Strip line terminators and split *line* into its raw tokens."""
    return line.rstrip("\r\n").split(",")


def decode(line: str) -> TelemetryReading:
    """Decode one telemetry line.

    Raises a :class:`~marax.errors.DecodeError` subclass if the line is
    malformed. Values are not range checked.
    """
    tokens = split_fields(line)
    if len(tokens) != FIELD_COUNT:
        raise FieldCountError(line, f"expected {FIELD_COUNT} fields, got {len(tokens)}")

    tag = tokens[0][:1]
    if not tag:
        raise UnknownModeError(line, "empty mode token")
    mode = MODES.get(tag)
    if mode is None:
        raise UnknownModeError(line, f"unknown mode {tag!r}")

    steam, target, heat_exchanger, boost = (_int(line, t) for t in tokens[1:5])

    return TelemetryReading(
        mode=mode,
        steam_temperature=steam,
        target_steam_temperature=target,
        heat_exchanger_temperature=heat_exchanger,
        boost_countdown=boost,
        heating_element_on=_flag(line, tokens[5]),
        pump_on=_flag(line, tokens[6]),
    )
