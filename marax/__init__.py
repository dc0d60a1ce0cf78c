"""Espresso machine telemetry monitor and shot timer."""

from importlib import metadata as _metadata

try:
    __version__ = _metadata.version("marax")
except _metadata.PackageNotFoundError:  # pragma: no cover - package not installed
    __version__ = "0.0.0"

from .config import Config
from .models import MachineMode, MetricsSnapshot, TelemetryReading
from .protocol import decode
__all__ = ["Config", "MachineMode", "MetricsSnapshot", "TelemetryReading", "decode", "__version__"]
