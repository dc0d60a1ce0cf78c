"""Prometheus gauges for the latest telemetry reading and their HTTP server."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Set

from prometheus_client import CollectorRegistry, Gauge, generate_latest, start_http_server

from .models import MachineMode, MetricsSnapshot, TelemetryReading

logger = logging.getLogger(__name__)

PREFIX = "marax"

GAUGES = {
    "machine_mode": "Machine mode (1 = coffee, 0 = steam)",
    "steam_temperature": "Steam boiler temperature",
    "target_steam_temperature": "Target steam temperature",
    "heat_exchanger_temperature": "Heat exchanger temperature",
    "boost_countdown": "Boost countdown reported by the machine",
    "heating_element_on": "Heating element on (1) or off (0)",
    "pump_on": "Pump on (1) or off (0)",
}


class MetricsRegistry:
    """Live gauges holding the last value written for each quantity.

    Every field is written independently; a reader may see values that come
    from two consecutive lines.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry or CollectorRegistry()
        self._gauges = {
            field: Gauge(f"{PREFIX}_{field}", doc, registry=self.registry)
            for field, doc in GAUGES.items()
        }
        self._written: Set[str] = set()

    def _set(self, field: str, value: float) -> None:
        self._gauges[field].set(value)
        self._written.add(field)

    def _get(self, field: str) -> Optional[float]:
        if field not in self._written:
            return None
        return self.registry.get_sample_value(f"{PREFIX}_{field}")

    # ---- Writers ----
    def set_machine_mode(self, mode: MachineMode) -> None:
        self._set("machine_mode", int(mode))

    def set_steam_temperature(self, value: int) -> None:
        self._set("steam_temperature", value)

    def set_target_steam_temperature(self, value: int) -> None:
        self._set("target_steam_temperature", value)

    def set_heat_exchanger_temperature(self, value: int) -> None:
        self._set("heat_exchanger_temperature", value)

    def set_boost_countdown(self, value: int) -> None:
        self._set("boost_countdown", value)

    def set_heating_element_on(self, value: bool) -> None:
        self._set("heating_element_on", 1 if value else 0)

    def set_pump_on(self, value: bool) -> None:
        self._set("pump_on", 1 if value else 0)

    def update(self, reading: TelemetryReading) -> None:
        """Write every field of *reading*."""
        self.set_machine_mode(reading.mode)
        self.set_steam_temperature(reading.steam_temperature)
        self.set_target_steam_temperature(reading.target_steam_temperature)
        self.set_heat_exchanger_temperature(reading.heat_exchanger_temperature)
        self.set_boost_countdown(reading.boost_countdown)
        self.set_heating_element_on(reading.heating_element_on)
        self.set_pump_on(reading.pump_on)

    # ---- Readers ----
    def _get_int(self, field: str) -> Optional[int]:
        value = self._get(field)
        return None if value is None else int(value)

    def _get_bool(self, field: str) -> Optional[bool]:
        value = self._get(field)
        return None if value is None else value == 1

    def snapshot(self) -> MetricsSnapshot:
        mode = self._get_int("machine_mode")
        return MetricsSnapshot(
            machine_mode=None if mode is None else MachineMode(mode),
            steam_temperature=self._get_int("steam_temperature"),
            target_steam_temperature=self._get_int("target_steam_temperature"),
            heat_exchanger_temperature=self._get_int("heat_exchanger_temperature"),
            boost_countdown=self._get_int("boost_countdown"),
            heating_element_on=self._get_bool("heating_element_on"),
            pump_on=self._get_bool("pump_on"),
        )

    def exposition(self) -> bytes:
        """Render the registry in the Prometheus text format."""
        return generate_latest(self.registry)


class MetricsServer:
    """Serves a :class:`MetricsRegistry` over HTTP in a background thread."""

    def __init__(self, registry: MetricsRegistry, host: str = "0.0.0.0", port: int = 8081) -> None:
        self.registry = registry
        self.host = host
        self._port = port
        self._server = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def port(self) -> int:
        if self._server is not None:
            return self._server.server_port
        return self._port

    @property
    def running(self) -> bool:
        return self._server is not None

    def start(self) -> None:
        with self._lock:
            if self._server is not None:
                return
            self._server, self._thread = start_http_server(
                self._port, addr=self.host, registry=self.registry.registry
            )
        logger.info("metrics server listening on %s:%s", self.host, self.port)

    def stop(self) -> None:
        with self._lock:
            server, self._server = self._server, None
            thread, self._thread = self._thread, None
        if server is None:
            return
        server.shutdown()
        server.server_close()
        if thread is not None:
            thread.join()
        logger.info("metrics server stopped")
