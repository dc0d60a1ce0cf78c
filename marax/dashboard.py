"""Live dashboard reading the monitor's metrics endpoint."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from dash import Dash, Input, Output, dcc, html
from prometheus_client.parser import text_string_to_metric_families

from .metrics import PREFIX
from .models import MachineMode, MetricsSnapshot

logger = logging.getLogger(__name__)


@dataclass
class _Ctx:
    metrics_url: str


CTX = _Ctx(metrics_url=os.getenv("MARAX_METRICS_URL", "http://127.0.0.1:8081/metrics"))


def parse_snapshot(text: str) -> MetricsSnapshot:
    """Build a snapshot from a Prometheus text exposition."""
    values: Dict[str, float] = {}
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            if sample.name.startswith(PREFIX + "_"):
                values[sample.name[len(PREFIX) + 1 :]] = sample.value

    def as_int(field: str) -> Optional[int]:
        v = values.get(field)
        return None if v is None else int(v)

    def as_bool(field: str) -> Optional[bool]:
        v = values.get(field)
        return None if v is None else v == 1

    mode = as_int("machine_mode")
    return MetricsSnapshot(
        machine_mode=None if mode is None else MachineMode(mode),
        steam_temperature=as_int("steam_temperature"),
        target_steam_temperature=as_int("target_steam_temperature"),
        heat_exchanger_temperature=as_int("heat_exchanger_temperature"),
        boost_countdown=as_int("boost_countdown"),
        heating_element_on=as_bool("heating_element_on"),
        pump_on=as_bool("pump_on"),
    )


def fetch_snapshot(url: str, timeout: float = 2.0) -> MetricsSnapshot:
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    return parse_snapshot(resp.text)


def format_snapshot(snap: MetricsSnapshot) -> Dict[str, str]:
    """Display strings for each card."""

    def fmt(v: Any, unit: str = "") -> str:
        return f"{v}{unit}" if v is not None else "—"

    def onoff(v: Optional[bool]) -> str:
        if v is None:
            return "—"
        return "an" if v else "aus"

    mode_map = {MachineMode.COFFEE: "Kaffee", MachineMode.STEAM: "Dampf"}
    return {
        "mode": mode_map.get(snap.machine_mode, "—"),
        "steam": fmt(snap.steam_temperature, " °C"),
        "target": fmt(snap.target_steam_temperature, " °C"),
        "hx": fmt(snap.heat_exchanger_temperature, " °C"),
        "boost": fmt(snap.boost_countdown),
        "heating": onoff(snap.heating_element_on),
        "pump": onoff(snap.pump_on),
    }


def _card(value_id: str, label: str) -> html.Div:
    return html.Div(
        className="mini-card",
        children=[
            html.Div(id=value_id, className="value"),
            html.Div(label, className="label"),
        ],
    )


app = Dash(__name__)
app.layout = html.Div(
    className="container",
    children=[
        html.H2("Mara X Monitor"),
        html.Div(["Status: ", html.Span(id="status", className="badge")]),
        html.Div(
            className="live-grid",
            children=[
                _card("mode", "Modus"),
                _card("steam", "Dampfkessel"),
                _card("target", "Dampf-Soll"),
                _card("hx", "Wärmetauscher"),
                _card("boost", "Boost"),
                _card("heating", "Heizung"),
                _card("pump", "Pumpe"),
            ],
        ),
        html.Div(CTX.metrics_url, className="hint"),
        dcc.Interval(id="tick", interval=1000, n_intervals=0),
    ],
)


@app.callback(
    Output("mode", "children"),
    Output("steam", "children"),
    Output("target", "children"),
    Output("hx", "children"),
    Output("boost", "children"),
    Output("heating", "children"),
    Output("pump", "children"),
    Output("status", "children"),
    Input("tick", "n_intervals"),
)
def update_view(_):
    try:
        snap = fetch_snapshot(CTX.metrics_url)
        status = "verbunden"
    except (requests.RequestException, ValueError) as exc:
        logger.info("metrics fetch failed: %s", exc)
        snap = MetricsSnapshot()
        status = f"Fehler: {exc}"
    vals = format_snapshot(snap)
    return (
        vals["mode"],
        vals["steam"],
        vals["target"],
        vals["hx"],
        vals["boost"],
        vals["heating"],
        vals["pump"],
        status,
    )


def serve(host: str = "127.0.0.1", port: int = 8050) -> None:
    app.run(debug=False, use_reloader=False, host=host, port=port)


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG if os.getenv("MARAX_DEBUG") else logging.INFO)
    serve(host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT_HTTP", "8050")))
