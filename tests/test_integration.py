from __future__ import annotations

import os

import pytest
import requests

from marax.config import Config
from marax.dashboard import fetch_snapshot
from marax.metrics import MetricsRegistry, MetricsServer
from marax.protocol import decode
from marax.transport import SerialTransport


def test_metrics_endpoint_roundtrip() -> None:
    reg = MetricsRegistry()
    server = MetricsServer(reg, host="127.0.0.1", port=0)
    server.start()
    try:
        reg.update(decode("C1.19,116,124,095,0560,0,1"))
        url = f"http://127.0.0.1:{server.port}/metrics"
        resp = requests.get(url, timeout=5)
        resp.raise_for_status()
        body = resp.text
        assert "marax_steam_temperature 116.0" in body
        assert fetch_snapshot(url) == reg.snapshot()
    finally:
        server.stop()
    assert not server.running
    server.stop()


@pytest.mark.hardware
@pytest.mark.skipif(not os.getenv("MARAX_TEST_PORT"), reason="MARAX_TEST_PORT not set")
def test_serial_port_delivers_telemetry() -> None:
    transport = SerialTransport(Config(port=os.environ["MARAX_TEST_PORT"], timeout=2.0))
    try:
        for _ in range(5):
            line = transport.readline()
            assert line is not None
            decode(line)
    finally:
        transport.close()
