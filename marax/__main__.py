"""Command line interface for the marax package."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
from typing import List

from .app import open_monitor
from .config import Config
from .errors import DecodeError, DisplayError, TransportError
from .protocol import decode
from .transport import FakeTransport, SerialTransport, Transport

logger = logging.getLogger("marax")


def _int_any_base(value: str) -> int:
    return int(value, 0)


def build_parser(env_cfg: Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="marax", description="Espresso machine telemetry monitor and shot timer"
    )
    parser.add_argument("--port", default=env_cfg.port, help="serial port [env MARAX_PORT]")
    parser.add_argument(
        "--baud", type=int, default=env_cfg.baudrate, help="baud rate [env MARAX_BAUD]"
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=env_cfg.metrics_port,
        help="metrics HTTP port [env MARAX_METRICS_PORT]",
    )
    parser.add_argument(
        "--i2c-bus", type=int, default=env_cfg.i2c_bus, help="I2C bus number [env MARAX_I2C_BUS]"
    )
    parser.add_argument(
        "--i2c-address",
        type=_int_any_base,
        default=env_cfg.i2c_address,
        help="display I2C address, e.g. 0x3C [env MARAX_I2C_ADDRESS]",
    )
    parser.add_argument(
        "--simulate",
        action="store_true",
        default=env_cfg.simulate,
        help="replay recorded telemetry, no hardware [env MARAX_SIM]",
    )
    parser.add_argument("--debug", action="store_true", help="debug logging [env MARAX_DEBUG]")

    sub = parser.add_subparsers(dest="cmd")
    sub.add_parser("run", help="run the monitor (default)")

    dec = sub.add_parser("decode", help="decode telemetry lines given on the command line")
    dec.add_argument("lines", nargs="+", help="telemetry line(s)")

    read = sub.add_parser("read", help="print decoded readings from the serial port")
    read.add_argument("--count", type=int, default=10, help="number of lines to read")

    dash = sub.add_parser("dashboard", help="serve the live dashboard")
    dash.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    dash.add_argument("--http-port", type=int, default=int(os.getenv("PORT_HTTP", "8050")))
    return parser


def _decode_lines(lines: List[str]) -> int:
    rc = 0
    for line in lines:
        try:
            print(decode(line))
        except DecodeError as exc:
            print(f"error: {exc}")
            rc = 1
    return rc


def _read(transport: Transport, count: int) -> int:
    try:
        for _ in range(count):
            line = transport.readline()
            if line is None:
                break
            try:
                print(decode(line))
            except DecodeError as exc:
                logger.warning("%s", exc)
    finally:
        transport.close()
    return 0


def main(argv: List[str] | None = None) -> int:
    """Run the marax command line interface."""
    env_cfg = Config.from_env()
    args = build_parser(env_cfg).parse_args(argv)

    debug = args.debug or bool(os.getenv("MARAX_DEBUG"))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = dataclasses.replace(
        env_cfg,
        port=args.port,
        baudrate=args.baud,
        metrics_port=args.metrics_port,
        i2c_bus=args.i2c_bus,
        i2c_address=args.i2c_address,
        simulate=args.simulate,
    )

    cmd = args.cmd or "run"
    if cmd == "decode":
        return _decode_lines(args.lines)
    if cmd == "dashboard":
        from .dashboard import serve

        serve(host=args.host, port=args.http_port)
        return 0

    try:
        if cmd == "read":
            transport = FakeTransport() if cfg.simulate else SerialTransport(cfg)
            return _read(transport, args.count)
        return open_monitor(cfg).run()
    except (TransportError, DisplayError, OSError) as exc:
        logger.error("%s failed: %s", cmd, exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
