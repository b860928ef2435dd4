#!/usr/bin/env python3
"""Dump the heating gateway status.

Connects once, reads a full status cycle and prints both the raw
key/value pairs **and** the mapped heating system, so keys the mapper
does not know about are easy to spot.

Usage
-----
Set environment variables and run::

    export HEIZUNG_HOST="192.168.1.50"
    export HEIZUNG_PORT="8888"
    python scripts/dump_status.py

Options::

    --host IP            Gateway address (default: $HEIZUNG_HOST)
    --port PORT          Gateway port (default: $HEIZUNG_PORT)
    --set KEY=VALUE      Write a value before reading (repeatable)
    --sync VALUE         Send a Sync command before reading
    --json               Output as machine-readable JSON
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyheizung import HeizungClient, HeizungConfig, HeizungError, KeyValue  # noqa: E402
from pyheizung.models import HeatingSystem  # noqa: E402


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _parse_assignment(text: str) -> KeyValue:
    key, sep, value = text.partition("=")
    if not key or not sep:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {text!r}")
    return KeyValue(key, value)


def _print_raw(status: dict[str, str | None], out: list[str]) -> None:
    out.append(_section(f"RAW STATUS ({len(status)} keys)"))
    width = max((len(k) for k in status), default=0)
    for key in sorted(status):
        value = status[key]
        out.append(f"  {key:<{width}} : {'<no value>' if value is None else value}")


def _print_model(system: HeatingSystem, out: list[str]) -> None:
    out.append(_section("ROOMS"))
    for room, sensor in system.rooms.items():
        out.append(f"  {room.value:<10} {sensor.temperature:6.1f}  (raw {sensor.temperature_raw})")

    out.append(_section("HEATERS"))
    for name, heater in system.heaters.items():
        out.append(
            f"  {name.value:<10} level={heater.level} target={heater.target_level}"
            f" mode={heater.heating_mode.name} maintenance={heater.is_maintenance}"
        )

    dist = system.distributor
    out.append(_section("DISTRIBUTOR"))
    out.append(f"  pump      : {'on' if dist.pump.state else 'off'}")
    out.append(f"  vorlauf   : {dist.vorlauf.temperature}")
    out.append(f"  ruecklauf : {dist.ruecklauf.temperature}")
    out.append(f"  mixer     : level={dist.mixer.level} target={dist.mixer.target_level}")

    out.append(_section("SYSTEM"))
    out.append(f"  version   : {system.system.version}")
    out.append(f"  uptime    : {system.system.uptime}")
    out.append(f"  threads   : {system.system.threads}")


async def main() -> int:
    parser = argparse.ArgumentParser(description="Dump heating gateway status")
    parser.add_argument("--host", help="Gateway IPv4 address")
    parser.add_argument("--port", type=int, help="Gateway TCP port")
    parser.add_argument("--set", dest="updates", action="append", type=_parse_assignment, default=[])
    parser.add_argument("--sync", help="Send a Sync command with this value")
    parser.add_argument("--json", dest="json_mode", action="store_true", help="Output JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port

    try:
        config = HeizungConfig.from_env(**overrides)
    except HeizungError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    client = HeizungClient(config)
    try:
        for item in args.updates:
            await client.update(item)
        if args.sync:
            await client.sync(args.sync)
        status = await client.get_status()
    except HeizungError as exc:
        print(f"Gateway error: {exc}", file=sys.stderr)
        return 1

    system = HeatingSystem.from_status(status)

    if args.json_mode:
        payload = {
            "host": config.host,
            "port": config.port,
            "status": status,
            "system": system.model_dump(mode="json"),
        }
        print(json.dumps(payload, indent=2, default=str, ensure_ascii=False))
        return 0

    out: list[str] = [_section(f"pyheizung dump_status {config.host}:{config.port}")]
    _print_raw(status, out)
    _print_model(system, out)
    print("\n".join(out))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
