"""Shared fixtures: an in-memory stand-in for the heating gateway."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from pyheizung.client import HeizungClient
from pyheizung.config import HeizungConfig

EOF = object()
"""Scripted chunk meaning "gateway closed the connection"."""


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class _FakeReader:
    def __init__(self, gateway: FakeGateway, connection: _FakeConnection) -> None:
        self._gateway = gateway
        self._connection = connection

    async def read(self, n: int = -1) -> bytes:
        await asyncio.sleep(0)
        item = self._connection.next_chunk()
        if item is None:
            # Idle gateway: never answers, the session's timeout has to fire.
            await asyncio.Event().wait()
        if item is EOF:
            return b""
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, str):
            item = item.encode("ascii")
        assert isinstance(item, bytes)
        return item


class _FakeWriter:
    def __init__(self, gateway: FakeGateway) -> None:
        self._gateway = gateway
        self.closed = False

    def write(self, data: bytes) -> None:
        self._gateway.receive(data)

    async def drain(self) -> None:
        await asyncio.sleep(0)

    def close(self) -> None:
        self.closed = True
        self._gateway.closed_connections += 1

    async def wait_closed(self) -> None:
        await asyncio.sleep(0)


class _FakeConnection:
    def __init__(self, gateway: FakeGateway) -> None:
        self._gateway = gateway
        self._script = list(gateway.chunks) if gateway.chunks is not None else None
        self._cycles_sent = 0
        self.reader = _FakeReader(gateway, self)
        self.writer = _FakeWriter(gateway)

    def next_chunk(self) -> Any:
        if self._script is not None:
            return self._script.pop(0) if self._script else None
        if self._cycles_sent >= self._gateway.max_cycles:
            return None
        self._cycles_sent += 1
        return "".join(f"{key}={value}#" for key, value in self._gateway.state.items())


@dataclass
class FakeGateway:
    """Scripted gateway.

    Without ``chunks`` it behaves like the real device: every read gets
    one full cycle of ``state`` and written commands change ``state``,
    so later cycles echo them.  With ``chunks`` the reads return exactly
    the scripted items and then go idle.
    """

    state: dict[str, str] = field(default_factory=dict)
    chunks: list[Any] | None = None
    max_cycles: int = 20
    connect_error: BaseException | None = None
    connect_gate: asyncio.Event | None = None
    connections: int = 0
    closed_connections: int = 0
    status_requests: int = 0
    commands: list[tuple[str, str | None]] = field(default_factory=list)

    async def open_connection(self, host: str, port: int, **_: Any) -> tuple[_FakeReader, _FakeWriter]:
        self.connections += 1
        if self.connect_gate is not None:
            await self.connect_gate.wait()
        if self.connect_error is not None:
            raise self.connect_error
        connection = _FakeConnection(self)
        return connection.reader, connection.writer

    def receive(self, data: bytes) -> None:
        text = data.decode("ascii")
        if text == "\n":
            self.status_requests += 1
            return
        body = text.strip("#")
        key, sep, value = body.partition("=")
        self.commands.append((key, value if sep else None))
        if sep:
            self.state[key] = value


@pytest.fixture
def gateway(monkeypatch: pytest.MonkeyPatch) -> FakeGateway:
    fake = FakeGateway(state={"A": "1", "B": "2"})
    monkeypatch.setattr(asyncio, "open_connection", fake.open_connection)
    return fake


@pytest.fixture
def config() -> HeizungConfig:
    return HeizungConfig(host="192.168.1.50", port=8888, idle_timeout=0.05)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client(config: HeizungConfig, clock: FakeClock, gateway: FakeGateway) -> HeizungClient:
    return HeizungClient(config, clock=clock)
