"""Wire session state machine against the fake gateway."""

from __future__ import annotations

import asyncio

import pytest
from conftest import EOF, FakeGateway

from pyheizung._protocol import KeyValue
from pyheizung._queue import UpdateQueue
from pyheizung._session import SessionState, WireSession
from pyheizung.config import HeizungConfig
from pyheizung.exceptions import HeizungConnectionError, HeizungSocketError


@pytest.mark.asyncio
async def test_closes_on_second_sighting_of_stream_starter(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.chunks = ["A=1#B=2#A=1#"]
    session = WireSession(config, UpdateQueue())

    snapshot = await session.run()

    assert snapshot == {"A": "1", "B": "2"}
    assert session.stream_starter == "A"
    assert session.state is SessionState.CLOSED
    assert not session.timed_out
    assert gateway.status_requests == 1
    assert gateway.closed_connections == 1


@pytest.mark.asyncio
async def test_tokens_after_cycle_end_are_ignored(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.chunks = ["A=1#B=2#A=1#C=3#"]

    snapshot = await WireSession(config, UpdateQueue()).run()

    assert "C" not in snapshot


@pytest.mark.asyncio
async def test_write_needs_two_more_passes_before_close(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.chunks = ["A=1#B=2#A=1#C=9#A=1#", "B=2#A=1#"]
    queue = UpdateQueue()
    queue.enqueue(KeyValue("C", "9"))
    session = WireSession(config, queue)

    snapshot = await session.run()

    assert gateway.commands == [("C", "9")]
    assert session.commands_sent == [KeyValue("C", "9")]
    assert snapshot == {"A": "1", "B": "2", "C": "9"}
    # Closed by the sentinel in the second chunk, not by the idle timeout.
    assert not session.timed_out
    assert not queue


@pytest.mark.asyncio
async def test_write_without_enough_passes_ends_by_timeout(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.chunks = ["A=1#B=2#A=1#C=9#A=1#"]
    queue = UpdateQueue()
    queue.enqueue(KeyValue("C", "9"))
    session = WireSession(config, queue)

    snapshot = await session.run()

    assert session.timed_out
    assert session.remaining_passes == 0
    assert snapshot["C"] == "9"


@pytest.mark.asyncio
async def test_one_write_per_token(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.chunks = ["A=1#B=2#A=1#B=2#A=1#B=2#A=1#B=2#A=1#"]
    queue = UpdateQueue()
    queue.enqueue(KeyValue("x", "1"))
    queue.enqueue(KeyValue("y", "2"))
    queue.enqueue(KeyValue("z", "3"))
    session = WireSession(config, queue)

    await session.run()

    assert gateway.commands == [("x", "1"), ("y", "2"), ("z", "3")]


@pytest.mark.asyncio
async def test_written_value_is_echoed_by_live_gateway(config: HeizungConfig, gateway: FakeGateway) -> None:
    queue = UpdateQueue()
    queue.enqueue(KeyValue("B", "5"))
    session = WireSession(config, queue)

    snapshot = await session.run()

    assert gateway.state["B"] == "5"
    assert snapshot == {"A": "1", "B": "5"}
    assert not session.timed_out


@pytest.mark.asyncio
async def test_timeout_resolves_with_partial_snapshot(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.chunks = ["A=1#B=2#"]
    session = WireSession(config, UpdateQueue())

    snapshot = await session.run()

    assert session.timed_out
    assert snapshot == {"A": "1", "B": "2"}
    assert session.state is SessionState.CLOSED


@pytest.mark.asyncio
async def test_timeout_drops_unterminated_token(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.chunks = ["A=1#Bad=2"]
    session = WireSession(config, UpdateQueue(), {"Bad": "21.5"})

    snapshot = await session.run()

    assert session.timed_out
    assert snapshot == {"A": "1", "Bad": "21.5"}


@pytest.mark.asyncio
async def test_eof_drops_unterminated_token(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.chunks = ["A=1#B=2#Bad=2", EOF]

    snapshot = await WireSession(config, UpdateQueue()).run()

    assert snapshot == {"A": "1", "B": "2"}


@pytest.mark.asyncio
async def test_overlong_token_is_skipped_up_to_next_delimiter(gateway: FakeGateway) -> None:
    config = HeizungConfig(host="192.168.1.50", port=8888, idle_timeout=0.05, read_size=8)
    gateway.chunks = ["A=1#", "x" * 20, "x" * 20, "yy#B=2#A=1#"]

    snapshot = await WireSession(config, UpdateQueue()).run()

    assert snapshot == {"A": "1", "B": "2"}


@pytest.mark.asyncio
async def test_token_split_across_reads(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.chunks = ["A=1#tgtMix", "er=35#A=1#"]

    snapshot = await WireSession(config, UpdateQueue()).run()

    assert snapshot == {"A": "1", "tgtMixer": "35"}


@pytest.mark.asyncio
async def test_bare_key_is_stored_without_value(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.chunks = ["A=1#sswsPumpe#A=1#"]

    snapshot = await WireSession(config, UpdateQueue()).run()

    assert "sswsPumpe" in snapshot
    assert snapshot["sswsPumpe"] is None


@pytest.mark.asyncio
async def test_gateway_eof_is_a_normal_close(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.chunks = ["A=1#B=2#", EOF]
    session = WireSession(config, UpdateQueue())

    snapshot = await session.run()

    assert snapshot == {"A": "1", "B": "2"}
    assert not session.timed_out


@pytest.mark.asyncio
async def test_seed_values_survive_unless_repeated(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.chunks = ["A=2#A=2#"]
    seed = {"A": "1", "old": "x"}

    snapshot = await WireSession(config, UpdateQueue(), seed).run()

    assert snapshot == {"A": "2", "old": "x"}
    assert seed == {"A": "1", "old": "x"}


@pytest.mark.asyncio
async def test_reset_while_streaming_raises_socket_error(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.chunks = ["A=1#B=2#", ConnectionResetError("reset by peer")]
    session = WireSession(config, UpdateQueue())

    with pytest.raises(HeizungSocketError) as excinfo:
        await session.run()

    assert excinfo.value.host == config.host
    assert excinfo.value.port == config.port
    assert isinstance(excinfo.value.__cause__, ConnectionResetError)
    assert session.state is SessionState.CLOSED
    assert gateway.closed_connections == 1


@pytest.mark.asyncio
async def test_refused_connection_raises_connection_error(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.connect_error = ConnectionRefusedError("refused")
    session = WireSession(config, UpdateQueue())

    with pytest.raises(HeizungConnectionError):
        await session.run()

    assert session.state is SessionState.CLOSED


@pytest.mark.asyncio
async def test_connect_timeout_is_soft(config: HeizungConfig, gateway: FakeGateway) -> None:
    gateway.connect_gate = asyncio.Event()
    session = WireSession(config, UpdateQueue(), {"A": "1"})

    snapshot = await session.run()

    assert session.timed_out
    assert snapshot == {"A": "1"}
