"""One TCP exchange with the gateway, from connect to end of cycle."""

from __future__ import annotations

import asyncio
import logging
import secrets
from collections.abc import Mapping
from enum import StrEnum

from pyheizung._cache import StatusSnapshot
from pyheizung._constants import PASSES_AFTER_WRITE, PENDING_LIMIT_READS, STATUS_REQUEST
from pyheizung._protocol import KeyValue, TokenFramer, decode_chunk, encode_command
from pyheizung._queue import UpdateQueue
from pyheizung.config import HeizungConfig
from pyheizung.exceptions import HeizungConnectionError, HeizungSocketError

_logger = logging.getLogger(__name__)


class SessionState(StrEnum):
    CONNECTING = "connecting"
    STREAMING = "streaming"
    CLOSING = "closing"
    CLOSED = "closed"


class WireSession:
    """Reads one status cycle from the gateway and pushes queued writes.

    The first key received on the connection becomes the *stream
    starter*.  Seeing it again means the gateway has gone once round its
    whole status.  ``remaining_passes`` counts how many more sightings
    are needed before the session may close: it starts at zero and is
    reset to two whenever a command is written, so the gateway gets a
    full extra lap to echo the new value back.

    Parameters
    ----------
    config : HeizungConfig
        Connection settings.
    queue : UpdateQueue
        Commands to write.  One command is popped per received token.
    seed : Mapping
        Snapshot the session starts from.  Keys the gateway does not
        repeat keep their previous value.
    """

    def __init__(
        self,
        config: HeizungConfig,
        queue: UpdateQueue,
        seed: Mapping[str, str | None] | None = None,
    ) -> None:
        self._config = config
        self._queue = queue
        self._working: StatusSnapshot = dict(seed or {})
        self._framer = TokenFramer(max_pending=PENDING_LIMIT_READS * config.read_size)
        self._writer: asyncio.StreamWriter | None = None
        self.session_id = secrets.token_hex(4)
        self.state = SessionState.CONNECTING
        self.stream_starter: str | None = None
        self.remaining_passes = 0
        self.timed_out = False
        self.commands_sent: list[KeyValue] = []

    @property
    def snapshot(self) -> StatusSnapshot:
        """The working snapshot (partial while the session streams)."""
        return self._working

    async def run(self) -> StatusSnapshot:
        """Connect, stream until the cycle is complete, close.

        Returns the accumulated snapshot.  An idle timeout ends the
        session normally with whatever was read.

        Raises
        ------
        HeizungConnectionError
            If the connection cannot be established.
        HeizungSocketError
            If the connection fails while streaming.
        """
        host, port = self._config.host, self._config.port
        _logger.info("[%s] Connecting to %s:%d", self.session_id, host, port)
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                self._config.idle_timeout,
            )
        except TimeoutError:
            _logger.warning("[%s] Connect to %s:%d timed out", self.session_id, host, port)
            self.timed_out = True
            self.state = SessionState.CLOSED
            return self._working
        except OSError as exc:
            self.state = SessionState.CLOSED
            raise HeizungConnectionError(
                f"Could not connect to {host}:{port}: {exc}",
                host=host,
                port=port,
            ) from exc

        self._writer = writer
        try:
            writer.write(STATUS_REQUEST)
            await writer.drain()
            self.state = SessionState.STREAMING
            await self._stream(reader)
        except OSError as exc:
            _logger.info("[%s] Socket error: %s", self.session_id, exc)
            raise HeizungSocketError(
                f"Connection to {host}:{port} failed: {exc}",
                host=host,
                port=port,
            ) from exc
        finally:
            await self._close()

        _logger.info(
            "[%s] Session finished with %d keys (timed_out=%s)",
            self.session_id,
            len(self._working),
            self.timed_out,
        )
        return self._working

    async def _stream(self, reader: asyncio.StreamReader) -> None:
        while self.state is SessionState.STREAMING:
            try:
                data = await asyncio.wait_for(reader.read(self._config.read_size), self._config.idle_timeout)
            except TimeoutError:
                _logger.warning("[%s] Gateway idle for %.1fs, closing", self.session_id, self._config.idle_timeout)
                self.timed_out = True
                self._drop_partial()
                return
            if not data:
                _logger.debug("[%s] Gateway closed the connection", self.session_id)
                self._drop_partial()
                return
            for item in self._framer.feed(decode_chunk(data)):
                await self._handle_token(item)
                if self.state is not SessionState.STREAMING:
                    return

    async def _handle_token(self, item: KeyValue) -> None:
        is_starter = item.key == self.stream_starter

        if is_starter and self.remaining_passes == 0:
            _logger.debug("[%s] Cycle complete at %s", self.session_id, item.key)
            self.state = SessionState.CLOSING
            return

        command = self._queue.pop()
        if command is not None:
            await self._send(command)
            self.remaining_passes = PASSES_AFTER_WRITE

        if is_starter:
            self.remaining_passes -= 1
            _logger.debug("[%s] Saw stream starter, remaining_passes=%d", self.session_id, self.remaining_passes)

        self._working[item.key] = item.value

        if self.stream_starter is None:
            _logger.debug("[%s] Stream starter is %s", self.session_id, item.key)
            self.stream_starter = item.key

    async def _send(self, command: KeyValue) -> None:
        writer = self._writer
        assert writer is not None  # noqa: S101
        _logger.debug("[%s] Write %s=%s", self.session_id, command.key, command.value)
        writer.write(encode_command(command))
        await writer.drain()
        self.commands_sent.append(command)

    def _drop_partial(self) -> None:
        # No closing delimiter, so the value may be cut short.
        item = self._framer.flush()
        if item is not None:
            _logger.debug("[%s] Dropping unterminated token %s=%s", self.session_id, item.key, item.value)

    async def _close(self) -> None:
        writer, self._writer = self._writer, None
        if writer is None:
            self.state = SessionState.CLOSED
            return
        self.state = SessionState.CLOSING
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            _logger.debug("[%s] Error while closing socket", self.session_id, exc_info=True)
        self.state = SessionState.CLOSED
