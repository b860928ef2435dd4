"""High-level async client for the heating gateway."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import overload

from pyheizung._cache import StatusCache, StatusSnapshot
from pyheizung._protocol import KeyValue
from pyheizung._queue import UpdateQueue
from pyheizung._session import WireSession
from pyheizung.config import HeizungConfig
from pyheizung.models.heating import HeatingSystem

_logger = logging.getLogger(__name__)


class HeizungClient:
    """Async client for one heating gateway.

    At most one TCP session runs at a time.  Every call made while a
    session is in flight waits for that session and receives its
    result; calls made shortly after a session reuse its status
    instead of reconnecting.

    Usage::

        client = HeizungClient(HeizungConfig(host="192.168.1.50", port=8888))
        status = await client.get_status()
        await client.update(KeyValue("tgtBad", "40"))
    """

    def __init__(
        self,
        config: HeizungConfig,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._config = config
        self._cache = StatusCache(clock=clock) if clock is not None else StatusCache()
        self._queue = UpdateQueue()
        self._ticket: asyncio.Task[StatusSnapshot] | None = None
        self._last_session: WireSession | None = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> HeizungConfig:
        return self._config

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def status(self) -> StatusSnapshot:
        """Last committed status; may be stale, never partial."""
        return self._cache.status()

    @property
    def last_update(self) -> float | None:
        return self._cache.last_update

    @property
    def is_busy(self) -> bool:
        """Whether a session is currently in flight."""
        return self._ticket is not None

    @property
    def pending_updates(self) -> tuple[KeyValue, ...]:
        return tuple(self._queue)

    @property
    def last_session(self) -> WireSession | None:
        """The most recently started session, for diagnostics."""
        return self._last_session

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_status(self) -> StatusSnapshot:
        """Return a fresh (or recently fetched) gateway status."""
        _logger.debug("get_status")
        return await self._run_get_and_set()

    @overload
    async def update(self, item: KeyValue, /) -> StatusSnapshot: ...

    @overload
    async def update(self, key: str, value: str, /) -> StatusSnapshot: ...

    async def update(self, item: KeyValue | str, value: str | None = None) -> StatusSnapshot:
        """Queue a write and return the status after it was sent.

        Queuing always forces a new session unless one is already in
        flight.  A running session picks the write up on its next
        received token.
        """
        if not isinstance(item, KeyValue):
            item = KeyValue(item, value)
        _logger.debug("update %s=%s", item.key, item.value)
        self._queue.enqueue(item)
        return await self._run_get_and_set()

    async def sync(self, value: str) -> StatusSnapshot:
        """Queue a ``Sync`` command, collapsing repeats of the same value."""
        _logger.debug("sync %s", value)
        self._queue.sync(value)
        return await self._run_get_and_set()

    async def get_heating_system(self) -> HeatingSystem:
        """Fetch the status and map it onto :class:`HeatingSystem`."""
        return HeatingSystem.from_status(await self.get_status())

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    async def _run_get_and_set(self) -> StatusSnapshot:
        ticket = self._schedule()
        if ticket is None:
            return self._cache.status()
        # Shielded so one cancelled caller does not abort the shared session.
        snapshot = await asyncio.shield(ticket)
        return dict(snapshot)

    def _schedule(self) -> asyncio.Task[StatusSnapshot] | None:
        """Return the session every caller should wait on, if any.

        ``None`` means the cached status is fresh enough and nothing is
        queued.  No ticket is created in that case.
        """
        if self._ticket is not None:
            _logger.debug("Joining running session")
            return self._ticket

        if not self._cache.is_stale(self._config.max_status_age) and not self._queue:
            _logger.debug("Reusing status (age %.2fs)", self._cache.age())
            return None

        session = WireSession(self._config, self._queue, self._cache.snapshot)
        self._last_session = session
        self._ticket = asyncio.get_running_loop().create_task(
            self._run_session(session),
            name=f"heizung-session-{session.session_id}",
        )
        self._ticket.add_done_callback(_log_session_outcome)
        return self._ticket

    async def _run_session(self, session: WireSession) -> StatusSnapshot:
        try:
            snapshot = await session.run()
            return self._cache.commit(snapshot)
        finally:
            self._ticket = None


def _log_session_outcome(task: asyncio.Task[StatusSnapshot]) -> None:
    if task.cancelled():
        _logger.debug("Session %s cancelled", task.get_name())
        return
    exc = task.exception()
    if exc is not None:
        _logger.debug("Session %s failed: %s", task.get_name(), exc)
