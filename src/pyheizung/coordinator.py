"""Batched access to the mapped heating system.

Accessory layers ask for one value at a time (a room temperature, a
valve level) but all of them come out of the same status cycle.  The
coordinator serialises those reads behind a lock and keeps the mapped
:class:`HeatingSystem` for ``batch_ttl`` seconds, so a burst of reads
costs one gateway fetch.  This window stacks on top of the client's own
short status reuse.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable

from pyheizung.client import HeizungClient
from pyheizung.models.heating import HeatingSystem, Room

_logger = logging.getLogger(__name__)


def _is_reading(temperature: float) -> bool:
    """Zero and ``NaN`` mean the sensor dropped out."""
    return bool(temperature) and not math.isnan(temperature)


class HeatingCoordinator:
    def __init__(
        self,
        client: HeizungClient,
        *,
        batch_ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._batch_ttl = batch_ttl if batch_ttl is not None else client.config.batch_ttl
        self._clock = clock
        self._lock = asyncio.Lock()
        self._data: HeatingSystem | None = None
        self._last_fetch: float | None = None
        self._last_good: dict[Room, float] = {}

    @property
    def client(self) -> HeizungClient:
        return self._client

    @property
    def data(self) -> HeatingSystem | None:
        """Last mapped system, ``None`` before the first fetch."""
        return self._data

    def _is_fresh(self) -> bool:
        if self._data is None or self._last_fetch is None:
            return False
        return (self._clock() - self._last_fetch) <= self._batch_ttl

    async def fetch_data(self, *, force: bool = False) -> HeatingSystem:
        """Return the mapped system, fetching when the batch has expired."""
        async with self._lock:
            if not force and self._is_fresh():
                assert self._data is not None  # noqa: S101
                return self._data
            _logger.info("Start fetching data")
            data = await self._client.get_heating_system()
            self._data = data
            self._last_fetch = self._clock()
            for room, sensor in data.rooms.items():
                if _is_reading(sensor.temperature):
                    self._last_good[room] = sensor.temperature
            return data

    def room_names(self) -> list[str]:
        """Rooms present in the last fetched system."""
        if self._data is None:
            return []
        return [room.value for room in self._data.rooms]

    async def room_temperature(self, room: Room | str) -> float:
        """Current temperature of *room*.

        A zero or ``NaN`` reading falls back to the last good reading of
        that room, which covers sensors that drop out for a while.
        """
        room = Room(room)
        data = await self.fetch_data()
        temperature = data.rooms[room].temperature
        if _is_reading(temperature):
            return temperature
        last_good = self._last_good.get(room)
        if last_good is not None:
            _logger.debug("Room %s read %s, using last good value %s", room.value, temperature, last_good)
            return last_good
        return temperature
