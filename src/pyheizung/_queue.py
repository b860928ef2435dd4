"""Pending write queue drained by the wire session."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator

from pyheizung._constants import SYNC_KEY
from pyheizung._protocol import KeyValue

_logger = logging.getLogger(__name__)


class UpdateQueue:
    """FIFO of write commands waiting for the next session.

    The session pops one command per received token while it is
    connected.  Commands queued while no session runs stay here until
    the next one starts.
    """

    def __init__(self) -> None:
        self._items: deque[KeyValue] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[KeyValue]:
        return iter(tuple(self._items))

    def enqueue(self, item: KeyValue) -> None:
        _logger.debug("Queue write %s=%s (queued=%d)", item.key, item.value, len(self._items) + 1)
        self._items.append(item)

    def sync(self, value: str) -> bool:
        """Queue a ``Sync`` command unless an identical one is last in line.

        Returns ``True`` when a command was appended.
        """
        if self._items:
            last = self._items[-1]
            if last.key == SYNC_KEY and last.value == value:
                _logger.debug("Sync %s already queued", value)
                return False
        self.enqueue(KeyValue(SYNC_KEY, value))
        return True

    def pop(self) -> KeyValue | None:
        if not self._items:
            return None
        return self._items.popleft()

    def clear(self) -> None:
        self._items.clear()
