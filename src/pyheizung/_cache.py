"""Last committed gateway status and its timestamp."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Mapping

_logger = logging.getLogger(__name__)

StatusSnapshot = dict[str, str | None]


class StatusCache:
    """Holds the status of the last successfully closed session.

    Sessions work on their own copy and hand it over through
    :meth:`commit`.  A committed dict is never mutated afterwards, so a
    reader always sees one complete cycle.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._snapshot: StatusSnapshot = {}
        self._last_update: float | None = None

    @property
    def snapshot(self) -> StatusSnapshot:
        """The committed snapshot itself.  Treat as read-only."""
        return self._snapshot

    @property
    def last_update(self) -> float | None:
        """Clock value of the last commit, ``None`` before the first one."""
        return self._last_update

    def status(self) -> StatusSnapshot:
        """Return a copy of the committed snapshot."""
        return dict(self._snapshot)

    def commit(self, snapshot: Mapping[str, str | None]) -> StatusSnapshot:
        self._snapshot = dict(snapshot)
        self._last_update = self._clock()
        _logger.debug("Committed status with %d keys", len(self._snapshot))
        return self._snapshot

    def age(self) -> float:
        """Seconds since the last commit (``inf`` if never committed)."""
        if self._last_update is None:
            return math.inf
        return self._clock() - self._last_update

    def is_stale(self, max_age: float) -> bool:
        return self.age() > max_age
