"""Token framing and command encoding for the gateway's ``#`` stream.

The gateway broadcasts an endless ASCII stream of ``key=value`` tokens
separated by ``#``.  There are no message boundaries beyond the
delimiter; a full status cycle is recognised one level up by the
session, which watches for the first key of the cycle coming round
again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pyheizung._constants import DEFAULT_MAX_PENDING, KEY_VALUE_SEPARATOR, TOKEN_DELIMITER, WIRE_ENCODING

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class KeyValue:
    """A single ``key=value`` pair read from or written to the gateway.

    ``value`` is ``None`` for a bare ``key`` token without ``=``.  Such a
    key is still stored in the status, which keeps "reported without a
    value" distinct from "never reported".
    """

    key: str
    value: str | None = None


def parse_token(token: str) -> KeyValue | None:
    """Split one token into a :class:`KeyValue`.

    Returns ``None`` for tokens with an empty key.  Those appear around
    doubled delimiters and are dropped rather than treated as errors.
    The value is the text between the first and the second ``=``.
    """
    parts = token.split(KEY_VALUE_SEPARATOR)
    key = parts[0]
    if not key:
        if token:
            _logger.debug("Dropping token without key: %r", token)
        return None
    value = parts[1] if len(parts) > 1 else None
    return KeyValue(key, value)


def encode_command(item: KeyValue) -> bytes:
    """Encode a write command as ``#key=value#``."""
    if item.value is None:
        body = item.key
    else:
        body = f"{item.key}{KEY_VALUE_SEPARATOR}{item.value}"
    return f"{TOKEN_DELIMITER}{body}{TOKEN_DELIMITER}".encode(WIRE_ENCODING)


def decode_chunk(data: bytes) -> str:
    return data.decode(WIRE_ENCODING, errors="replace")


class TokenFramer:
    """Incremental splitter for the delimiter-separated stream.

    TCP gives no guarantee that a read ends on a delimiter, so the text
    after the last ``#`` of a chunk is held back and prefixed to the next
    one.  :meth:`flush` hands out the held-back text once the stream is
    over.

    A segment longer than ``max_pending`` characters without a delimiter
    is discarded up to the next ``#``.
    """

    def __init__(self, max_pending: int = DEFAULT_MAX_PENDING) -> None:
        self._max_pending = max_pending
        self._pending = ""
        self._discarding = False

    @property
    def pending(self) -> str:
        """Text received after the last delimiter, not yet framed."""
        return self._pending

    def feed(self, text: str) -> list[KeyValue]:
        """Frame *text* and return the complete tokens in arrival order."""
        if self._discarding:
            _, sep, text = text.partition(TOKEN_DELIMITER)
            if not sep:
                return []
            self._discarding = False
        segments = (self._pending + text).split(TOKEN_DELIMITER)
        self._pending = segments.pop()
        if len(self._pending) > self._max_pending:
            _logger.debug("Dropping unterminated token after %d characters", len(self._pending))
            self._pending = ""
            self._discarding = True
        tokens: list[KeyValue] = []
        for segment in segments:
            item = parse_token(segment)
            if item is not None:
                tokens.append(item)
        return tokens

    def flush(self) -> KeyValue | None:
        """Return the held-back partial token, if any, and reset."""
        pending, self._pending = self._pending, ""
        self._discarding = False
        return parse_token(pending)
