"""Base model, enum and value parsers for gateway status records.

The gateway reports everything as strings.  The conversion rules
mirror what the accessory layer has always relied on:

* numbers are read with :func:`parse_float`, which behaves like
  JavaScript's ``parseFloat`` (numeric prefix, ``NaN`` otherwise);
* presence flags are negated with :func:`is_unset`, JavaScript
  truthiness for strings (``None`` and ``""`` are unset, ``"0"`` is
  not).

State enums inherit from :class:`HeizungEnum` which adds an ``UNKNOWN``
member at ``-1`` and a ``_missing_`` hook that returns ``UNKNOWN``
for any value without a mapped member.
"""

from __future__ import annotations

import enum
import math
import re

from pydantic import BaseModel, ConfigDict

_FLOAT_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_float(value: str | None) -> float:
    """Parse the leading number of *value*, ``NaN`` if there is none.

    >>> parse_float("21.5C")
    21.5
    >>> math.isnan(parse_float(None))
    True
    """
    if value is None:
        return math.nan
    match = _FLOAT_PREFIX.match(value.lstrip())
    if match is None:
        return math.nan
    text = match.group(0)
    if text.endswith("Infinity"):
        return -math.inf if text.startswith("-") else math.inf
    return float(text)


def is_unset(value: str | None) -> bool:
    """Return ``True`` for a missing or empty flag value."""
    return not value


class HeizungEnum(enum.IntEnum):
    """Base for gateway state enums.

    Every subclass **must** define ``UNKNOWN = -1``.
    """

    @classmethod
    def _missing_(cls, value: object) -> HeizungEnum:
        if hasattr(cls, "UNKNOWN"):
            unknown: HeizungEnum = cls.UNKNOWN  # type: ignore[attr-defined]
            return unknown
        return next(iter(cls))


class HeizungBaseModel(BaseModel):
    """Base for mapped status records.

    Frozen; ``NaN`` is a legitimate value for every float field because
    the gateway may not report a key at all.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        allow_inf_nan=True,
    )
