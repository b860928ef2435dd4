"""Client configuration for pyheizung."""

from __future__ import annotations

import dataclasses
import ipaddress
import os
from typing import Any

from pyheizung._constants import (
    DEFAULT_BATCH_TTL,
    DEFAULT_IDLE_TIMEOUT,
    DEFAULT_MAX_STATUS_AGE,
    DEFAULT_READ_SIZE,
)
from pyheizung.exceptions import HeizungConfigError


@dataclasses.dataclass(frozen=True)
class HeizungConfig:
    """Client configuration.

    Parameters
    ----------
    host : str
        IPv4 address of the heating gateway.
    port : int
        TCP port the gateway listens on.
    idle_timeout : float
        Seconds without any socket activity after which a session is
        closed.  A timeout is not an error: the session resolves with
        whatever was read so far.
    max_status_age : float
        Seconds a committed status may be reused before a new session
        is opened.  Queued writes always force a new session.
    batch_ttl : float
        Seconds :class:`~pyheizung.coordinator.HeatingCoordinator` keeps
        a mapped :class:`~pyheizung.models.HeatingSystem` before asking
        the client again.  Independent of ``max_status_age``.
    read_size : int
        Maximum bytes requested per socket read.
    """

    host: str
    port: int
    idle_timeout: float = DEFAULT_IDLE_TIMEOUT
    max_status_age: float = DEFAULT_MAX_STATUS_AGE
    batch_ttl: float = DEFAULT_BATCH_TTL
    read_size: int = DEFAULT_READ_SIZE

    def __post_init__(self) -> None:
        try:
            address = ipaddress.IPv4Address(str(self.host).strip())
        except ValueError as exc:
            raise HeizungConfigError(f"host must be an IPv4 address, got {self.host!r}") from exc
        object.__setattr__(self, "host", str(address))

        if not 0 < int(self.port) <= 65535:
            raise HeizungConfigError(f"port must be between 1 and 65535, got {self.port}")
        object.__setattr__(self, "port", int(self.port))

        for name in ("idle_timeout", "batch_ttl"):
            if getattr(self, name) <= 0:
                raise HeizungConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.max_status_age < 0:
            raise HeizungConfigError(f"max_status_age must not be negative, got {self.max_status_age}")
        if self.read_size <= 0:
            raise HeizungConfigError(f"read_size must be positive, got {self.read_size}")

    @classmethod
    def from_env(cls, **overrides: Any) -> HeizungConfig:
        """Create configuration from environment variables.

        Reads ``HEIZUNG_HOST`` and ``HEIZUNG_PORT`` plus the optional
        ``HEIZUNG_IDLE_TIMEOUT``, ``HEIZUNG_MAX_STATUS_AGE`` and
        ``HEIZUNG_BATCH_TTL``.  Explicit keyword arguments override
        environment values.

        Raises
        ------
        HeizungConfigError
            If host or port are missing or malformed.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}
        host = env.get("HEIZUNG_HOST")
        if host is not None:
            config_kwargs["host"] = host

        _ENV_NUMERIC_MAP = {
            "HEIZUNG_PORT": ("port", int),
            "HEIZUNG_IDLE_TIMEOUT": ("idle_timeout", float),
            "HEIZUNG_MAX_STATUS_AGE": ("max_status_age", float),
            "HEIZUNG_BATCH_TTL": ("batch_ttl", float),
        }
        for env_key, (field_name, convert) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = convert(val)
            except ValueError as exc:
                raise HeizungConfigError(f"{env_key} is not a number: {val!r}") from exc

        config_kwargs.update(overrides)

        missing = [name for name in ("host", "port") if name not in config_kwargs]
        if missing:
            raise HeizungConfigError(f"Missing configuration: {', '.join(missing)}")

        return cls(**config_kwargs)
