"""Custom exception hierarchy for pyheizung."""

from __future__ import annotations


class HeizungError(Exception):
    """Base exception for all pyheizung errors."""


class HeizungConfigError(HeizungError):
    """Invalid or missing configuration."""


class HeizungTransportError(HeizungError):
    """TCP-level failure talking to the gateway."""

    def __init__(
        self,
        message: str,
        *,
        host: str = "",
        port: int | None = None,
    ) -> None:
        self.host = host
        self.port = port
        super().__init__(message)


class HeizungConnectionError(HeizungTransportError):
    """The gateway refused or could not be reached while connecting."""


class HeizungSocketError(HeizungTransportError):
    """The connection failed after it was established.

    Raised for resets and broken pipes while a status cycle is being
    read.  Every caller waiting on the same session receives the same
    instance; the next call opens a fresh connection.
    """
