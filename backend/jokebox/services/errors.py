"""Store and service exception definitions."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for failures talking to the jokes store."""


class StoreConnectionError(StoreError):
    """Raised when a pooled store connection cannot be acquired."""


class StoreQueryError(StoreError):
    """Raised when a connection was acquired but the query failed."""


class StoreUnavailableError(StoreError):
    """Raised once every store fetch attempt has failed."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class ServiceUnavailableError(Exception):
    """Raised when there is neither fresh data nor a usable stale fallback."""


__all__ = [
    "ServiceUnavailableError",
    "StoreConnectionError",
    "StoreError",
    "StoreQueryError",
    "StoreUnavailableError",
]
