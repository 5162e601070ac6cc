"""In-process freshness cache for the jokes payload."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Sequence

JokeRecord = dict[str, Any]


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Snapshot of the cached payload.

    Entries are immutable; the cache swaps the whole entry on update so
    readers never observe a partially replaced payload.
    """

    data: tuple[JokeRecord, ...] = ()
    last_updated: float | None = None
    is_valid: bool = False


_EMPTY_ENTRY = CacheEntry()


class JokeCache:
    """
    TTL cache holding the last successful store result.

    An expired entry is kept rather than evicted so it can be served as a
    stale fallback while the store is unreachable.
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError(f"TTL value cannot be negative: {ttl_seconds}")
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry = _EMPTY_ENTRY

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def is_valid(self) -> bool:
        """Return True while the entry is flagged valid and younger than the TTL."""
        entry = self._entry
        if not entry.is_valid or entry.last_updated is None:
            return False
        return self._clock() - entry.last_updated < self._ttl_seconds

    def get(self) -> list[JokeRecord]:
        """Return the cached payload, which may be empty or stale."""
        return list(self._entry.data)

    def update(self, data: Sequence[JokeRecord]) -> None:
        """Replace the payload wholesale and restart the TTL window."""
        self._entry = CacheEntry(
            data=tuple(data),
            last_updated=self._clock(),
            is_valid=True,
        )

    def clear(self) -> None:
        """Drop the payload, including the stale fallback."""
        self._entry = _EMPTY_ENTRY

    def snapshot(self) -> CacheEntry:
        return self._entry

    def age_seconds(self) -> float | None:
        last_updated = self._entry.last_updated
        if last_updated is None:
            return None
        return self._clock() - last_updated


__all__ = ["CacheEntry", "JokeCache", "JokeRecord"]
