"""Persisted client-side copy of the last successfully fetched jokes."""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Sequence

from jokebox.viewer.storage import LocalStorage

logger = logging.getLogger(__name__)

CACHE_KEY = "cachedJokes"
CACHE_TIMESTAMP_KEY = "jokeCacheTimestamp"

JokeRecord = dict[str, Any]


class PersistedJokeCache:
    """TTL-aware view over the two local storage keys.

    The payload is kept after it expires; validity only decides whether the
    viewer revalidates against the server on mount.
    """

    def __init__(
        self,
        storage: LocalStorage,
        ttl_seconds: float = 3600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._ttl_ms = ttl_seconds * 1000
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _timestamp_ms(self) -> int | None:
        raw = self._storage.get_item(CACHE_TIMESTAMP_KEY)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            logger.warning("Ignoring malformed cache timestamp %r", raw)
            return None

    def load_persisted(self) -> list[JokeRecord]:
        """Return the persisted payload, or an empty list when absent or corrupt."""
        raw = self._storage.get_item(CACHE_KEY)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.error("Error loading from cache: persisted jokes are not valid JSON")
            return []
        if not isinstance(data, list):
            logger.error("Error loading from cache: persisted jokes are not a list")
            return []
        if not all(isinstance(item, dict) for item in data):
            logger.error("Error loading from cache: persisted jokes are not objects")
            return []
        return data

    def is_persisted_valid(self) -> bool:
        timestamp = self._timestamp_ms()
        if timestamp is None:
            return False
        return self._now_ms() - timestamp < self._ttl_ms

    def persist(self, data: Sequence[JokeRecord]) -> None:
        """Overwrite the payload and timestamp; storage failures are only logged."""
        try:
            self._storage.set_items(
                {
                    CACHE_KEY: json.dumps(list(data)),
                    CACHE_TIMESTAMP_KEY: str(self._now_ms()),
                }
            )
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Error updating cache: %s", exc)

    def last_updated(self) -> datetime | None:
        timestamp = self._timestamp_ms()
        if timestamp is None:
            return None
        return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)


__all__ = ["CACHE_KEY", "CACHE_TIMESTAMP_KEY", "PersistedJokeCache"]
