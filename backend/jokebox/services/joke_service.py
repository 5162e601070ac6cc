"""
Joke retrieval policy.

Serves the cached payload while it is fresh, refreshes it through a bounded
retrying store fetch when it is not, and falls back to the stale payload
when the store stays unreachable.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Literal, Protocol

from jokebox.core.metrics import (
    observe_store_fetch,
    record_cache_event,
    record_store_attempt,
    set_store_health,
)
from jokebox.core.retry import RetryExhaustedError, RetryPolicy
from jokebox.core.telemetry import get_tracer
from jokebox.services.errors import (
    ServiceUnavailableError,
    StoreConnectionError,
    StoreError,
    StoreQueryError,
    StoreUnavailableError,
)
from jokebox.services.joke_cache import JokeCache, JokeRecord

logger = logging.getLogger(__name__)

CACHE_NAME = "jokes"

DataSource = Literal["cache", "database", "stale-cache"]


class JokeStore(Protocol):
    """What the service needs from the persistence layer."""

    async def fetch_all(self) -> list[JokeRecord]: ...

    async def ping(self) -> None: ...


@dataclass(frozen=True, slots=True)
class JokeResult:
    """Payload returned to the HTTP layer with provenance metadata."""

    data: list[JokeRecord]
    source: DataSource

    @property
    def stale(self) -> bool:
        return self.source == "stale-cache"

    @property
    def cache_status(self) -> str:
        return {"cache": "hit", "database": "miss", "stale-cache": "stale"}[self.source]


class JokeService:
    """Coordinates the freshness cache and the retrying store fetch."""

    def __init__(
        self,
        cache: JokeCache,
        store: JokeStore,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.cache = cache
        self._store = store
        self._retry_policy = retry_policy or RetryPolicy()

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    async def fetch_with_retry(
        self,
        max_attempts: int | None = None,
        delay: float | None = None,
    ) -> list[JokeRecord]:
        """Read all jokes, retrying connection and query failures.

        Each attempt checks out its own connection. Raises
        StoreUnavailableError after the attempt budget is spent.
        """
        policy = self._retry_policy
        if max_attempts is not None or delay is not None:
            policy = RetryPolicy(
                max_attempts=(
                    policy.max_attempts if max_attempts is None else max_attempts
                ),
                delay_seconds=policy.delay_seconds if delay is None else delay,
                backoff="fixed",
                sleep=policy.sleep,
            )

        async def _attempt() -> list[JokeRecord]:
            start = time.perf_counter()
            try:
                rows = await self._store.fetch_all()
            except StoreConnectionError:
                record_store_attempt("connection_error")
                raise
            except StoreQueryError:
                record_store_attempt("query_error")
                raise
            record_store_attempt("success")
            observe_store_fetch(time.perf_counter() - start)
            return rows

        with get_tracer().start_as_current_span("jokes.fetch_with_retry"):
            try:
                return await policy.run(
                    _attempt,
                    retry_on=(StoreConnectionError, StoreQueryError),
                    name="jokes store fetch",
                )
            except RetryExhaustedError as exc:
                raise StoreUnavailableError(
                    f"Jokes store unavailable after {exc.attempts} attempts.",
                    attempts=exc.attempts,
                ) from exc.last_exception

    async def get_jokes(self) -> JokeResult:
        """Return jokes from the fresh cache, the store, or the stale cache."""
        if self.cache.is_valid():
            record_cache_event(CACHE_NAME, "hit")
            logger.debug("Serving jokes from cache")
            return JokeResult(data=self.cache.get(), source="cache")

        record_cache_event(CACHE_NAME, "miss")
        try:
            rows = await self.fetch_with_retry()
        except StoreUnavailableError as exc:
            logger.error("Error fetching jokes: %s", exc)
            return self._stale_or_fail(exc)

        if not rows:
            logger.warning("Jokes store returned no rows")
            return self._stale_or_fail(
                ServiceUnavailableError("Jokes store returned no rows.")
            )

        self.cache.update(rows)
        record_cache_event(CACHE_NAME, "refresh_success")
        return JokeResult(data=list(rows), source="database")

    def _stale_or_fail(self, exc: Exception) -> JokeResult:
        stale = self.cache.get()
        if stale:
            record_cache_event(CACHE_NAME, "stale_return")
            logger.warning("Database error, serving stale cache")
            return JokeResult(data=stale, source="stale-cache")

        record_cache_event(CACHE_NAME, "unavailable")
        if isinstance(exc, ServiceUnavailableError):
            raise exc
        raise ServiceUnavailableError(str(exc)) from exc

    def clear_cache(self) -> None:
        """Flush the server cache, stale fallback included."""
        self.cache.clear()
        record_cache_event(CACHE_NAME, "cleared")
        logger.info("Jokes cache cleared")

    async def check_store(self) -> bool:
        """Ping the store once; never raises."""
        try:
            await self._store.ping()
        except StoreError as exc:
            logger.error("Database connection check failed: %s", exc)
            set_store_health(False)
            return False
        set_store_health(True)
        return True


__all__ = ["DataSource", "JokeResult", "JokeService", "JokeStore"]
