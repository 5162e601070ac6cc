"""Viewer state: persisted-first rendering, remote refresh and retries."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from jokebox.core.retry import RetryPolicy
from jokebox.viewer.connectivity import ConnectivityMonitor
from jokebox.viewer.persisted_cache import PersistedJokeCache
from jokebox.viewer.remote import FetchError, JokeApiClient

logger = logging.getLogger(__name__)

JokeRecord = dict[str, Any]

OFFLINE_NOTICE = "You are offline. Showing cached data."
NO_DATA_NOTICE = "No cached data available. Please check your connection."


def default_viewer_retry_policy(
    max_attempts: int = 3, delay_seconds: float = 2.0
) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=max_attempts, delay_seconds=delay_seconds, backoff="linear"
    )


class JokeViewer:
    """
    State holder for the joke viewer.

    The persisted payload is shown first; the server is consulted when the
    persisted copy has expired, when connectivity returns, or on refresh.
    Failed fetches schedule a delayed retry on the running event loop.
    """

    def __init__(
        self,
        cache: PersistedJokeCache,
        api: JokeApiClient,
        connectivity: ConnectivityMonitor,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._cache = cache
        self._api = api
        self._connectivity = connectivity
        self._retry_policy = retry_policy or default_viewer_retry_policy()
        self._retry_tasks: set[asyncio.Task[None]] = set()

        self.jokes: list[JokeRecord] = []
        self.current_index = 0
        self.error: str | None = None
        self.loading = True
        self.is_online = connectivity.is_online()
        self.retry_count = 0
        self.last_updated: datetime | None = None

        connectivity.subscribe(
            on_online=self.handle_online, on_offline=self.handle_offline
        )

    @property
    def api(self) -> JokeApiClient:
        return self._api

    @property
    def connectivity(self) -> ConnectivityMonitor:
        return self._connectivity

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    @property
    def pending_retries(self) -> frozenset[asyncio.Task[None]]:
        return frozenset(self._retry_tasks)

    def _set_jokes(self, jokes: list[JokeRecord]) -> None:
        self.jokes = jokes
        if not jokes:
            self.current_index = 0
        elif self.current_index >= len(jokes):
            self.current_index = len(jokes) - 1

    def _load_from_cache(self) -> bool:
        persisted = self._cache.load_persisted()
        if not persisted:
            return False
        self._set_jokes(persisted)
        return True

    async def mount(self) -> None:
        """Show persisted jokes immediately, then revalidate if needed."""
        self._load_from_cache()
        self.last_updated = self._cache.last_updated()
        self.is_online = self._connectivity.is_online()

        if not self.is_online:
            await self.handle_offline()
        elif not self._cache.is_persisted_valid():
            await self.fetch_data()
        else:
            self.loading = False

    async def fetch_data(self, is_retry: bool = False) -> None:
        if not self._connectivity.is_online():
            self.error = OFFLINE_NOTICE
            self._load_from_cache()
            self.loading = False
            return

        self.loading = True
        try:
            jokes = await self._api.fetch_remote()
        except FetchError as exc:
            logger.error("Error fetching data: %s", exc)
            self.error = exc.user_message

            if not is_retry and self.retry_count < self._retry_policy.max_attempts:
                self.retry_count += 1
                self._schedule_retry(self._retry_policy.delay_for(self.retry_count))

            if not self._load_from_cache() and not self.jokes:
                self.error = NO_DATA_NOTICE
        else:
            self._set_jokes(jokes)
            self._cache.persist(jokes)
            self.last_updated = datetime.now(tz=timezone.utc)
            self.error = None
            self.retry_count = 0
        finally:
            self.loading = False

    def _schedule_retry(self, delay: float) -> None:
        logger.info("Retrying fetch in %.1fs (retry %s)", delay, self.retry_count)
        task = asyncio.get_running_loop().create_task(self._retry_after(delay))
        self._retry_tasks.add(task)
        task.add_done_callback(self._retry_tasks.discard)

    async def _retry_after(self, delay: float) -> None:
        await self._retry_policy.sleep(delay)
        await self.fetch_data(is_retry=True)

    async def handle_offline(self) -> None:
        self.is_online = False
        self.error = OFFLINE_NOTICE
        self._load_from_cache()
        self.loading = False

    async def handle_online(self) -> None:
        self.is_online = True
        if self.error == OFFLINE_NOTICE:
            self.error = None
        await self.fetch_data()

    @property
    def can_advance(self) -> bool:
        return bool(self.jokes)

    def next_joke(self) -> None:
        if not self.jokes:
            return
        self.current_index = (self.current_index + 1) % len(self.jokes)

    async def refresh(self) -> None:
        """Manual refresh; ignored while offline."""
        if not self.is_online:
            return
        await self.fetch_data()

    def current_joke(self) -> JokeRecord | None:
        if not self.jokes:
            return None
        return self.jokes[self.current_index]

    async def close(self) -> None:
        for task in list(self._retry_tasks):
            task.cancel()
        if self._retry_tasks:
            await asyncio.gather(*self._retry_tasks, return_exceptions=True)
        self._retry_tasks.clear()


__all__ = [
    "JokeViewer",
    "NO_DATA_NOTICE",
    "OFFLINE_NOTICE",
    "default_viewer_retry_policy",
]
