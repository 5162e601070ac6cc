"""Network connectivity tracking for the viewer.

Plays the role of ``navigator.onLine`` plus the browser's ``online`` and
``offline`` events: a periodic probe against the server decides whether the
network is usable and notifies subscribers on transitions.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

Listener = Callable[[], Awaitable[None]]


class ConnectivityMonitor:
    """Probe-based online/offline detector."""

    def __init__(
        self,
        probe_url: str,
        interval_seconds: float = 15.0,
        probe_timeout_seconds: float = 3.0,
        http_client: httpx.AsyncClient | None = None,
        initially_online: bool = True,
    ) -> None:
        self._probe_url = probe_url
        self._interval = interval_seconds
        self._probe_timeout = probe_timeout_seconds
        self._client = http_client or httpx.AsyncClient()
        self._owns_client = http_client is None
        self._online = initially_online
        self._on_online: list[Listener] = []
        self._on_offline: list[Listener] = []
        self._stopped = asyncio.Event()

    def is_online(self) -> bool:
        return self._online

    def subscribe(
        self,
        *,
        on_online: Listener | None = None,
        on_offline: Listener | None = None,
    ) -> None:
        if on_online is not None:
            self._on_online.append(on_online)
        if on_offline is not None:
            self._on_offline.append(on_offline)

    async def _probe(self) -> bool:
        # Any HTTP answer, even an error status, means the network path works.
        try:
            await self._client.head(self._probe_url, timeout=self._probe_timeout)
        except httpx.HTTPError as exc:
            logger.debug("Connectivity probe to %s failed: %s", self._probe_url, exc)
            return False
        return True

    async def set_online(self, online: bool) -> None:
        """Record the connectivity state, notifying listeners on a change."""
        if online == self._online:
            return
        self._online = online
        logger.info("Network is now %s", "online" if online else "offline")
        listeners = self._on_online if online else self._on_offline
        for listener in list(listeners):
            await listener()

    async def check(self) -> bool:
        """Probe once and return the resulting state."""
        await self.set_online(await self._probe())
        return self._online

    async def run(self) -> None:
        """Probe every interval until ``stop`` is called."""
        self._stopped.clear()
        while not self._stopped.is_set():
            await self.check()
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                continue

    def stop(self) -> None:
        self._stopped.set()

    async def aclose(self) -> None:
        self.stop()
        if self._owns_client:
            await self._client.aclose()


__all__ = ["ConnectivityMonitor"]
