"""HTTP client for the server's joke listing, with failure classification."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

JokeRecord = dict[str, Any]

_NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


class FetchError(Exception):
    """Base class for remote fetch failures."""

    user_message = "Error loading data. Please try again."


class FetchTimeoutError(FetchError):
    """The request did not complete within the timeout."""

    user_message = "Connection timeout. Please check your internet connection."


class HttpStatusFetchError(FetchError):
    """The server answered with a non-success status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Server responded with HTTP {status_code}")
        self.status_code = status_code

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return f"Server error: {self.status_code}"


class NoResponseError(FetchError):
    """The request was sent but no response came back."""

    user_message = "No response from server. Please try again."


class UnknownFetchError(FetchError):
    """Any other failure, including an unusable response body."""


class JokeApiClient:
    """Async wrapper around ``GET {base_url}/post``."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._client = http_client or httpx.AsyncClient(timeout=timeout_seconds)
        self._owns_client = http_client is None

    @property
    def jokes_url(self) -> str:
        return f"{self._base_url}/post"

    async def fetch_remote(self) -> list[JokeRecord]:
        """Fetch the full joke list once, raising a classified FetchError on failure."""
        try:
            response = await self._client.get(
                self.jokes_url, headers=_NO_CACHE_HEADERS, timeout=self._timeout
            )
        except httpx.TimeoutException as exc:
            raise FetchTimeoutError(str(exc) or "Request timed out") from exc
        except httpx.TransportError as exc:
            raise NoResponseError(str(exc) or "No response received") from exc
        except Exception as exc:
            raise UnknownFetchError(str(exc) or type(exc).__name__) from exc

        if response.status_code != httpx.codes.OK:
            raise HttpStatusFetchError(response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise UnknownFetchError("Response body is not valid JSON") from exc

        if not isinstance(payload, list) or not payload:
            raise UnknownFetchError("No data received from server")
        if not all(isinstance(item, dict) for item in payload):
            raise UnknownFetchError("Response items are not joke objects")

        logger.debug(
            "Fetched %s jokes (source=%s)",
            len(payload),
            response.headers.get("X-Data-Source", "unknown"),
        )
        return payload

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = [
    "FetchError",
    "FetchTimeoutError",
    "HttpStatusFetchError",
    "JokeApiClient",
    "NoResponseError",
    "UnknownFetchError",
]
