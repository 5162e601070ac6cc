"""Shared cache header utilities for API endpoints.

This module sets HTTP caching and validation headers consistently for joke
responses.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from fastapi import Request, Response

from jokebox.services.joke_service import JokeResult

STALE_WARNING = '110 - "Response is Stale"'


def set_cache_header(
    response: Response,
    ttl_seconds: int,
    *,
    public: bool = True,
    stale_if_error_seconds: int = 0,
) -> None:
    """Set Cache-Control header on a response.

    Args:
        response: The FastAPI Response object.
        ttl_seconds: Time-to-live in seconds.
        public: Whether the cache is public (vs private).
        stale_if_error_seconds: Adds a stale-if-error directive when positive.
    """
    visibility = "public" if public else "private"
    value = f"{visibility}, max-age={ttl_seconds}"
    if stale_if_error_seconds > 0:
        value = f"{value}, stale-if-error={stale_if_error_seconds}"
    response.headers["Cache-Control"] = value


def compute_etag(payload: Any) -> str:
    """Return a strong ETag derived from the canonical JSON form of the payload."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:32]
    return f'"{digest}"'


def etag_matches(request: Request, etag: str) -> bool:
    """Whether the request's If-None-Match header already names this ETag."""
    header = request.headers.get("if-none-match")
    if not header:
        return False
    candidates = {token.strip().removeprefix("W/") for token in header.split(",")}
    return "*" in candidates or etag in candidates


def set_source_headers(response: Response, result: JokeResult) -> None:
    """Expose where the payload came from and mark stale responses."""
    response.headers["X-Cache-Status"] = result.cache_status
    response.headers["X-Data-Source"] = result.source
    if result.stale:
        response.headers["Warning"] = STALE_WARNING
