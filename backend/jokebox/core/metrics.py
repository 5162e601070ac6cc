from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

CACHE_EVENTS = Counter(
    "jokebox_cache_events_total",
    "Cache operations recorded by Jokebox.",
    labelnames=("cache", "event"),
)
STORE_FETCH_LATENCY = Histogram(
    "jokebox_store_fetch_seconds",
    "Latency of successful store read-all queries.",
)
STORE_FETCH_ATTEMPTS = Counter(
    "jokebox_store_fetch_attempts_total",
    "Store fetch attempts by result.",
    labelnames=("result",),
)
STORE_HEALTHY = Gauge(
    "jokebox_store_healthy",
    "1 when the last store health check succeeded, else 0.",
)


def record_cache_event(cache: str, event: str) -> None:
    """Increment a cache event counter."""
    CACHE_EVENTS.labels(cache=cache, event=event).inc()


def observe_store_fetch(duration_seconds: float) -> None:
    """Record store fetch latency."""
    STORE_FETCH_LATENCY.observe(duration_seconds)


def record_store_attempt(result: str) -> None:
    """Record the outcome of one store fetch attempt."""
    STORE_FETCH_ATTEMPTS.labels(result=result).inc()


def set_store_health(healthy: bool) -> None:
    """Publish the latest store health check outcome."""
    STORE_HEALTHY.set(1 if healthy else 0)
