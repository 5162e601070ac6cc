"""Unit tests for metrics recording helpers."""

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram
import pytest

import jokebox.core.metrics as metrics


@pytest.fixture
def metric_registry(monkeypatch):
    """Provide a fresh registry and rebind module-level metrics."""
    registry = CollectorRegistry()

    monkeypatch.setattr(
        metrics,
        "CACHE_EVENTS",
        Counter(
            "jokebox_cache_events_total",
            "Cache events",
            ["cache", "event"],
            registry=registry,
        ),
    )
    monkeypatch.setattr(
        metrics,
        "STORE_FETCH_LATENCY",
        Histogram(
            "jokebox_store_fetch_seconds",
            "Store fetch latency",
            registry=registry,
        ),
    )
    monkeypatch.setattr(
        metrics,
        "STORE_FETCH_ATTEMPTS",
        Counter(
            "jokebox_store_fetch_attempts_total",
            "Store fetch attempts",
            ["result"],
            registry=registry,
        ),
    )
    monkeypatch.setattr(
        metrics,
        "STORE_HEALTHY",
        Gauge("jokebox_store_healthy", "Store health", registry=registry),
    )

    return registry


def test_record_cache_event_increments_counter(metric_registry):
    metrics.record_cache_event("jokes", "hit")
    metrics.record_cache_event("jokes", "hit")

    value = metric_registry.get_sample_value(
        "jokebox_cache_events_total",
        {"cache": "jokes", "event": "hit"},
    )
    assert value == 2.0


def test_observe_store_fetch_records_latency(metric_registry):
    metrics.observe_store_fetch(0.25)
    metrics.observe_store_fetch(0.75)

    count = metric_registry.get_sample_value("jokebox_store_fetch_seconds_count")
    total = metric_registry.get_sample_value("jokebox_store_fetch_seconds_sum")

    assert count == 2.0
    assert total == pytest.approx(1.0)


def test_record_store_attempt_counts_by_result(metric_registry):
    metrics.record_store_attempt("connection_error")
    metrics.record_store_attempt("success")
    metrics.record_store_attempt("connection_error")

    errors = metric_registry.get_sample_value(
        "jokebox_store_fetch_attempts_total", {"result": "connection_error"}
    )
    successes = metric_registry.get_sample_value(
        "jokebox_store_fetch_attempts_total", {"result": "success"}
    )

    assert errors == 2.0
    assert successes == 1.0


def test_set_store_health_toggles_gauge(metric_registry):
    metrics.set_store_health(True)
    assert metric_registry.get_sample_value("jokebox_store_healthy") == 1.0

    metrics.set_store_health(False)
    assert metric_registry.get_sample_value("jokebox_store_healthy") == 0.0
