"""Tests for POST /clear-cache."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.fakes import SAMPLE_JOKES, FakeJokeStore


def test_clear_cache_acknowledges(api_client: TestClient):
    response = api_client.post("/clear-cache")

    assert response.status_code == 200
    assert response.json() == {"status": "cleared"}


def test_next_request_after_clear_reads_store(
    api_client: TestClient, fake_store: FakeJokeStore
):
    fake_store.rows = SAMPLE_JOKES
    api_client.get("/post")
    api_client.get("/post")
    assert fake_store.fetch_calls == 1

    api_client.post("/clear-cache")
    response = api_client.get("/post")

    assert response.headers["X-Data-Source"] == "database"
    assert fake_store.fetch_calls == 2


def test_clear_cache_removes_stale_fallback(
    api_client: TestClient, fake_store: FakeJokeStore
):
    fake_store.rows = SAMPLE_JOKES
    api_client.get("/post")
    api_client.post("/clear-cache")
    fake_store.go_down()

    response = api_client.get("/post")

    assert response.status_code == 503
