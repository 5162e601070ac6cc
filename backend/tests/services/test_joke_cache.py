"""Tests for the server-side freshness cache."""

from __future__ import annotations

import pytest

from jokebox.services.joke_cache import CacheEntry, JokeCache
from tests.fakes import SAMPLE_JOKES, FakeClock


class TestJokeCache:
    def test_starts_empty_and_invalid(self, joke_cache: JokeCache):
        assert joke_cache.is_valid() is False
        assert joke_cache.get() == []
        assert joke_cache.snapshot() == CacheEntry()
        assert joke_cache.age_seconds() is None

    def test_update_makes_cache_valid(self, joke_cache: JokeCache):
        joke_cache.update(SAMPLE_JOKES)

        assert joke_cache.is_valid() is True
        assert joke_cache.get() == SAMPLE_JOKES

    def test_expired_entry_keeps_payload(
        self, joke_cache: JokeCache, fake_clock: FakeClock
    ):
        joke_cache.update(SAMPLE_JOKES)
        fake_clock.advance(300)

        assert joke_cache.is_valid() is False
        assert joke_cache.get() == SAMPLE_JOKES
        assert joke_cache.age_seconds() == 300

    def test_valid_until_just_before_ttl(
        self, joke_cache: JokeCache, fake_clock: FakeClock
    ):
        joke_cache.update(SAMPLE_JOKES)
        fake_clock.advance(299.9)

        assert joke_cache.is_valid() is True

    def test_update_replaces_payload_wholesale(
        self, joke_cache: JokeCache, fake_clock: FakeClock
    ):
        joke_cache.update(SAMPLE_JOKES)
        fake_clock.advance(400)
        joke_cache.update(SAMPLE_JOKES[:1])

        assert joke_cache.get() == SAMPLE_JOKES[:1]
        assert joke_cache.is_valid() is True

    def test_clear_drops_stale_fallback(self, joke_cache: JokeCache):
        joke_cache.update(SAMPLE_JOKES)
        joke_cache.clear()

        assert joke_cache.is_valid() is False
        assert joke_cache.get() == []

    def test_get_returns_a_copy(self, joke_cache: JokeCache):
        joke_cache.update(SAMPLE_JOKES)
        payload = joke_cache.get()
        payload.append({"id": 99})

        assert len(joke_cache.get()) == len(SAMPLE_JOKES)

    def test_snapshot_is_immutable(self, joke_cache: JokeCache):
        joke_cache.update(SAMPLE_JOKES)
        entry = joke_cache.snapshot()

        with pytest.raises(AttributeError):
            entry.is_valid = False  # type: ignore[misc]

    def test_zero_ttl_is_never_valid(self, fake_clock: FakeClock):
        cache = JokeCache(ttl_seconds=0, clock=fake_clock)
        cache.update(SAMPLE_JOKES)

        assert cache.is_valid() is False
        assert cache.get() == SAMPLE_JOKES

    def test_negative_ttl_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            JokeCache(ttl_seconds=-1)
