"""Tests for the viewer state machine."""

from __future__ import annotations

import asyncio

import pytest

from jokebox.viewer.connectivity import ConnectivityMonitor
from jokebox.viewer.persisted_cache import PersistedJokeCache
from jokebox.viewer.remote import FetchTimeoutError, HttpStatusFetchError
from jokebox.viewer.state import NO_DATA_NOTICE, OFFLINE_NOTICE
from tests.fakes import SAMPLE_JOKES, FakeClock, FakeJokeApi, RecordingSleep


async def _drain_retries(viewer) -> None:
    while viewer.pending_retries:
        await asyncio.gather(*viewer.pending_retries)


class TestMount:
    @pytest.mark.asyncio
    async def test_fetches_when_nothing_persisted(
        self, make_viewer, persisted: PersistedJokeCache
    ):
        api = FakeJokeApi(SAMPLE_JOKES)
        viewer = make_viewer(api)

        await viewer.mount()

        assert viewer.jokes == SAMPLE_JOKES
        assert viewer.error is None
        assert viewer.loading is False
        assert viewer.last_updated is not None
        assert persisted.load_persisted() == SAMPLE_JOKES
        assert api.calls == 1

    @pytest.mark.asyncio
    async def test_valid_persisted_payload_skips_network(
        self, make_viewer, persisted: PersistedJokeCache
    ):
        persisted.persist(SAMPLE_JOKES)
        api = FakeJokeApi(SAMPLE_JOKES[:1])
        viewer = make_viewer(api)

        await viewer.mount()

        assert api.calls == 0
        assert viewer.jokes == SAMPLE_JOKES
        assert viewer.loading is False
        assert viewer.last_updated == persisted.last_updated()

    @pytest.mark.asyncio
    async def test_expired_payload_is_shown_then_revalidated(
        self, make_viewer, persisted: PersistedJokeCache, fake_clock: FakeClock
    ):
        persisted.persist(SAMPLE_JOKES)
        fake_clock.advance(3600)
        api = FakeJokeApi(SAMPLE_JOKES[:2])
        viewer = make_viewer(api)

        await viewer.mount()

        assert api.calls == 1
        assert viewer.jokes == SAMPLE_JOKES[:2]
        assert persisted.is_persisted_valid() is True

    @pytest.mark.asyncio
    async def test_offline_mount_shows_persisted_with_notice(
        self,
        make_viewer,
        persisted: PersistedJokeCache,
        connectivity: ConnectivityMonitor,
        fake_clock: FakeClock,
    ):
        persisted.persist(SAMPLE_JOKES)
        fake_clock.advance(7200)
        await connectivity.set_online(False)
        api = FakeJokeApi(SAMPLE_JOKES)
        viewer = make_viewer(api)

        await viewer.mount()

        assert api.calls == 0
        assert viewer.is_online is False
        assert viewer.error == OFFLINE_NOTICE
        assert viewer.jokes == SAMPLE_JOKES


class TestFetchFailures:
    @pytest.mark.asyncio
    async def test_failure_falls_back_to_persisted_with_classified_error(
        self, make_viewer, persisted: PersistedJokeCache, fake_clock: FakeClock
    ):
        persisted.persist(SAMPLE_JOKES)
        fake_clock.advance(3600)
        viewer = make_viewer(FakeJokeApi(FetchTimeoutError("slow")))

        await viewer.mount()

        assert viewer.jokes == SAMPLE_JOKES
        assert viewer.error == (
            "Connection timeout. Please check your internet connection."
        )
        await viewer.close()

    @pytest.mark.asyncio
    async def test_failure_without_any_data_is_terminal(self, make_viewer):
        viewer = make_viewer(FakeJokeApi(HttpStatusFetchError(500)))

        await viewer.mount()

        assert viewer.jokes == []
        assert viewer.error == NO_DATA_NOTICE
        assert viewer.current_joke() is None
        await viewer.close()

    @pytest.mark.asyncio
    async def test_scheduled_retry_recovers(
        self, make_viewer, viewer_sleep: RecordingSleep
    ):
        api = FakeJokeApi(HttpStatusFetchError(500), SAMPLE_JOKES)
        viewer = make_viewer(api)

        await viewer.mount()
        assert viewer.retry_count == 1
        assert len(viewer.pending_retries) == 1

        await _drain_retries(viewer)

        assert api.calls == 2
        assert viewer.jokes == SAMPLE_JOKES
        assert viewer.error is None
        assert viewer.retry_count == 0
        assert viewer_sleep.delays == [2.0]

    @pytest.mark.asyncio
    async def test_retries_do_not_chain_and_budget_is_bounded(
        self, make_viewer, viewer_sleep: RecordingSleep
    ):
        api = FakeJokeApi(HttpStatusFetchError(502))
        viewer = make_viewer(api)

        await viewer.mount()
        await _drain_retries(viewer)
        assert api.calls == 2
        assert viewer.retry_count == 1

        await viewer.refresh()
        await _drain_retries(viewer)
        await viewer.refresh()
        await _drain_retries(viewer)
        assert viewer.retry_count == 3

        await viewer.refresh()
        assert viewer.pending_retries == frozenset()
        assert viewer_sleep.delays == [2.0, 4.0, 6.0]
        assert viewer.error == NO_DATA_NOTICE

    @pytest.mark.asyncio
    async def test_close_cancels_pending_retry(self, make_viewer):
        api = FakeJokeApi(HttpStatusFetchError(500), SAMPLE_JOKES)
        viewer = make_viewer(api)

        await viewer.mount()
        await viewer.close()

        assert viewer.pending_retries == frozenset()
        assert api.calls == 1


class TestConnectivityTransitions:
    @pytest.mark.asyncio
    async def test_going_offline_keeps_jokes_and_shows_notice(
        self, make_viewer, connectivity: ConnectivityMonitor
    ):
        viewer = make_viewer(FakeJokeApi(SAMPLE_JOKES))
        await viewer.mount()

        await connectivity.set_online(False)

        assert viewer.is_online is False
        assert viewer.error == OFFLINE_NOTICE
        assert viewer.jokes == SAMPLE_JOKES

    @pytest.mark.asyncio
    async def test_coming_online_fetches_immediately(
        self,
        make_viewer,
        persisted: PersistedJokeCache,
        connectivity: ConnectivityMonitor,
    ):
        persisted.persist(SAMPLE_JOKES)
        await connectivity.set_online(False)
        api = FakeJokeApi(SAMPLE_JOKES[:1])
        viewer = make_viewer(api)
        await viewer.mount()

        await connectivity.set_online(True)

        assert api.calls == 1
        assert viewer.is_online is True
        assert viewer.error is None
        assert viewer.jokes == SAMPLE_JOKES[:1]

    @pytest.mark.asyncio
    async def test_refresh_is_ignored_offline(
        self, make_viewer, connectivity: ConnectivityMonitor
    ):
        await connectivity.set_online(False)
        api = FakeJokeApi(SAMPLE_JOKES)
        viewer = make_viewer(api)
        await viewer.mount()

        await viewer.refresh()

        assert api.calls == 0


class TestNavigation:
    @pytest.mark.asyncio
    async def test_next_wraps_after_full_cycle(self, make_viewer):
        viewer = make_viewer(FakeJokeApi(SAMPLE_JOKES))
        await viewer.mount()

        seen = []
        for _ in range(len(SAMPLE_JOKES)):
            seen.append(viewer.current_joke()["id"])
            viewer.next_joke()

        assert seen == [1, 2, 3]
        assert viewer.current_index == 0

    def test_next_is_noop_when_empty(self, make_viewer):
        viewer = make_viewer(FakeJokeApi(SAMPLE_JOKES))

        viewer.next_joke()

        assert viewer.current_index == 0
        assert viewer.can_advance is False

    @pytest.mark.asyncio
    async def test_index_clamped_when_payload_shrinks(self, make_viewer):
        api = FakeJokeApi(SAMPLE_JOKES, SAMPLE_JOKES[:1])
        viewer = make_viewer(api)
        await viewer.mount()
        viewer.next_joke()
        viewer.next_joke()

        await viewer.refresh()

        assert viewer.current_index == 0
        assert viewer.current_joke() == SAMPLE_JOKES[0]
