from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from jokebox.core.retry import RetryPolicy
from jokebox.viewer.connectivity import ConnectivityMonitor
from jokebox.viewer.persisted_cache import PersistedJokeCache
from jokebox.viewer.state import JokeViewer
from jokebox.viewer.storage import LocalStorage
from tests.fakes import FakeClock, FakeJokeApi, RecordingSleep


@pytest.fixture
def persisted(tmp_path: Path, fake_clock: FakeClock) -> PersistedJokeCache:
    return PersistedJokeCache(
        LocalStorage(tmp_path / "local_storage.json"), clock=fake_clock
    )


@pytest.fixture
def connectivity() -> ConnectivityMonitor:
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200))
    )
    return ConnectivityMonitor("http://jokes.test", http_client=http_client)


@pytest.fixture
def viewer_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_viewer(persisted, connectivity, viewer_sleep):
    def _make(api: FakeJokeApi) -> JokeViewer:
        policy = RetryPolicy(
            max_attempts=3, delay_seconds=2.0, backoff="linear", sleep=viewer_sleep
        )
        return JokeViewer(persisted, api, connectivity, policy)

    return _make
