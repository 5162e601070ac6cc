from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from jokebox.core.config import get_settings  # noqa: E402
from jokebox.core.retry import RetryPolicy  # noqa: E402
from jokebox.main import create_app  # noqa: E402
from jokebox.services.joke_cache import JokeCache  # noqa: E402
from jokebox.services.joke_service import JokeService  # noqa: E402
from tests.fakes import FakeClock, FakeJokeStore, RecordingSleep  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def fake_store() -> FakeJokeStore:
    return FakeJokeStore()


@pytest.fixture()
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def joke_cache(fake_clock: FakeClock) -> JokeCache:
    return JokeCache(ttl_seconds=300, clock=fake_clock)


@pytest.fixture()
def store_retry_policy(recording_sleep: RecordingSleep) -> RetryPolicy:
    return RetryPolicy(max_attempts=3, delay_seconds=1.0, sleep=recording_sleep)


@pytest.fixture()
def joke_service(
    joke_cache: JokeCache,
    fake_store: FakeJokeStore,
    store_retry_policy: RetryPolicy,
) -> JokeService:
    return JokeService(cache=joke_cache, store=fake_store, retry_policy=store_retry_policy)


@pytest.fixture()
def api_client(joke_service: JokeService) -> Iterator[TestClient]:
    """Test client over an app wired to the in-memory store.

    The lifespan is not entered, so no scheduler or engine is touched.
    """
    app = create_app(joke_service=joke_service)
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
