"""Shared fixtures and fakes for unit tests."""

from __future__ import annotations

import json
import typing as t
from unittest.mock import AsyncMock

import httpx
import pytest

from cinetrack.cache import BoundedIndexEvictor, KeyValueCache, ReadThroughCache
from cinetrack.monitoring import metrics
from cinetrack.scheduler import EpisodeScheduler
from cinetrack.store import InMemoryStore
from cinetrack.tmdb import TMDBClient

# 2025-01-02T00:00:00Z
DEFAULT_NOW = 1735776000.0


class FakeClock:
    """Manually advanced epoch-seconds clock."""

    def __init__(self, now: float = DEFAULT_NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TickingClock(FakeClock):
    """Advances by ``step`` seconds every time it is read."""

    def __init__(self, now: float = DEFAULT_NOW, step: float = 1.0) -> None:
        super().__init__(now)
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset_all()
    yield
    metrics.reset_all()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    return InMemoryStore(clock=clock)


@pytest.fixture
def cache(memory_store):
    return KeyValueCache(memory_store)


@pytest.fixture
def evictor(cache):
    return BoundedIndexEvictor(cache, clock=TickingClock())


@pytest.fixture
def read_through(cache, evictor):
    return ReadThroughCache(cache, evictor)


@pytest.fixture
def scheduler(memory_store, clock):
    return EpisodeScheduler(memory_store, clock=clock)


@pytest.fixture
def mock_redis_client():
    """Mock redis.asyncio client."""
    client = AsyncMock()
    client.ping = AsyncMock(return_value=True)
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.expire = AsyncMock(return_value=True)
    client.zadd = AsyncMock(return_value=1)
    client.zrange = AsyncMock(return_value=[])
    client.zrangebyscore = AsyncMock(return_value=[])
    client.zrem = AsyncMock(return_value=1)
    client.zcard = AsyncMock(return_value=0)
    client.sadd = AsyncMock(return_value=1)
    client.srem = AsyncMock(return_value=1)
    client.smembers = AsyncMock(return_value=set())
    client.hset = AsyncMock(return_value=2)
    client.hgetall = AsyncMock(return_value={})
    client.aclose = AsyncMock(return_value=None)
    return client


class FakeTMDB:
    """Routes TMDB paths to canned JSON and records every request."""

    def __init__(self, routes: t.Optional[t.Dict[str, t.Any]] = None) -> None:
        self.routes: t.Dict[str, t.Any] = dict(routes or {})
        self.requests: t.List[httpx.Request] = []

    def paths(self) -> t.List[str]:
        return [request.url.path for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.split("/3/", 1)[-1]
        body = self.routes.get(path)
        if body is None:
            return httpx.Response(404, json={"status_message": "The resource you requested could not be found."})
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, content=json.dumps(body), headers={"content-type": "application/json"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> TMDBClient:
        return TMDBClient("test-token", transport=self.transport())


@pytest.fixture
def fake_tmdb():
    return FakeTMDB()


def show_details(
    show_id: int,
    *,
    name: str = "Test Show",
    status: str = "Returning Series",
    air_date: t.Optional[str] = None,
    season: int = 1,
    episode: int = 1,
) -> t.Dict[str, t.Any]:
    """TMDB ``tv/{id}`` payload with an optional next episode."""
    details: t.Dict[str, t.Any] = {"id": show_id, "name": name, "status": status, "next_episode_to_air": None}
    if air_date is not None:
        details["next_episode_to_air"] = {
            "air_date": air_date,
            "season_number": season,
            "episode_number": episode,
        }
    return details


@pytest.fixture
def make_show():
    return show_details


@pytest.fixture
def ticking_clock():
    return TickingClock
