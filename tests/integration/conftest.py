"""Fixtures for end-to-end tests of the HTTP app over an in-memory store."""

from __future__ import annotations

import httpx
import pytest

from cinetrack.store import InMemoryStore
from cinetrack.utils.config import AppConfig


class TMDBStub:
    def __init__(self):
        self.routes = {}
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.split("/3/", 1)[-1]
        self.calls.append(path)
        body = self.routes.get(path)
        if body is None:
            return httpx.Response(404, json={"status_message": "not found"})
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, json=body)


@pytest.fixture
def tmdb_stub():
    return TMDBStub()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def app_config():
    return AppConfig.from_dict({"tmdb": {"api_token": "test-token"}})
