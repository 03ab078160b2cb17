"""Unit tests for MetadataService."""

import asyncio

import httpx
import pytest

from cinetrack.cache import CacheStatus
from cinetrack.errors import InvalidRequestError, UpstreamError
from cinetrack.tmdb import MetadataService, TMDBClient
from cinetrack.utils.config import CacheConfig, CacheLimits


@pytest.fixture
def service(fake_tmdb, read_through):
    return MetadataService(fake_tmdb.client(), read_through)


@pytest.mark.asyncio
class TestDiscover:
    async def test_discover_shapes_and_caches(self, service, fake_tmdb, memory_store):
        fake_tmdb.routes.update(
            {
                "trending/all/week": {"results": [{"id": 1, "media_type": "movie"}, {"id": 2, "media_type": "person"}]},
                "movie/popular": {"results": [{"id": 3}]},
                "tv/popular": {"results": [{"id": 4}]},
            }
        )

        first = await service.discover()
        second = await service.discover()

        assert first.status is CacheStatus.MISS
        assert second.status is CacheStatus.HIT
        assert first.value == {
            "trending": [{"id": 1, "media_type": "movie"}],
            "popularMovies": [{"id": 3, "media_type": "movie"}],
            "popularTV": [{"id": 4, "media_type": "tv"}],
        }
        assert len(fake_tmdb.requests) == 3
        assert memory_store.ttl("tmdb:discover") == pytest.approx(6 * 60 * 60)

    async def test_failed_fetch_cancels_sibling_requests(self, read_through):
        cancelled = []
        waiting = []
        siblings_waiting = asyncio.Event()
        never = asyncio.Event()

        async def handler(request):
            if request.url.path.endswith("movie/popular"):
                await siblings_waiting.wait()
                return httpx.Response(500, text="boom")
            waiting.append(request.url.path)
            if len(waiting) == 2:
                siblings_waiting.set()
            try:
                await never.wait()
            except asyncio.CancelledError:
                cancelled.append(request.url.path)
                raise
            return httpx.Response(200, json={"results": []})

        client = TMDBClient("test-token", transport=httpx.MockTransport(handler))
        service = MetadataService(client, read_through)

        with pytest.raises(UpstreamError):
            await asyncio.wait_for(service.discover(), timeout=5)

        assert sorted(cancelled) == ["/3/trending/all/week", "/3/tv/popular"]
        await client.close()


@pytest.mark.asyncio
class TestSearch:
    async def test_query_is_normalised_for_key(self, service, fake_tmdb):
        fake_tmdb.routes["search/multi"] = {"results": [{"id": 1, "media_type": "tv"}]}

        await service.search("  Dark ")
        result = await service.search("dark")

        assert result.status is CacheStatus.HIT
        assert result.value == {"results": [{"id": 1, "media_type": "tv"}]}

    async def test_search_uses_bounded_namespace(self, fake_tmdb, read_through, memory_store):
        fake_tmdb.routes["search/multi"] = {"results": []}
        config = CacheConfig(limits=CacheLimits(search=2))
        service = MetadataService(fake_tmdb.client(), read_through, config)

        for query in ("a", "b", "c"):
            await service.search(query)

        assert await memory_store.zrange("tmdb:search:index", 0, -1) == ["tmdb:search:b", "tmdb:search:c"]
        assert await memory_store.get("tmdb:search:a") is None

    @pytest.mark.parametrize("query", [None, "", "   "])
    async def test_empty_query_rejected(self, service, query):
        with pytest.raises(InvalidRequestError):
            await service.search(query)


@pytest.mark.asyncio
class TestPerMediaEndpoints:
    async def test_details_tags_media_type(self, service, fake_tmdb, memory_store):
        fake_tmdb.routes["tv/42"] = {"id": 42, "name": "Severance"}

        result = await service.details("tv", 42)

        assert result.value == {"id": 42, "name": "Severance", "media_type": "tv"}
        assert fake_tmdb.requests[0].url.params["append_to_response"] == "videos,credits,images"
        assert await memory_store.zrange("tmdb:details:index", 0, -1) == ["tmdb:details:tv:42"]

    async def test_recommendations_tagged_and_bounded(self, service, fake_tmdb, memory_store):
        fake_tmdb.routes["movie/5/recommendations"] = {"results": [{"id": 6}]}

        result = await service.recommendations("movie", 5)

        assert result.value == {"results": [{"id": 6, "media_type": "movie"}]}
        assert await memory_store.zcard("tmdb:recommendations:index") == 1

    async def test_season_providers_images_use_plain_ttl(self, service, fake_tmdb, memory_store):
        fake_tmdb.routes.update(
            {
                "tv/1/season/2": {"episodes": []},
                "tv/1/watch/providers": {"results": {}},
                "tv/1/images": {"posters": []},
            }
        )

        await service.season(1, 2)
        await service.providers("tv", 1)
        await service.images("tv", 1)

        assert memory_store.ttl("tmdb:season:1:2") == pytest.approx(6 * 60 * 60)
        assert memory_store.ttl("tmdb:providers:tv:1") == pytest.approx(24 * 60 * 60)
        assert memory_store.ttl("tmdb:images:tv:1") == pytest.approx(24 * 60 * 60)

    @pytest.mark.parametrize("method", ["details", "providers", "recommendations", "images"])
    async def test_invalid_media_type(self, service, method):
        with pytest.raises(InvalidRequestError):
            await getattr(service, method)("person", 1)

    async def test_upstream_failure_propagates(self, service, fake_tmdb):
        fake_tmdb.routes["tv/1"] = httpx.Response(503, text="down")
        with pytest.raises(UpstreamError):
            await service.details("tv", 1)

    async def test_unreachable_cache_falls_through_to_live(self, service, fake_tmdb, memory_store):
        fake_tmdb.routes["tv/1/images"] = {"posters": []}
        memory_store.set_available(False)

        first = await service.images("tv", 1)
        second = await service.images("tv", 1)

        assert first.value == second.value == {"posters": []}
        assert second.status.header_value == "MISS"
        assert len(fake_tmdb.requests) == 2
