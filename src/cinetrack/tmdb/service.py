from __future__ import annotations

import asyncio
import typing as t

from ..cache import CachedValue, Namespace, ReadThroughCache
from ..errors import InvalidRequestError
from ..utils.config import CacheConfig
from .client import JSON, TMDBClient

MEDIA_TYPES = ("movie", "tv")


def filter_media_results(results: t.Iterable[JSON]) -> t.List[JSON]:
    return [item for item in results if item.get("media_type") in MEDIA_TYPES]


def add_media_type(results: t.Iterable[JSON], media_type: str) -> t.List[JSON]:
    return [{**item, "media_type": media_type} for item in results]


def _check_media_type(media_type: str) -> None:
    if media_type not in MEDIA_TYPES:
        raise InvalidRequestError("Type must be 'movie' or 'tv'")


class MetadataService:
    """Cached read access to the TMDB endpoints the watchlist UI uses.

    Each method returns a `CachedValue` so the HTTP layer can report
    ``X-Cache: HIT|MISS``. Search, details and recommendations are kept in
    bounded namespaces; the rest rely on TTL alone.
    """

    def __init__(self, client: TMDBClient, cache: ReadThroughCache, config: t.Optional[CacheConfig] = None) -> None:
        self._client = client
        self._cache = cache
        self._config = config or CacheConfig()
        limits = self._config.limits
        self._namespaces = {
            "search": Namespace("tmdb:search:index", limits.search),
            "details": Namespace("tmdb:details:index", limits.details),
            "recommendations": Namespace("tmdb:recommendations:index", limits.recommendations),
        }

    @property
    def client(self) -> TMDBClient:
        return self._client

    async def discover(self) -> CachedValue:
        async def load() -> JSON:
            tasks = [
                asyncio.ensure_future(self._client.fetch(endpoint))
                for endpoint in ("trending/all/week", "movie/popular", "tv/popular")
            ]
            try:
                trending, popular_movies, popular_tv = await asyncio.gather(*tasks)
            except BaseException:
                # first failure wins; siblings are cancelled and reaped
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
            return {
                "trending": filter_media_results(trending.get("results", [])),
                "popularMovies": add_media_type(popular_movies.get("results", []), "movie"),
                "popularTV": add_media_type(popular_tv.get("results", []), "tv"),
            }

        return await self._cache.fetch("tmdb:discover", load, self._config.ttl.discover)

    async def search(self, query: t.Optional[str]) -> CachedValue:
        if not query or not query.strip():
            raise InvalidRequestError("Query parameter 'q' is required")

        async def load() -> JSON:
            response = await self._client.fetch("search/multi", params={"query": query})
            return {"results": filter_media_results(response.get("results", []))}

        return await self._cache.fetch(
            f"tmdb:search:{query.lower().strip()}",
            load,
            self._config.ttl.search,
            namespace=self._namespaces["search"],
        )

    async def details(self, media_type: str, media_id: t.Union[int, str]) -> CachedValue:
        _check_media_type(media_type)

        async def load() -> JSON:
            details = await self._client.fetch(
                f"{media_type}/{media_id}", params={"append_to_response": "videos,credits,images"}
            )
            return {**details, "media_type": media_type}

        return await self._cache.fetch(
            f"tmdb:details:{media_type}:{media_id}",
            load,
            self._config.ttl.details,
            namespace=self._namespaces["details"],
        )

    async def season(self, tv_id: t.Union[int, str], season_number: t.Union[int, str]) -> CachedValue:
        return await self._cache.fetch(
            f"tmdb:season:{tv_id}:{season_number}",
            lambda: self._client.fetch(f"tv/{tv_id}/season/{season_number}"),
            self._config.ttl.season,
        )

    async def providers(self, media_type: str, media_id: t.Union[int, str]) -> CachedValue:
        _check_media_type(media_type)
        return await self._cache.fetch(
            f"tmdb:providers:{media_type}:{media_id}",
            lambda: self._client.fetch(f"{media_type}/{media_id}/watch/providers"),
            self._config.ttl.providers,
        )

    async def recommendations(self, media_type: str, media_id: t.Union[int, str]) -> CachedValue:
        _check_media_type(media_type)

        async def load() -> JSON:
            response = await self._client.fetch(f"{media_type}/{media_id}/recommendations")
            return {"results": add_media_type(response.get("results", []), media_type)}

        return await self._cache.fetch(
            f"tmdb:recommendations:{media_type}:{media_id}",
            load,
            self._config.ttl.recommendations,
            namespace=self._namespaces["recommendations"],
        )

    async def images(self, media_type: str, media_id: t.Union[int, str]) -> CachedValue:
        _check_media_type(media_type)
        return await self._cache.fetch(
            f"tmdb:images:{media_type}:{media_id}",
            lambda: self._client.fetch(f"{media_type}/{media_id}/images"),
            self._config.ttl.images,
        )
