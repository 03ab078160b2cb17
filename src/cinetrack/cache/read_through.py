from __future__ import annotations

import typing as t
from dataclasses import dataclass

from .evictor import BoundedIndexEvictor
from .kv_cache import KeyValueCache
from .result import CacheStatus

Loader = t.Callable[[], t.Awaitable[t.Any]]


@dataclass(frozen=True)
class Namespace:
    """Bounded group of cache keys sharing one eviction index."""

    index_key: str
    limit: int


@dataclass(frozen=True)
class CachedValue:
    value: t.Any
    status: CacheStatus


class ReadThroughCache:
    """Serve from cache, otherwise load live and store the result.

    Loader errors propagate untouched; caching never turns a failed fetch
    into a success or a successful fetch into a failure.
    """

    def __init__(self, cache: KeyValueCache, evictor: t.Optional[BoundedIndexEvictor] = None) -> None:
        self._cache = cache
        self._evictor = evictor or BoundedIndexEvictor(cache)

    async def fetch(
        self,
        key: str,
        loader: Loader,
        ttl_seconds: int,
        namespace: t.Optional[Namespace] = None,
    ) -> CachedValue:
        result = await self._cache.lookup(key)
        if result.hit:
            return CachedValue(result.value, CacheStatus.HIT)

        value = await loader()
        if namespace is None:
            await self._cache.set(key, value, ttl_seconds)
        else:
            await self._evictor.set_with_limit(key, value, ttl_seconds, namespace.index_key, namespace.limit)
        return CachedValue(value, result.status)
