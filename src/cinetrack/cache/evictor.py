from __future__ import annotations

import logging
import time
import typing as t

from ..errors import StoreError
from ..monitoring import metrics
from .codec import Codec, CodecError
from .kv_cache import KeyValueCache

_logger = logging.getLogger(__name__)


class BoundedIndexEvictor:
    """Caps the number of live keys per cache namespace.

    Each namespace keeps a sorted-set index scored by insertion time in
    milliseconds. Once the index grows past ``limit`` the oldest keys are
    deleted first and then dropped from the index (FIFO; reads never touch
    the index). The steps are separate round trips, so concurrent writers may
    evict a little more or less than the exact overflow.
    """

    def __init__(self, cache: KeyValueCache, clock: t.Callable[[], float] = time.time) -> None:
        self._cache = cache
        self._clock = clock

    async def set_with_limit(
        self,
        key: str,
        value: t.Any,
        ttl_seconds: int,
        index_key: str,
        limit: int,
        codec: t.Optional[Codec] = None,
    ) -> t.List[str]:
        """Store ``key`` and return the keys evicted to keep ``index_key`` within ``limit``."""
        store = self._cache.store
        if not store.is_available():
            return []
        try:
            await store.set(key, (codec or self._cache.codec).encode(value), ttl_seconds)
            await store.zadd(index_key, {key: int(self._clock() * 1000)})
            # orphaned index members live at most twice as long as the entries they point to
            await store.expire(index_key, ttl_seconds * 2)

            count = await store.zcard(index_key)
            if count <= limit:
                return []
            to_evict = await store.zrange(index_key, 0, count - limit - 1)
            if to_evict:
                await store.delete(*to_evict)
                await store.zrem(index_key, *to_evict)
                metrics.cache_evictions_total.inc(len(to_evict), namespace=index_key)
                _logger.debug("Evicted %d keys from %s", len(to_evict), index_key)
            return list(to_evict)
        except (StoreError, CodecError) as exc:
            _logger.error("Cache setWithLimit error for %s: %s", key, exc)
            return []
