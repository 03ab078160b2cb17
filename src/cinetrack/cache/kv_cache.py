from __future__ import annotations

import logging
import typing as t

from ..errors import StoreError
from ..monitoring import metrics
from ..store import KeyValueStore
from .codec import Codec, CodecError, JSONCodec
from .result import CacheResult, CacheStatus

_logger = logging.getLogger(__name__)


class KeyValueCache:
    """Best-effort cache over a `KeyValueStore`.

    Nothing here raises to the caller: an unreachable store reads as
    `CacheStatus.UNAVAILABLE` and writes become no-ops, so callers always
    fall through to the live source.
    """

    def __init__(self, store: KeyValueStore, codec: t.Optional[Codec] = None) -> None:
        self._store = store
        self._codec = codec or JSONCodec()

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def codec(self) -> Codec:
        return self._codec

    def is_available(self) -> bool:
        return self._store.is_available()

    async def lookup(self, key: str, codec: t.Optional[Codec] = None) -> CacheResult:
        if not self._store.is_available():
            metrics.cache_requests_total.inc(result="unavailable")
            return CacheResult.unavailable()
        try:
            raw = await self._store.get(key)
        except StoreError as exc:
            _logger.error("Cache get error for %s: %s", key, exc)
            metrics.cache_requests_total.inc(result="unavailable")
            return CacheResult.unavailable()

        if raw is None:
            _logger.debug("Cache miss: %s", key)
            metrics.cache_requests_total.inc(result="miss")
            return CacheResult.miss()

        try:
            value = (codec or self._codec).decode(raw)
        except CodecError as exc:
            _logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
            metrics.cache_requests_total.inc(result="miss")
            return CacheResult.miss()

        _logger.debug("Cache hit: %s", key)
        metrics.cache_requests_total.inc(result="hit")
        return CacheResult(CacheStatus.HIT, value)

    async def get(self, key: str, codec: t.Optional[Codec] = None) -> t.Optional[t.Any]:
        result = await self.lookup(key, codec=codec)
        return result.value if result.hit else None

    async def set(self, key: str, value: t.Any, ttl_seconds: int, codec: t.Optional[Codec] = None) -> None:
        if not self._store.is_available():
            return
        try:
            await self._store.set(key, (codec or self._codec).encode(value), ttl_seconds)
        except (StoreError, CodecError) as exc:
            _logger.error("Cache set error for %s: %s", key, exc)

    async def delete(self, *keys: str) -> None:
        if not keys or not self._store.is_available():
            return
        try:
            await self._store.delete(*keys)
        except StoreError as exc:
            _logger.error("Cache delete error: %s", exc)
