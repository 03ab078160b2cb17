from __future__ import annotations

import logging
import typing as t

import redis.asyncio as aioredis
from redis import exceptions as redis_exceptions

from ..errors import StoreError, StoreUnavailableError
from ..monitoring import metrics
from ..utils.config import StoreConfig
from ..utils.resilience import CircuitBreaker, CircuitBreakerConfig, CircuitOpenError, with_retries
from .base import KeyValueStore, Member, Score

T = t.TypeVar("T")

_logger = logging.getLogger(__name__)

_CONNECTIVITY_ERRORS = (
    redis_exceptions.ConnectionError,
    redis_exceptions.TimeoutError,
    ConnectionError,
    TimeoutError,
    OSError,
)


class RedisStore(KeyValueStore):
    """Redis-backed store.

    - Keys are written as ``{prefix}:{key}`` when a prefix is configured.
    - Every command goes through a `CircuitBreaker`; connectivity errors trip
      it and `is_available()` reports False until a half-open probe succeeds.
    - Redis errors are translated to `StoreUnavailableError` / `StoreError`.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        *,
        prefix: str = "",
        timeout_seconds: float = 5.0,
        connect_attempts: int = 3,
        connect_backoff_ms: t.Optional[t.List[int]] = None,
        circuit_breaker: t.Optional[CircuitBreaker] = None,
        client: t.Optional[aioredis.Redis] = None,
    ) -> None:
        self._url = url
        self._prefix = prefix.rstrip(":")
        self._connect_attempts = connect_attempts
        self._connect_backoff_ms = connect_backoff_ms or [100, 500, 2000]
        self._breaker = circuit_breaker or CircuitBreaker(trip_on=_CONNECTIVITY_ERRORS)
        if client is None:
            client = aioredis.from_url(
                url,
                decode_responses=True,
                socket_timeout=timeout_seconds,
                socket_connect_timeout=timeout_seconds,
            )
        self._redis = client

    @classmethod
    def from_config(cls, config: StoreConfig) -> "RedisStore":
        if not config.url:
            raise ValueError("StoreConfig.url is required for RedisStore")
        breaker = CircuitBreaker(
            CircuitBreakerConfig(
                failure_threshold=config.failure_threshold,
                reset_timeout_seconds=config.reset_timeout_seconds,
            ),
            trip_on=_CONNECTIVITY_ERRORS,
        )
        return cls(
            config.url,
            prefix=config.prefix,
            timeout_seconds=config.timeout_seconds,
            connect_attempts=config.connect_attempts,
            connect_backoff_ms=config.connect_backoff_ms,
            circuit_breaker=breaker,
        )

    def _key(self, key: str) -> str:
        if not self._prefix:
            return key
        return f"{self._prefix}:{key}"

    def is_available(self) -> bool:
        return self._breaker.allows_requests()

    async def connect(self) -> bool:
        """Ping until the server answers; on failure leave the breaker open and degrade."""
        try:
            await with_retries(
                self._redis.ping,
                attempts=self._connect_attempts,
                backoff_ms=self._connect_backoff_ms,
                retry_on=_CONNECTIVITY_ERRORS,
            )
        except _CONNECTIVITY_ERRORS as exc:
            self._breaker.trip()
            _logger.warning("Redis initial connection failed: %s", exc)
            _logger.warning("Cache will be disabled, falling back to direct API calls")
            return False
        self._breaker.record_success()
        _logger.info("Redis connected successfully")
        return True

    async def _execute(self, op: str, fn: t.Callable[[], t.Awaitable[T]]) -> T:
        try:
            with metrics.store_latency_seconds.time(op=op):
                return await self._breaker.run(fn)
        except CircuitOpenError as exc:
            raise StoreUnavailableError(f"redis {op}: circuit open") from exc
        except _CONNECTIVITY_ERRORS as exc:
            raise StoreUnavailableError(f"redis {op}: {exc}") from exc
        except redis_exceptions.RedisError as exc:
            raise StoreError(f"redis {op}: {exc}") from exc

    async def ping(self) -> bool:
        return bool(await self._execute("ping", self._redis.ping))

    async def get(self, key: str) -> t.Optional[str]:
        return await self._execute("get", lambda: self._redis.get(self._key(key)))

    async def set(self, key: str, value: str, ttl_seconds: t.Optional[int] = None) -> None:
        await self._execute("set", lambda: self._redis.set(self._key(key), value, ex=ttl_seconds))

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        names = [self._key(k) for k in keys]
        return int(await self._execute("delete", lambda: self._redis.delete(*names)))

    async def expire(self, key: str, seconds: int) -> bool:
        return bool(await self._execute("expire", lambda: self._redis.expire(self._key(key), seconds)))

    async def zadd(self, key: str, mapping: t.Mapping[Member, Score]) -> int:
        return int(await self._execute("zadd", lambda: self._redis.zadd(self._key(key), dict(mapping))))

    async def zrange(self, key: str, start: int, stop: int, withscores: bool = False) -> t.List[t.Any]:
        rows = await self._execute(
            "zrange", lambda: self._redis.zrange(self._key(key), start, stop, withscores=withscores)
        )
        if withscores:
            return [(member, float(score)) for member, score in rows]
        return list(rows)

    async def zrangebyscore(self, key: str, min_score: Score, max_score: Score) -> t.List[Member]:
        return list(
            await self._execute("zrangebyscore", lambda: self._redis.zrangebyscore(self._key(key), min_score, max_score))
        )

    async def zrem(self, key: str, *members: Member) -> int:
        if not members:
            return 0
        return int(await self._execute("zrem", lambda: self._redis.zrem(self._key(key), *members)))

    async def zcard(self, key: str) -> int:
        return int(await self._execute("zcard", lambda: self._redis.zcard(self._key(key))))

    async def sadd(self, key: str, *members: Member) -> int:
        if not members:
            return 0
        return int(await self._execute("sadd", lambda: self._redis.sadd(self._key(key), *members)))

    async def srem(self, key: str, *members: Member) -> int:
        if not members:
            return 0
        return int(await self._execute("srem", lambda: self._redis.srem(self._key(key), *members)))

    async def smembers(self, key: str) -> t.Set[Member]:
        return set(await self._execute("smembers", lambda: self._redis.smembers(self._key(key))))

    async def hset(self, key: str, mapping: t.Mapping[str, str]) -> int:
        return int(await self._execute("hset", lambda: self._redis.hset(self._key(key), mapping=dict(mapping))))

    async def hgetall(self, key: str) -> t.Dict[str, str]:
        return dict(await self._execute("hgetall", lambda: self._redis.hgetall(self._key(key))))

    async def close(self) -> None:
        try:
            await self._redis.aclose()
        except _CONNECTIVITY_ERRORS as exc:  # pragma: no cover - best effort on shutdown
            _logger.debug("Ignoring error while closing redis client: %s", exc)
