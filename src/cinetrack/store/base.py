from __future__ import annotations

import time
import typing as t
from abc import ABC, abstractmethod

from ..errors import StoreError, StoreUnavailableError

Score = float
Member = str


class _SortedSet(dict):
    """member -> score"""


class _Hash(dict):
    """field -> value"""


class KeyValueStore(ABC):
    """Async interface over a remote expiring key-value store.

    Values, members and hash fields are strings. Implementations raise
    `StoreUnavailableError` when the store cannot be reached and `StoreError`
    for any other command failure; callers decide whether to degrade.
    """

    @abstractmethod
    def is_available(self) -> bool:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def ping(self) -> bool:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def get(self, key: str) -> t.Optional[str]:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: t.Optional[int] = None) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def delete(self, *keys: str) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def expire(self, key: str, seconds: int) -> bool:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def zadd(self, key: str, mapping: t.Mapping[Member, Score]) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def zrange(
        self, key: str, start: int, stop: int, withscores: bool = False
    ) -> t.List[t.Any]:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def zrangebyscore(self, key: str, min_score: Score, max_score: Score) -> t.List[Member]:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def zrem(self, key: str, *members: Member) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def zcard(self, key: str) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def sadd(self, key: str, *members: Member) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def srem(self, key: str, *members: Member) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def smembers(self, key: str) -> t.Set[Member]:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def hset(self, key: str, mapping: t.Mapping[str, str]) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def hgetall(self, key: str) -> t.Dict[str, str]:  # pragma: no cover - interface
        raise NotImplementedError

    async def close(self) -> None:
        return None


class InMemoryStore(KeyValueStore):
    """A process-local store for dev/test and for running without Redis.

    Mirrors the Redis semantics the cache and scheduler rely on, including
    key expiry (checked lazily against ``clock``) and score-then-member
    ordering of sorted sets. ``set_available(False)`` makes every command
    raise `StoreUnavailableError`.
    """

    def __init__(self, clock: t.Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._data: t.Dict[str, t.Any] = {}
        self._expires_at: t.Dict[str, float] = {}
        self._available = True

    def set_available(self, available: bool) -> None:
        self._available = available

    def is_available(self) -> bool:
        return self._available

    def _check(self) -> None:
        if not self._available:
            raise StoreUnavailableError("in-memory store marked unavailable")

    def _purge(self, key: str) -> None:
        expires_at = self._expires_at.get(key)
        if expires_at is not None and expires_at <= self._clock():
            self._data.pop(key, None)
            self._expires_at.pop(key, None)

    def _lookup(self, key: str, kind: type) -> t.Any:
        self._check()
        self._purge(key)
        value = self._data.get(key)
        if value is not None and not isinstance(value, kind):
            raise StoreError(f"WRONGTYPE operation against key {key!r}")
        return value

    def _create(self, key: str, kind: type) -> t.Any:
        value = self._lookup(key, kind)
        if value is None:
            value = kind()
            self._data[key] = value
        return value

    def _drop_if_empty(self, key: str) -> None:
        if not self._data.get(key):
            self._data.pop(key, None)
            self._expires_at.pop(key, None)

    def ttl(self, key: str) -> t.Optional[float]:
        """Remaining lifetime of ``key`` in seconds, None when it never expires."""
        self._purge(key)
        expires_at = self._expires_at.get(key)
        if expires_at is None:
            return None
        return expires_at - self._clock()

    async def ping(self) -> bool:
        self._check()
        return True

    async def get(self, key: str) -> t.Optional[str]:
        return self._lookup(key, str)

    async def set(self, key: str, value: str, ttl_seconds: t.Optional[int] = None) -> None:
        self._check()
        self._data[key] = value
        if ttl_seconds is None:
            self._expires_at.pop(key, None)
        else:
            self._expires_at[key] = self._clock() + ttl_seconds

    async def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            self._purge(key)
            if self._data.pop(key, None) is not None:
                removed += 1
            self._expires_at.pop(key, None)
        return removed

    async def expire(self, key: str, seconds: int) -> bool:
        self._check()
        self._purge(key)
        if key not in self._data:
            return False
        self._expires_at[key] = self._clock() + seconds
        return True

    async def zadd(self, key: str, mapping: t.Mapping[Member, Score]) -> int:
        zset = self._create(key, _SortedSet)
        added = sum(1 for member in mapping if member not in zset)
        for member, score in mapping.items():
            zset[member] = float(score)
        return added

    def _ordered(self, key: str) -> t.List[t.Tuple[Member, Score]]:
        zset = self._lookup(key, _SortedSet) or {}
        return sorted(zset.items(), key=lambda item: (item[1], item[0]))

    async def zrange(self, key: str, start: int, stop: int, withscores: bool = False) -> t.List[t.Any]:
        ordered = self._ordered(key)
        size = len(ordered)
        if start < 0:
            start = max(size + start, 0)
        if stop < 0:
            stop = size + stop
        selected = ordered[start : stop + 1] if start <= stop else []
        if withscores:
            return list(selected)
        return [member for member, _ in selected]

    async def zrangebyscore(self, key: str, min_score: Score, max_score: Score) -> t.List[Member]:
        return [member for member, score in self._ordered(key) if min_score <= score <= max_score]

    async def zrem(self, key: str, *members: Member) -> int:
        zset = self._lookup(key, _SortedSet)
        if not zset:
            return 0
        removed = 0
        for member in members:
            if zset.pop(member, None) is not None:
                removed += 1
        self._drop_if_empty(key)
        return removed

    async def zcard(self, key: str) -> int:
        return len(self._lookup(key, _SortedSet) or {})

    async def sadd(self, key: str, *members: Member) -> int:
        members_set = self._create(key, set)
        before = len(members_set)
        members_set.update(members)
        return len(members_set) - before

    async def srem(self, key: str, *members: Member) -> int:
        members_set = self._lookup(key, set)
        if not members_set:
            return 0
        before = len(members_set)
        members_set.difference_update(members)
        removed = before - len(members_set)
        self._drop_if_empty(key)
        return removed

    async def smembers(self, key: str) -> t.Set[Member]:
        return set(self._lookup(key, set) or ())

    async def hset(self, key: str, mapping: t.Mapping[str, str]) -> int:
        hash_ = self._create(key, _Hash)
        added = sum(1 for field in mapping if field not in hash_)
        hash_.update({field: str(value) for field, value in mapping.items()})
        return added

    async def hgetall(self, key: str) -> t.Dict[str, str]:
        return dict(self._lookup(key, _Hash) or {})
