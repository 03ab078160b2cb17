"""Unit tests for InMemoryStore."""

import pytest

from cinetrack.errors import StoreError, StoreUnavailableError


@pytest.mark.asyncio
class TestInMemoryStoreValues:
    """Plain key/value behaviour with expiry."""

    async def test_get_missing_returns_none(self, memory_store):
        assert await memory_store.get("missing") is None

    async def test_set_and_get(self, memory_store):
        await memory_store.set("k", "v", 60)
        assert await memory_store.get("k") == "v"

    async def test_value_expires_after_ttl(self, memory_store, clock):
        await memory_store.set("k", "v", 60)
        clock.advance(59)
        assert await memory_store.get("k") == "v"
        clock.advance(1)
        assert await memory_store.get("k") is None

    async def test_set_without_ttl_never_expires(self, memory_store, clock):
        await memory_store.set("k", "v")
        clock.advance(10**9)
        assert await memory_store.get("k") == "v"
        assert memory_store.ttl("k") is None

    async def test_delete_counts_existing_keys(self, memory_store):
        await memory_store.set("a", "1", 60)
        await memory_store.set("b", "2", 60)
        assert await memory_store.delete("a", "b", "c") == 2
        assert await memory_store.get("a") is None

    async def test_expire_missing_key(self, memory_store):
        assert await memory_store.expire("missing", 10) is False

    async def test_expire_sets_ttl(self, memory_store, clock):
        await memory_store.sadd("s", "x")
        assert await memory_store.expire("s", 10) is True
        assert memory_store.ttl("s") == pytest.approx(10)
        clock.advance(10)
        assert await memory_store.smembers("s") == set()

    async def test_wrong_type_raises_store_error(self, memory_store):
        await memory_store.set("k", "v", 60)
        with pytest.raises(StoreError):
            await memory_store.zadd("k", {"m": 1})


@pytest.mark.asyncio
class TestInMemoryStoreSortedSets:
    """Sorted-set semantics the evictor and scheduler depend on."""

    async def test_zadd_counts_new_members_only(self, memory_store):
        assert await memory_store.zadd("z", {"a": 1, "b": 2}) == 2
        assert await memory_store.zadd("z", {"a": 5, "c": 3}) == 1
        assert await memory_store.zcard("z") == 3

    async def test_zrange_orders_by_score_then_member(self, memory_store):
        await memory_store.zadd("z", {"c": 2, "b": 1, "a": 1})
        assert await memory_store.zrange("z", 0, -1) == ["a", "b", "c"]

    async def test_zrange_inclusive_stop_and_negative_indices(self, memory_store):
        await memory_store.zadd("z", {"a": 1, "b": 2, "c": 3, "d": 4})
        assert await memory_store.zrange("z", 0, 1) == ["a", "b"]
        assert await memory_store.zrange("z", -2, -1) == ["c", "d"]
        assert await memory_store.zrange("z", 3, 1) == []

    async def test_zrange_withscores(self, memory_store):
        await memory_store.zadd("z", {"a": 1, "b": 2})
        assert await memory_store.zrange("z", 0, -1, withscores=True) == [("a", 1.0), ("b", 2.0)]

    async def test_zrangebyscore_is_inclusive(self, memory_store):
        await memory_store.zadd("z", {"a": 1, "b": 2, "c": 3})
        assert await memory_store.zrangebyscore("z", 0, 2) == ["a", "b"]

    async def test_zrem_drops_empty_key(self, memory_store):
        await memory_store.zadd("z", {"a": 1})
        assert await memory_store.zrem("z", "a", "missing") == 1
        assert await memory_store.zcard("z") == 0
        assert await memory_store.expire("z", 10) is False


@pytest.mark.asyncio
class TestInMemoryStoreSetsAndHashes:
    async def test_sadd_srem_smembers(self, memory_store):
        assert await memory_store.sadd("s", "1", "2", "2") == 2
        assert await memory_store.srem("s", "1") == 1
        assert await memory_store.smembers("s") == {"2"}

    async def test_hset_and_hgetall(self, memory_store):
        await memory_store.hset("h", {"name": "Show", "nextEp": "S1E2"})
        assert await memory_store.hgetall("h") == {"name": "Show", "nextEp": "S1E2"}

    async def test_hgetall_missing_is_empty(self, memory_store):
        assert await memory_store.hgetall("missing") == {}


@pytest.mark.asyncio
class TestInMemoryStoreAvailability:
    async def test_unavailable_store_raises(self, memory_store):
        memory_store.set_available(False)
        assert memory_store.is_available() is False
        with pytest.raises(StoreUnavailableError):
            await memory_store.get("k")
        with pytest.raises(StoreUnavailableError):
            await memory_store.ping()

    async def test_recovers_when_marked_available(self, memory_store):
        memory_store.set_available(False)
        memory_store.set_available(True)
        assert await memory_store.ping() is True
