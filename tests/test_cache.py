import asyncio

import pytest

from raws_server.services.cache import TTLCache


@pytest.fixture
def cache(clock):
    return TTLCache(max_size=3, default_ttl=300, clock=clock)


class TestGetSet:
    def test_round_trip(self, cache):
        cache.set("current:MCRC2", {"temperature": 88.2})

        assert cache.get("current:MCRC2") == {"temperature": 88.2}

    def test_miss(self, cache):
        assert cache.get("missing") is None

    def test_set_is_idempotent_update(self, cache):
        cache.set("a", 1)
        cache.set("a", 2)

        assert cache.get("a") == 2
        assert len(cache) == 1


class TestExpiry:
    def test_live_before_ttl(self, cache, clock):
        cache.set("a", 1, ttl=60)
        clock.advance(59)

        assert cache.get("a") == 1

    def test_expired_entry_is_a_miss_and_removed(self, cache, clock):
        cache.set("a", 1, ttl=60)
        clock.advance(60)

        assert cache.get("a") is None
        assert len(cache) == 0

    def test_default_ttl(self, cache, clock):
        cache.set("a", 1)
        clock.advance(299)
        assert cache.has("a")

        clock.advance(1)
        assert not cache.has("a")

    def test_purge_expired(self, cache, clock):
        cache.set("short", 1, ttl=10)
        cache.set("long", 2, ttl=1000)
        clock.advance(11)

        assert cache.purge_expired() == 1
        assert cache.has("long")
        assert len(cache) == 1


class TestEviction:
    def test_evicts_least_recently_accessed(self, cache, clock):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        cache.get("a")

        cache.set("d", 4)

        assert cache.has("a")
        assert not cache.has("b")
        assert cache.has("c")
        assert cache.has("d")

    def test_update_at_capacity_does_not_evict(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)

        cache.set("b", 20)

        assert len(cache) == 3
        assert cache.get("a") == 1

    def test_never_exceeds_max_size(self, cache):
        for index in range(10):
            cache.set(f"key{index}", index)

        assert len(cache) == 3


class TestManagement:
    def test_delete(self, cache):
        cache.set("a", 1)

        assert cache.delete("a") is True
        assert cache.delete("a") is False

    def test_clear(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()

        assert len(cache) == 0

    def test_stats(self, cache, clock):
        cache.set("a", 1, ttl=10)
        cache.set("b", 2, ttl=1000)
        cache.get("b")
        cache.get("b")
        clock.advance(20)

        stats = cache.stats()

        assert stats == {"size": 2, "max_size": 3, "hits": 2, "active": 1, "expired": 1}


@pytest.mark.asyncio
async def test_run_cleanup_sweeps_until_cancelled(clock):
    cache = TTLCache(max_size=10, default_ttl=1, clock=clock)
    cache.set("a", 1)
    clock.advance(5)

    task = asyncio.create_task(cache.run_cleanup(0.01))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(cache) == 0
