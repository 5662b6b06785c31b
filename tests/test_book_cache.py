"""
Bookshelf API — Book Cache Unit Tests
======================================

What:  Read-through behavior of every cache backend.
How:   The in-memory backend is exercised directly; Redis is replaced by an
       AsyncMock client (no Redis server needed).

What we test:
    ✅ Loader runs once per key until the entry expires or is invalidated
    ✅ Expired entries that are never read again are swept on write
    ✅ Loader exceptions propagate and nothing is cached
    ✅ Redis read/write failures degrade to a database read
    ✅ Redis delete failures raise CacheUnavailableError
"""

import time
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from bookshelf.config import Settings
from bookshelf.exceptions import CacheUnavailableError, NotFoundError
from bookshelf.schemas.book import BookSnapshot
from bookshelf.services.book_cache import (
    InMemoryBookCache,
    NullBookCache,
    RedisBookCache,
    build_book_cache,
)


def make_snapshot(book_id=1, title="Dune"):
    return BookSnapshot(
        id=book_id,
        title=title,
        author="Frank Herbert",
        summary="Desert planet politics.",
        isbn="9780441172719",
    )


def counting_loader(snapshot):
    loader = AsyncMock(return_value=snapshot)
    return loader


class TestInMemoryBookCache:

    def setup_method(self):
        self.cache = InMemoryBookCache(ttl=3600, prefix="book:")

    @pytest.mark.asyncio
    async def test_second_read_is_served_from_cache(self):
        loader = counting_loader(make_snapshot())

        first = await self.cache.get_or_load(1, loader)
        second = await self.cache.get_or_load(1, loader)

        assert first == second
        loader.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_keys_are_per_book(self):
        await self.cache.get_or_load(1, counting_loader(make_snapshot(1)))
        await self.cache.get_or_load(2, counting_loader(make_snapshot(2)))
        assert len(self.cache) == 2
        assert self.cache.key(2) == "book:2"

    @pytest.mark.asyncio
    async def test_expired_entry_is_reloaded(self):
        loader = counting_loader(make_snapshot())
        await self.cache.get_or_load(1, loader)

        # Age the entry past its TTL
        _, value = self.cache._entries["book:1"]
        self.cache._entries["book:1"] = (time.monotonic() - 1, value)

        await self.cache.get_or_load(1, loader)
        assert loader.await_count == 2

    @pytest.mark.asyncio
    async def test_expired_entries_are_swept_on_write(self):
        self.cache.SWEEP_EVERY = 2
        await self.cache.get_or_load(1, counting_loader(make_snapshot(1)))

        # Book 1 expires and is never read again
        _, value = self.cache._entries["book:1"]
        self.cache._entries["book:1"] = (time.monotonic() - 1, value)

        await self.cache.get_or_load(2, counting_loader(make_snapshot(2)))

        assert "book:1" not in self.cache._entries
        assert "book:2" in self.cache._entries
        assert len(self.cache) == 1

    @pytest.mark.asyncio
    async def test_invalidate_forces_reload(self):
        loader = counting_loader(make_snapshot())
        await self.cache.get_or_load(1, loader)

        await self.cache.invalidate(1)
        await self.cache.get_or_load(1, loader)

        assert loader.await_count == 2

    @pytest.mark.asyncio
    async def test_invalidate_absent_key_is_noop(self):
        await self.cache.invalidate(42)
        assert len(self.cache) == 0

    @pytest.mark.asyncio
    async def test_loader_error_propagates_and_is_not_cached(self):
        loader = AsyncMock(side_effect=NotFoundError(resource="book", resource_id="7"))

        with pytest.raises(NotFoundError):
            await self.cache.get_or_load(7, loader)
        assert len(self.cache) == 0

    @pytest.mark.asyncio
    async def test_clear_drops_everything(self):
        await self.cache.get_or_load(1, counting_loader(make_snapshot()))
        self.cache.clear()
        assert len(self.cache) == 0


class TestRedisBookCache:

    def setup_method(self):
        self.client = AsyncMock()
        self.cache = RedisBookCache(self.client, ttl=3600, prefix="book:")

    @pytest.mark.asyncio
    async def test_miss_loads_and_sets_with_expiry(self):
        self.client.get.return_value = None
        snapshot = make_snapshot()

        result = await self.cache.get_or_load(1, counting_loader(snapshot))

        assert result == snapshot
        self.client.get.assert_awaited_once_with("book:1")
        self.client.set.assert_awaited_once_with("book:1", snapshot.model_dump_json(), ex=3600)

    @pytest.mark.asyncio
    async def test_hit_skips_loader(self):
        snapshot = make_snapshot(title="Cached")
        self.client.get.return_value = snapshot.model_dump_json()
        loader = counting_loader(make_snapshot(title="Fresh"))

        result = await self.cache.get_or_load(1, loader)

        assert result.title == "Cached"
        loader.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_failure_falls_back_to_loader(self):
        self.client.get.side_effect = RedisConnectionError("down")
        self.client.set.side_effect = RedisConnectionError("down")
        loader = counting_loader(make_snapshot())

        result = await self.cache.get_or_load(1, loader)

        assert result.id == 1
        loader.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalidate_deletes_key(self):
        await self.cache.invalidate(5)
        self.client.delete.assert_awaited_once_with("book:5")

    @pytest.mark.asyncio
    async def test_delete_failure_raises_cache_unavailable(self):
        self.client.delete.side_effect = RedisConnectionError("down")

        with pytest.raises(CacheUnavailableError):
            await self.cache.invalidate(5)

    @pytest.mark.asyncio
    async def test_ping_reports_unreachable_server(self):
        self.client.ping.side_effect = RedisConnectionError("down")
        assert await self.cache.ping() is False

    @pytest.mark.asyncio
    async def test_close_releases_client(self):
        await self.cache.close()
        self.client.aclose.assert_awaited_once()


class TestNullBookCache:

    @pytest.mark.asyncio
    async def test_always_loads(self):
        cache = NullBookCache()
        loader = counting_loader(make_snapshot())

        await cache.get_or_load(1, loader)
        await cache.get_or_load(1, loader)
        await cache.invalidate(1)

        assert loader.await_count == 2


class TestBuildBookCache:

    def test_memory_backend(self):
        cache = build_book_cache(Settings(cache_backend="memory", book_cache_ttl=60))
        assert isinstance(cache, InMemoryBookCache)
        assert cache.ttl == 60

    def test_disabled_backend(self):
        assert isinstance(build_book_cache(Settings(cache_backend="none")), NullBookCache)

    def test_redis_backend(self):
        cache = build_book_cache(
            Settings(cache_backend="redis", redis_url="redis://localhost:6379/0")
        )
        assert isinstance(cache, RedisBookCache)

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValueError):
            Settings(cache_backend="memcached")
