"""
Bookshelf API — Book Cache Backends
====================================

What:  Concrete BookCache implementations and the factory that picks one.
Who:   `build_book_cache()` is called once when the dependency module loads;
       the resulting instance is shared by every request.

Backends:
    InMemoryBookCache  — dict + monotonic clock. Per process; correct for a
                         single worker, and what the test suite uses.
    RedisBookCache     — SET key value EX ttl / GET / DEL on redis.asyncio.
                         Shared across workers; Redis expires entries itself.
    NullBookCache      — no storage; every show() hits the database.
"""

import logging
import time
from typing import Dict, Optional, Tuple

from redis.exceptions import RedisError

from bookshelf.config import Settings
from bookshelf.exceptions import CacheUnavailableError
from bookshelf.services.cache_base import BookCache

logger = logging.getLogger(__name__)


class InMemoryBookCache(BookCache):
    """
    Process-local cache.

    Thread Safety:
        Every operation is a plain dict access with no await in between, so
        it is atomic with respect to other coroutines on the event loop.
        NOT shared between worker processes; use Redis for that.

    Expiry:
        An expired entry is dropped when its key is read, and every
        SWEEP_EVERY writes all expired entries are dropped.
    """

    backend_name = "memory"

    SWEEP_EVERY = 100

    def __init__(self, ttl: int = 3600, prefix: str = "book:"):
        super().__init__(ttl=ttl, prefix=prefix)
        # key → (expires_at on the monotonic clock, JSON snapshot)
        self._entries: Dict[str, Tuple[float, str]] = {}
        self._writes = 0

    async def _read(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if time.monotonic() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    async def _write(self, key: str, value: str, ttl: int) -> None:
        now = time.monotonic()
        self._entries[key] = (now + ttl, value)

        self._writes += 1
        if self._writes % self.SWEEP_EVERY == 0:
            self._purge_expired(now)

    async def _delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def _purge_expired(self, now: float) -> None:
        """Drops every entry whose expiry has passed."""
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

        if expired:
            logger.debug("Purged %d expired book cache entries", len(expired))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RedisBookCache(BookCache):
    """
    Redis-backed cache.

    Failure handling:
        GET error  → logged, treated as a miss (reader goes to the database)
        SET error  → logged, ignored (the entry simply is not cached)
        DEL error  → CacheUnavailableError; the write is aborted before the
                     database is touched, or reported as failed after it
    """

    backend_name = "redis"

    def __init__(self, client, ttl: int = 3600, prefix: str = "book:"):
        super().__init__(ttl=ttl, prefix=prefix)
        self._client = client

    @classmethod
    def from_url(cls, url: str, ttl: int = 3600, prefix: str = "book:") -> "RedisBookCache":
        import redis.asyncio as redis_async

        client = redis_async.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=2,
            socket_connect_timeout=2,
            health_check_interval=30,
        )
        logger.info("Redis book cache configured (ttl=%ds, prefix=%r)", ttl, prefix)
        return cls(client, ttl=ttl, prefix=prefix)

    async def _read(self, key: str) -> Optional[str]:
        try:
            return await self._client.get(key)
        except RedisError as e:
            logger.warning("Redis GET %s failed, reading from database: %s", key, str(e))
            return None

    async def _write(self, key: str, value: str, ttl: int) -> None:
        try:
            await self._client.set(key, value, ex=ttl)
        except RedisError as e:
            logger.warning("Redis SET %s failed, entry not cached: %s", key, str(e))

    async def _delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except RedisError as e:
            logger.error("Redis DEL %s failed: %s", key, str(e))
            raise CacheUnavailableError(context={"key": key, "error": type(e).__name__})

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        await self._client.aclose()


class NullBookCache(BookCache):
    """Caching disabled: reads always load, writes and deletes do nothing."""

    backend_name = "none"

    async def _read(self, key: str) -> Optional[str]:
        return None

    async def _write(self, key: str, value: str, ttl: int) -> None:
        return None

    async def _delete(self, key: str) -> None:
        return None


def build_book_cache(settings: Settings) -> BookCache:
    """Creates the cache backend selected by CACHE_BACKEND."""
    ttl = settings.book_cache_ttl
    prefix = settings.book_cache_prefix

    if settings.cache_backend == "redis":
        return RedisBookCache.from_url(settings.redis_url, ttl=ttl, prefix=prefix)
    if settings.cache_backend == "none":
        logger.info("Book cache disabled")
        return NullBookCache(ttl=ttl, prefix=prefix)
    return InMemoryBookCache(ttl=ttl, prefix=prefix)
