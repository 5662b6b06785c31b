"""
Bookshelf API — Abstract Book Cache Interface
==============================================

What:  Abstract base class defining the read-through cache used by `show`.
Why:   The service depends on this contract, not on a backend, so the cache
       can be swapped (memory → Redis), disabled, or faked in tests without
       touching the service.
How:   Concrete backends implement three raw primitives (read, write with
       TTL, delete). The read-through logic lives here, once.

Contract:
    get_or_load(book_id, loader)
        Cached snapshot if present and unexpired; otherwise awaits
        loader(book_id), stores the result for `ttl` seconds and returns it.
        Exceptions raised by the loader propagate and nothing is cached.
    invalidate(book_id)
        Removes any entry for book_id; no-op when absent.

    The cache is an optimization only: a flush, a miss or a disabled backend
    changes latency, never the data a reader sees.
"""

import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from bookshelf.schemas.book import BookSnapshot

logger = logging.getLogger(__name__)

BookLoader = Callable[[int], Awaitable[BookSnapshot]]


class BookCache(ABC):
    """
    Read-through cache of book snapshots keyed by book id.

    Attributes:
        ttl:     Seconds an entry stays valid after insertion
        prefix:  Key prefix; the full key is f"{prefix}{book_id}"
    """

    backend_name = "abstract"

    def __init__(self, ttl: int = 3600, prefix: str = "book:"):
        self.ttl = ttl
        self.prefix = prefix

    def key(self, book_id: int) -> str:
        return f"{self.prefix}{book_id}"

    async def get_or_load(self, book_id: int, loader: BookLoader) -> BookSnapshot:
        key = self.key(book_id)
        raw = await self._read(key)
        if raw is not None:
            logger.debug("Book cache hit: %s", key)
            return BookSnapshot.model_validate_json(raw)

        logger.debug("Book cache miss: %s", key)
        snapshot = await loader(book_id)
        await self._write(key, snapshot.model_dump_json(), self.ttl)
        return snapshot

    async def invalidate(self, book_id: int) -> None:
        await self._delete(self.key(book_id))
        logger.debug("Book cache entry invalidated: %s", self.key(book_id))

    async def ping(self) -> bool:
        """Whether the backend is reachable. Used by the health check."""
        return True

    async def close(self) -> None:
        """Releases backend connections. Called on application shutdown."""
        return None

    @abstractmethod
    async def _read(self, key: str) -> Optional[str]:
        """
        Return the stored JSON for key, or None when absent or expired.

        Backends that can fail (network stores) should log and return None
        rather than raise: a broken cache must degrade to a miss.
        """
        raise NotImplementedError

    @abstractmethod
    async def _write(self, key: str, value: str, ttl: int) -> None:
        """Store value under key for ttl seconds, replacing any previous value."""
        raise NotImplementedError

    @abstractmethod
    async def _delete(self, key: str) -> None:
        """
        Remove key. Must raise CacheUnavailableError if removal cannot be
        confirmed, so a write never succeeds over a surviving stale entry.
        """
        raise NotImplementedError
