"""
Bookshelf API — Book Service (Business Logic Orchestrator)
===========================================================

What:  Orchestrates validator → store → cache for every Book operation and
       shapes the results.
Why:   Keeps the consistency rules between the database and the read-through
       cache in one place, independent of HTTP concerns.
Who:   Called by the /books route handlers.

Operations:
    index    Store.list → shape page                 (list pages are never cached)
    show     Cache.get_or_load(id, Store.get_by_id) → shape
    create   Validator → Store.create → shape
    update   Validator(exclude id) → Cache.invalidate → Store.update
             → Cache.invalidate → shape
    destroy  Cache.invalidate → Store.delete → Cache.invalidate

Cache Consistency:
    A show() that starts after update()/destroy() returned must not see the
    old row. The entry is removed before the store is touched, so no reader
    can be served the old snapshot once the write is visible. A reader that
    slipped in between that first invalidation and the commit may have read
    the old row from the database and cached it; the second invalidation,
    after the commit, removes that entry too. The price is a cache miss
    right after each write.

    `update` and `destroy` receive a Book already resolved by the HTTP layer
    (unknown id → 404 before the service runs).
"""

import logging
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.models.book import Book
from bookshelf.schemas.book import BookCollection, BookEnvelope, BookSnapshot
from bookshelf.services.book_resource import BookUrls, to_collection, to_resource
from bookshelf.services.book_store import BookStore
from bookshelf.services.book_validator import BookValidator
from bookshelf.services.cache_base import BookCache

logger = logging.getLogger(__name__)


class BookService:
    """
    Stateless orchestrator; collaborators are injected so tests can swap them.

    Error Handling Strategy:
        ValidationFailedError  — raised by the validator before any write
        UniqueConstraintError  — raised by the store when it loses an isbn race
        NotFoundError          — raised by the store/loader, passed through unchanged
        CacheUnavailableError  — raised when an invalidation cannot be confirmed
    """

    def __init__(self, store: BookStore, validator: BookValidator, cache: BookCache):
        self.store = store
        self.validator = validator
        self.cache = cache

    async def index(
        self, db: AsyncSession, page: int, per_page: int, urls: BookUrls
    ) -> BookCollection:
        book_page = await self.store.list(db, page=page, per_page=per_page)
        return to_collection(book_page, urls)

    async def show(self, db: AsyncSession, book_id: int, urls: BookUrls) -> BookEnvelope:
        async def load(key: int) -> BookSnapshot:
            book = await self.store.get_by_id(db, key)
            return BookSnapshot.model_validate(book)

        snapshot = await self.cache.get_or_load(book_id, load)
        return BookEnvelope(data=to_resource(snapshot, urls))

    async def create(
        self, db: AsyncSession, fields: Mapping[str, Any], urls: BookUrls
    ) -> BookEnvelope:
        payload = await self.validator.validate(db, fields)
        book = await self.store.create(db, payload)
        return BookEnvelope(data=to_resource(book, urls))

    async def update(
        self, db: AsyncSession, book: Book, fields: Mapping[str, Any], urls: BookUrls
    ) -> BookEnvelope:
        book_id = book.id
        payload = await self.validator.validate(db, fields, exclude_id=book_id)

        await self.cache.invalidate(book_id)
        updated = await self.store.update(db, book_id, payload)
        await self.cache.invalidate(book_id)

        return BookEnvelope(data=to_resource(updated, urls))

    async def destroy(self, db: AsyncSession, book: Book) -> None:
        book_id = book.id

        await self.cache.invalidate(book_id)
        await self.store.delete(db, book_id)
        await self.cache.invalidate(book_id)
