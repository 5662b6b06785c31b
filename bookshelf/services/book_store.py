"""
Bookshelf API — Book Store (Persistence)
=========================================

What:  Repository for Book rows: list, create, get, update, delete.
Why:   The service calls explicit operations with explicit results instead of
       mutating ORM objects and relying on dirty-tracking at commit time.
How:   Each method receives the request's AsyncSession. Mutations commit
       before returning, so "the store returned" means "the write is durable".

Uniqueness:
    `create` and `update` do not look for an existing isbn first. Two writers
    that both passed validation race at the unique index; the loser's
    IntegrityError is translated into UniqueConstraintError. A SELECT-then-
    INSERT check would leave a window between the two statements.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.exceptions import DatabaseError, NotFoundError, UniqueConstraintError
from bookshelf.models.book import Book, utcnow
from bookshelf.schemas.book import BookPayload

logger = logging.getLogger(__name__)


@dataclass
class BookPage:
    """One page of the catalog, ordered by id ascending."""

    items: List[Book]
    total: int
    page: int
    per_page: int
    last_page: int = field(init=False)

    def __post_init__(self) -> None:
        self.last_page = max(1, math.ceil(self.total / self.per_page))

    @property
    def first_position(self):
        """1-based position of the first item on this page, None when empty."""
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + 1

    @property
    def last_position(self):
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + len(self.items)


class BookStore:
    """
    Stateless repository; one shared instance serves every request.

    Error Handling Strategy:
        NotFoundError and UniqueConstraintError are part of the contract.
        Any other SQLAlchemy failure is logged with its traceback and wrapped
        in DatabaseError, whose message is safe to show to clients.
    """

    async def list(self, db: AsyncSession, page: int, per_page: int) -> BookPage:
        """
        Query plan:
            SELECT count(id) FROM books
            SELECT * FROM books ORDER BY id ASC LIMIT :per_page OFFSET :offset
        """
        try:
            total = (await db.execute(select(func.count(Book.id)))).scalar() or 0
            result = await db.execute(
                select(Book)
                .order_by(Book.id.asc())
                .offset((page - 1) * per_page)
                .limit(per_page)
            )
            items = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing books: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve books. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return BookPage(items=items, total=total, page=page, per_page=per_page)

    async def get_by_id(self, db: AsyncSession, book_id: int) -> Book:
        try:
            book = await db.get(Book, book_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching book %s: %s", book_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve the book. Please try again.",
                context={"book_id": book_id},
            )
        if book is None:
            raise NotFoundError(resource="book", resource_id=str(book_id))
        return book

    async def create(self, db: AsyncSession, payload: BookPayload) -> Book:
        book = Book(**payload.model_dump())
        db.add(book)
        await self._commit(db, action="create", isbn=payload.isbn)
        logger.info("Book %s created (isbn=%s)", book.id, book.isbn)
        return book

    async def update(self, db: AsyncSession, book_id: int, payload: BookPayload) -> Book:
        """Overwrites all four writable fields of an existing book."""
        book = await self.get_by_id(db, book_id)
        for name, value in payload.model_dump().items():
            setattr(book, name, value)
        book.updated_at = utcnow()
        await self._commit(db, action="update", book_id=book_id, isbn=payload.isbn)
        logger.info("Book %s updated", book_id)
        return book

    async def delete(self, db: AsyncSession, book_id: int) -> None:
        book = await self.get_by_id(db, book_id)
        await db.delete(book)
        await self._commit(db, action="delete", book_id=book_id)
        logger.info("Book %s deleted", book_id)

    async def _commit(self, db: AsyncSession, action: str, **context) -> None:
        """
        Flushes and commits the pending write.

        On IntegrityError the transaction is rolled back so the session stays
        usable; the only unique index on books is the isbn one.
        """
        try:
            await db.flush()
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning(
                "Book %s rejected by unique index: %s", action, context,
                extra={"db_error": str(e.orig)},
            )
            raise UniqueConstraintError(field="isbn", context=context)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error on book %s %s: %s", action, context, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the book. Please try again.",
                context={"action": action, **context},
            )


book_store = BookStore()
