"""
Bookshelf API — Book Store Tests
=================================

What:  Persistence behavior of BookStore against a real SQLite database.

What we test:
    ✅ Ids are assigned on create and never reused after a delete
    ✅ The unique isbn index is reported as UniqueConstraintError
    ✅ Pages are ordered by id with correct totals and positions
    ✅ Unknown ids raise NotFoundError
"""

import pytest

from bookshelf.exceptions import NotFoundError, UniqueConstraintError
from bookshelf.schemas.book import BookPayload
from bookshelf.services.book_store import BookPage, BookStore

from conftest import book_fields


def payload(n: int) -> BookPayload:
    return BookPayload(**book_fields(title=f"Book number {n}", isbn=f"978000000000{n}"))


class TestBookStoreWrites:

    def setup_method(self):
        self.store = BookStore()

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamps(self, db_session):
        book = await self.store.create(db_session, payload(1))

        assert book.id is not None
        assert book.created_at is not None
        fetched = await self.store.get_by_id(db_session, book.id)
        assert fetched.isbn == "9780000000001"

    @pytest.mark.asyncio
    async def test_duplicate_isbn_rejected_by_index(self, db_session):
        await self.store.create(db_session, payload(1))

        with pytest.raises(UniqueConstraintError) as exc_info:
            await self.store.create(db_session, payload(1))
        assert exc_info.value.errors == {"isbn": ["The isbn has already been taken."]}

        # Session is still usable after the rollback
        page = await self.store.list(db_session, page=1, per_page=10)
        assert page.total == 1

    @pytest.mark.asyncio
    async def test_ids_are_not_reused_after_delete(self, db_session):
        first = await self.store.create(db_session, payload(1))
        second = await self.store.create(db_session, payload(2))
        second_id = second.id

        await self.store.delete(db_session, second_id)
        third = await self.store.create(db_session, payload(3))

        assert first.id < second_id < third.id

    @pytest.mark.asyncio
    async def test_update_overwrites_fields(self, db_session):
        book = await self.store.create(db_session, payload(1))

        updated = await self.store.update(
            db_session, book.id, BookPayload(**book_fields(title="New title", isbn="9780000000001"))
        )

        assert updated.id == book.id
        assert updated.title == "New title"
        assert updated.updated_at >= updated.created_at

    @pytest.mark.asyncio
    async def test_update_to_taken_isbn_rejected(self, db_session):
        await self.store.create(db_session, payload(1))
        second = await self.store.create(db_session, payload(2))

        with pytest.raises(UniqueConstraintError):
            await self.store.update(db_session, second.id, payload(1))

    @pytest.mark.asyncio
    async def test_unknown_id_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            await self.store.get_by_id(db_session, 999)
        with pytest.raises(NotFoundError):
            await self.store.delete(db_session, 999)


class TestBookStoreList:

    def setup_method(self):
        self.store = BookStore()

    @pytest.mark.asyncio
    async def test_pages_are_ordered_by_id(self, db_session):
        for n in range(1, 7):
            await self.store.create(db_session, payload(n))

        page = await self.store.list(db_session, page=2, per_page=2)

        assert [book.isbn for book in page.items] == ["9780000000003", "9780000000004"]
        assert page.total == 6
        assert page.last_page == 3
        assert page.first_position == 3
        assert page.last_position == 4

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, db_session):
        await self.store.create(db_session, payload(1))

        page = await self.store.list(db_session, page=5, per_page=2)

        assert page.items == []
        assert page.total == 1
        assert page.first_position is None
        assert page.last_position is None

    def test_empty_catalog_has_one_page(self):
        assert BookPage(items=[], total=0, page=1, per_page=15).last_page == 1
