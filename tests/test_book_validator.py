"""
Bookshelf API — Book Validator Unit Tests
==========================================

What:  Field rules and isbn uniqueness for create/update payloads.
How:   Real SQLite session; the uniqueness rule needs rows to compare against.

What we test:
    ✅ Length boundaries (title 3, isbn exactly 13)
    ✅ Every offending field reported at once
    ✅ Non-string values rejected, not coerced
    ✅ Surrounding whitespace trimmed before length checks
    ✅ isbn uniqueness, and the exception for the book being updated
"""

import pytest

from bookshelf.exceptions import ValidationFailedError
from bookshelf.schemas.book import BookPayload
from bookshelf.services.book_store import book_store
from bookshelf.services.book_validator import BookValidator

from conftest import book_fields


class TestBookFieldRules:

    def setup_method(self):
        self.validator = BookValidator()

    @pytest.mark.asyncio
    async def test_valid_payload_passes(self, db_session):
        payload = await self.validator.validate(db_session, book_fields())
        assert payload.title == "Nouveau livre test"
        assert payload.isbn == "1111111111111"

    @pytest.mark.asyncio
    async def test_title_of_two_characters_rejected(self, db_session):
        with pytest.raises(ValidationFailedError) as exc_info:
            await self.validator.validate(db_session, book_fields(title="ab"))
        assert exc_info.value.errors == {
            "title": ["The title field must be at least 3 characters."]
        }

    @pytest.mark.asyncio
    async def test_title_of_three_characters_accepted(self, db_session):
        payload = await self.validator.validate(db_session, book_fields(title="abc"))
        assert payload.title == "abc"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("isbn", ["123456789012", "12345678901234"])
    async def test_isbn_must_be_exactly_thirteen_characters(self, db_session, isbn):
        with pytest.raises(ValidationFailedError) as exc_info:
            await self.validator.validate(db_session, book_fields(isbn=isbn))
        assert exc_info.value.errors == {"isbn": ["The isbn field must be 13 characters."]}

    @pytest.mark.asyncio
    async def test_all_missing_fields_reported(self, db_session):
        with pytest.raises(ValidationFailedError) as exc_info:
            await self.validator.validate(db_session, {})
        errors = exc_info.value.errors
        assert set(errors) == {"title", "author", "summary", "isbn"}
        assert errors["title"] == ["The title field is required."]
        assert exc_info.value.message == "The title field is required. (and 3 more errors)"

    @pytest.mark.asyncio
    async def test_null_field_is_reported_as_required(self, db_session):
        with pytest.raises(ValidationFailedError) as exc_info:
            await self.validator.validate(db_session, book_fields(author=None))
        assert exc_info.value.errors == {"author": ["The author field is required."]}

    @pytest.mark.asyncio
    async def test_numeric_isbn_is_not_coerced(self, db_session):
        with pytest.raises(ValidationFailedError) as exc_info:
            await self.validator.validate(db_session, book_fields(isbn=1234567890123))
        assert exc_info.value.errors == {"isbn": ["The isbn field must be a string."]}

    @pytest.mark.asyncio
    async def test_short_summary_message(self, db_session):
        with pytest.raises(ValidationFailedError) as exc_info:
            await self.validator.validate(db_session, book_fields(summary="Too short"))
        assert exc_info.value.errors == {
            "summary": ["The summary field must be at least 10 characters."]
        }

    @pytest.mark.asyncio
    async def test_author_longer_than_100_characters_rejected(self, db_session):
        with pytest.raises(ValidationFailedError) as exc_info:
            await self.validator.validate(db_session, book_fields(author="a" * 101))
        assert exc_info.value.errors == {
            "author": ["The author field must not be greater than 100 characters."]
        }

    @pytest.mark.asyncio
    async def test_whitespace_is_trimmed_before_length_check(self, db_session):
        payload = await self.validator.validate(db_session, book_fields(title="  Dune  "))
        assert payload.title == "Dune"

        with pytest.raises(ValidationFailedError):
            await self.validator.validate(db_session, book_fields(title="  ab  "))

    @pytest.mark.asyncio
    async def test_unknown_fields_are_ignored(self, db_session):
        payload = await self.validator.validate(db_session, book_fields(id=99, rating=5))
        assert "id" not in payload.model_dump()

    @pytest.mark.asyncio
    async def test_non_object_body_rejected(self, db_session):
        with pytest.raises(ValidationFailedError) as exc_info:
            await self.validator.validate(db_session, ["not", "an", "object"])
        assert "body" in exc_info.value.errors


class TestIsbnUniqueness:

    def setup_method(self):
        self.validator = BookValidator()

    @pytest.mark.asyncio
    async def test_isbn_used_by_another_book_rejected(self, db_session):
        await book_store.create(db_session, BookPayload(**book_fields()))

        with pytest.raises(ValidationFailedError) as exc_info:
            await self.validator.validate(db_session, book_fields(title="Another title"))
        assert exc_info.value.errors == {"isbn": ["The isbn has already been taken."]}

    @pytest.mark.asyncio
    async def test_book_may_keep_its_own_isbn(self, db_session):
        book = await book_store.create(db_session, BookPayload(**book_fields()))

        payload = await self.validator.validate(
            db_session, book_fields(title="Renamed"), exclude_id=book.id
        )
        assert payload.isbn == book.isbn

    @pytest.mark.asyncio
    async def test_taken_isbn_reported_alongside_other_errors(self, db_session):
        await book_store.create(db_session, BookPayload(**book_fields()))

        with pytest.raises(ValidationFailedError) as exc_info:
            await self.validator.validate(db_session, book_fields(title="ab"))
        assert set(exc_info.value.errors) == {"title", "isbn"}
