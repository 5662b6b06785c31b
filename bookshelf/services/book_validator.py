"""
Bookshelf API — Book Validator
===============================

What:  Field-level rules for create/update payloads plus the isbn uniqueness rule.
Why:   A request that breaks a rule must be rejected, with every offending
       field reported, before anything is written.
How:   BookPayload (Pydantic, strict) checks presence, type and length. When
       the isbn itself is well-formed, one SELECT checks it is not already
       used by another book.

Rules:
    | field   | constraints                                            |
    |---------|--------------------------------------------------------|
    | title   | required string, 3–255 characters                      |
    | author  | required string, 3–100 characters                      |
    | summary | required string, 10–500 characters                     |
    | isbn    | required string, exactly 13 characters, unique         |

The uniqueness SELECT gives clients a friendly error in the common case.
It is not what guarantees uniqueness: a concurrent writer can still take the
isbn after this check, and the store's unique index settles that race.
"""

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.exceptions import ValidationFailedError
from bookshelf.models.book import Book
from bookshelf.schemas.book import BookPayload
from bookshelf.validation import field_errors

logger = logging.getLogger(__name__)


class BookValidator:
    """Validates raw book field maps. Never writes to the database."""

    async def validate(
        self,
        db: AsyncSession,
        fields: Mapping[str, Any],
        exclude_id: Optional[int] = None,
    ) -> BookPayload:
        """
        Args:
            db:          Session used for the uniqueness lookup
            fields:      Raw request body
            exclude_id:  On update, the book being updated (may keep its isbn)

        Returns:
            Normalized BookPayload

        Raises:
            ValidationFailedError: with one message list per offending field
        """
        if not isinstance(fields, Mapping):
            raise ValidationFailedError(errors={"body": ["The request body must be a JSON object."]})

        try:
            payload = BookPayload.model_validate(dict(fields))
        except PydanticValidationError as e:
            errors = field_errors(e.errors())
            if "isbn" not in errors and await self._isbn_taken(db, fields.get("isbn"), exclude_id):
                errors["isbn"] = ["The isbn has already been taken."]
            logger.info("Book payload rejected: %s", sorted(errors))
            raise ValidationFailedError(errors=errors)

        if await self._isbn_taken(db, payload.isbn, exclude_id):
            logger.info("Book payload rejected: isbn %s already taken", payload.isbn)
            raise ValidationFailedError(errors={"isbn": ["The isbn has already been taken."]})

        return payload

    async def _isbn_taken(
        self, db: AsyncSession, isbn: Any, exclude_id: Optional[int]
    ) -> bool:
        if not isinstance(isbn, str):
            return False
        query = select(Book.id).where(Book.isbn == isbn.strip())
        if exclude_id is not None:
            query = query.where(Book.id != exclude_id)
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None


book_validator = BookValidator()
