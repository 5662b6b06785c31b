"""
Bookshelf API — Book Request/Response Schemas
==============================================

What:  Pydantic models defining the Book API contract.
Why:   Strict input validation, a cacheable snapshot format, and the shaped
       views returned to clients (OpenAPI docs are generated from these).

Three shapes of a book:
    BookPayload   — the four writable fields, validated and normalized
    BookSnapshot  — the stored row, as kept in the read-through cache
    BookResource  — the client view: upper-cased author plus `_links`
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from bookshelf.models.book import (
    AUTHOR_MAX_LENGTH,
    ISBN_LENGTH,
    SUMMARY_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)


# ══════════════════════════════════════════════════════════════════════════
# Input
# ══════════════════════════════════════════════════════════════════════════


class BookPayload(BaseModel):
    """
    What:  The writable fields of a book, as accepted by create and update.
    How:   Strict mode rejects non-string values (a numeric isbn is an error,
           not silently converted). Surrounding whitespace is stripped before
           lengths are checked; lengths count characters, not bytes.
    """

    model_config = ConfigDict(strict=True, str_strip_whitespace=True, extra="ignore")

    title: str = Field(min_length=3, max_length=TITLE_MAX_LENGTH)
    author: str = Field(min_length=3, max_length=AUTHOR_MAX_LENGTH)
    summary: str = Field(min_length=10, max_length=SUMMARY_MAX_LENGTH)
    isbn: str

    @field_validator("isbn")
    @classmethod
    def validate_isbn_length(cls, v: str) -> str:
        """ISBN-13 values are exactly 13 characters."""
        if len(v) != ISBN_LENGTH:
            raise PydanticCustomError(
                "isbn_size",
                "The isbn field must be {size} characters.",
                {"size": ISBN_LENGTH},
            )
        return v


# ══════════════════════════════════════════════════════════════════════════
# Cache snapshot
# ══════════════════════════════════════════════════════════════════════════


class BookSnapshot(BaseModel):
    """
    What:  A copy of a Book row, detached from any session.
    Why:   The cache stores this as JSON; a Redis hit must not need the ORM.
    """

    id: int
    title: str
    author: str
    summary: str
    isbn: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class BookLinks(BaseModel):
    """Hypermedia links attached to every book view."""

    model_config = ConfigDict(populate_by_name=True)

    self_: str = Field(alias="self", description="URL of this book")
    update: str = Field(description="URL to PUT/PATCH this book")
    delete: str = Field(description="URL to DELETE this book")
    all: str = Field(description="URL of the book collection")


class BookResource(BaseModel):
    """
    What:  The client-facing view of a book.
    How:   `author` is upper-cased for display; the stored value is untouched.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(description="Book identifier")
    title: str
    author: str = Field(description="Author name, upper-cased")
    summary: str
    isbn: str = Field(description="13-character ISBN")
    links: BookLinks = Field(alias="_links")


class BookEnvelope(BaseModel):
    """Single-book response body: `{"data": {...}}`."""

    data: BookResource


class PaginationLinks(BaseModel):
    """Navigation links of a collection page; prev/next are null at the edges."""

    first: str
    last: str
    prev: Optional[str] = None
    next: Optional[str] = None


class PaginationMeta(BaseModel):
    """
    Position of a collection page.

    `from`/`to` are the 1-based positions of the first and last item on the
    page, null when the page is empty.
    """

    model_config = ConfigDict(populate_by_name=True)

    current_page: int
    per_page: int
    total: int
    from_: Optional[int] = Field(default=None, alias="from")
    to: Optional[int] = None
    last_page: int
    path: str


class BookCollection(BaseModel):
    """Paginated list response body."""

    data: List[BookResource]
    links: PaginationLinks
    meta: PaginationMeta
