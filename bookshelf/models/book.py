"""
Bookshelf API — Book SQLAlchemy Model
======================================

What:  ORM model representing the `books` table.
Why:   Maps Python objects to database rows for type-safe database operations.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by BookStore for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    - Integer primary key assigned by the database, never reused after a delete
      (PostgreSQL sequences never hand a value out twice; SQLite needs
      AUTOINCREMENT for the same guarantee, otherwise it reuses max(id) + 1)
    - isbn carries a unique index: the database, not a prior SELECT, decides
      which of two concurrent writers gets the isbn
    - Column lengths mirror the validation rules so the database rejects what
      the validator would
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bookshelf.database import Base

TITLE_MAX_LENGTH = 255
AUTHOR_MAX_LENGTH = 100
SUMMARY_MAX_LENGTH = 500
ISBN_LENGTH = 13


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Book(Base):
    """
    A catalog entry.

    Lifecycle:
        absent → created → (updated)* → deleted (terminal, hard delete)

    Query Patterns:
        - Page through the catalog: ORDER BY id ASC LIMIT :per_page OFFSET :offset
        - Get single book: WHERE id = :id (primary key)
        - ISBN uniqueness: WHERE isbn = :isbn (unique index)
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)

    author: Mapped[str] = mapped_column(String(AUTHOR_MAX_LENGTH), nullable=False)

    summary: Mapped[str] = mapped_column(String(SUMMARY_MAX_LENGTH), nullable=False)

    isbn: Mapped[str] = mapped_column(String(ISBN_LENGTH), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        UniqueConstraint("isbn", name="uq_books_isbn"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, isbn='{self.isbn}', title='{self.title}')>"
