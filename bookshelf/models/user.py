"""
Bookshelf API — User and Access Token Models
=============================================

What:  ORM models for the `users` and `personal_access_tokens` tables.
Why:   Mutating book routes require a bearer token issued to a registered user.
How:   A user owns any number of tokens. Only a SHA-256 digest of each token's
       secret is stored; the plain-text value is shown to the client once,
       at register/login time, as "<token id>|<secret>".
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookshelf.database import Base
from bookshelf.models.book import utcnow

# Consumer mailbox providers. An address on any other domain is treated as a
# professional (company) address.
FREE_EMAIL_DOMAINS = frozenset({
    "aol.com",
    "free.fr",
    "gmail.com",
    "gmx.com",
    "gmx.fr",
    "googlemail.com",
    "hotmail.com",
    "hotmail.fr",
    "icloud.com",
    "laposte.net",
    "live.com",
    "live.fr",
    "mail.com",
    "me.com",
    "msn.com",
    "orange.fr",
    "outlook.com",
    "outlook.fr",
    "proton.me",
    "protonmail.com",
    "sfr.fr",
    "wanadoo.fr",
    "yahoo.com",
    "yahoo.fr",
    "yandex.com",
})


class User(Base):
    """A registered API user."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # bcrypt hash, never serialized
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    tokens: Mapped[List["PersonalAccessToken"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def uses_professional_email(self) -> bool:
        """True unless the email domain belongs to a consumer mailbox provider."""
        _, sep, domain = (self.email or "").rpartition("@")
        return bool(sep and domain) and domain.lower() not in FREE_EMAIL_DOMAINS

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"


class PersonalAccessToken(Base):
    """
    A bearer token issued to a user.

    Revocation deletes the row, so a token either exists and authenticates
    or does not exist at all.
    """

    __tablename__ = "personal_access_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # SHA-256 hex digest of the secret part
    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    last_used_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    user: Mapped[User] = relationship(back_populates="tokens", lazy="joined")

    def __repr__(self) -> str:
        return f"<PersonalAccessToken(id={self.id}, user_id={self.user_id}, name='{self.name}')>"
