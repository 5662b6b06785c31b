"""
Bookshelf API — Credential Service (Users and Bearer Tokens)
=============================================================

What:  Registers users, verifies passwords, issues and revokes bearer tokens.
Why:   Mutating book routes are reserved to authenticated users; this is the
       only module that knows how passwords and tokens are stored.
How:
    Passwords  bcrypt via passlib's CryptContext (salted, cost from settings)
    Tokens     opaque random secrets. The client receives "<id>|<secret>";
               the database keeps only sha256(secret). Lookup is by id, then
               a constant-time digest comparison.

Security Notes:
    - Login answers the same InvalidCredentialsError for an unknown email
      and a wrong password, and runs a dummy bcrypt verification for unknown
      emails so both paths take about the same time.
    - Tokens never expire on their own; logout deletes the token row.
"""

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from typing import Optional, Tuple

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.config import settings
from bookshelf.exceptions import (
    InvalidCredentialsError,
    UniqueConstraintError,
    ValidationFailedError,
)
from bookshelf.models.book import utcnow
from bookshelf.models.user import PersonalAccessToken, User
from bookshelf.schemas.user import LoginRequest, RegisterRequest, UserResponse

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_hash_rounds,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _digest(secret: str) -> str:
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


@dataclass
class AccessContext:
    """The authenticated user and the token that authenticated the request."""

    user: User
    token: PersonalAccessToken


def user_view(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        professional_email=user.uses_professional_email(),
        created_at=user.created_at,
    )


class CredentialService:
    """Stateless; every method receives the request's AsyncSession."""

    async def register(self, db: AsyncSession, data: RegisterRequest) -> Tuple[User, str]:
        """
        Creates a user and issues its first token.

        Raises:
            ValidationFailedError: email already registered
        """
        if await self._find_user(db, data.email) is not None:
            raise ValidationFailedError(errors={"email": ["The email has already been taken."]})

        user = User(name=data.name, email=data.email, password=hash_password(data.password))
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Another registration with this email committed after our check
            await db.rollback()
            raise UniqueConstraintError(field="email")

        plain_token = await self.issue_token(db, user)
        logger.info("User %s registered", user.id)
        return user, plain_token

    async def login(self, db: AsyncSession, data: LoginRequest) -> Tuple[User, str]:
        user = await self._find_user(db, data.email)
        if user is None:
            pwd_context.dummy_verify()
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError()
        if not verify_password(data.password, user.password):
            logger.info("Login failed for user %s: wrong password", user.id)
            raise InvalidCredentialsError(context={"user_id": user.id})

        plain_token = await self.issue_token(db, user)
        logger.info("User %s logged in", user.id)
        return user, plain_token

    async def issue_token(self, db: AsyncSession, user: User) -> str:
        secret = secrets.token_urlsafe(30)
        token = PersonalAccessToken(user_id=user.id, name=settings.token_name, token=_digest(secret))
        db.add(token)
        await db.flush()
        await db.commit()
        return f"{token.id}|{secret}"

    async def authenticate(self, db: AsyncSession, plain_token: str) -> Optional[AccessContext]:
        """
        Resolves a bearer token to its user, or None if it is unknown/revoked.

        Accepts "<id>|<secret>" (as issued) and a bare secret.
        """
        token_id, separator, secret = plain_token.partition("|")
        if separator:
            if not token_id.isdigit():
                return None
            token = await db.get(PersonalAccessToken, int(token_id))
            if token is None or not hmac.compare_digest(token.token, _digest(secret)):
                return None
        else:
            result = await db.execute(
                select(PersonalAccessToken).where(PersonalAccessToken.token == _digest(plain_token))
            )
            token = result.scalar_one_or_none()
            if token is None:
                return None

        token.last_used_at = utcnow()
        return AccessContext(user=token.user, token=token)

    async def revoke(self, db: AsyncSession, token: PersonalAccessToken) -> None:
        await db.delete(token)
        await db.commit()
        logger.info("Token %s revoked for user %s", token.id, token.user_id)

    async def _find_user(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


credential_service = CredentialService()
