"""
Bookshelf API — FastAPI Dependencies
=====================================

What:  The boundary steps that run before a route handler.
Why:   Route handlers and services receive ready-to-use values instead of
       raw headers and ids:
         - require_token   Authorization header → AccessContext, or 401
         - resolve_book    {book_id} path parameter → Book, or 404
         - get_book_service / get_book_cache   injected collaborators
         - get_book_urls   absolute URLs for `_links` and page links
How:   FastAPI caches each dependency per request, so all of them share the
       single session from get_db_session.

Tests replace get_book_cache through `app.dependency_overrides` to get a
fresh cache without touching module state.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.config import settings
from bookshelf.database import get_db_session
from bookshelf.exceptions import UnauthenticatedError
from bookshelf.models.book import Book
from bookshelf.services.book_cache import build_book_cache
from bookshelf.services.book_service import BookService
from bookshelf.services.book_store import book_store
from bookshelf.services.book_validator import book_validator
from bookshelf.services.cache_base import BookCache
from bookshelf.services.credential_service import AccessContext, credential_service

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must produce our 401 body, not
# FastAPI's default error
bearer_scheme = HTTPBearer(
    auto_error=False,
    description="Token returned by /register or /login, sent as `Authorization: Bearer <token>`",
)

_book_cache: Optional[BookCache] = None


def get_book_cache() -> BookCache:
    """The process-wide cache, built on first use from CACHE_BACKEND."""
    global _book_cache
    if _book_cache is None:
        _book_cache = build_book_cache(settings)
    return _book_cache


async def close_book_cache() -> None:
    global _book_cache
    if _book_cache is not None:
        await _book_cache.close()
        _book_cache = None


def get_book_service(cache: BookCache = Depends(get_book_cache)) -> BookService:
    return BookService(store=book_store, validator=book_validator, cache=cache)


class RequestBookUrls:
    """BookUrls built from the current request's base URL and route names."""

    def __init__(self, request: Request):
        self.request = request

    def item(self, book_id: int) -> str:
        return str(self.request.url_for("show_book", book_id=book_id))

    def collection(self) -> str:
        return str(self.request.url_for("list_books"))

    def page(self, page: int, per_page: int) -> str:
        url = self.request.url_for("list_books")
        return str(url.include_query_params(page=page, per_page=per_page))


def get_book_urls(request: Request) -> RequestBookUrls:
    return RequestBookUrls(request)


async def require_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> AccessContext:
    """
    Auth guard for mutating routes.

    Raises:
        UnauthenticatedError: no Bearer header, or a token that does not
                              match a live token row
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError(context={"reason": "missing_token"})

    access = await credential_service.authenticate(db, credentials.credentials)
    if access is None:
        logger.warning("Rejected unknown or revoked bearer token")
        raise UnauthenticatedError(context={"reason": "invalid_token"})
    return access


async def resolve_book(book_id: int, db: AsyncSession = Depends(get_db_session)) -> Book:
    """Resolves the {book_id} path parameter, raising NotFoundError (404) if absent."""
    return await book_store.get_by_id(db, book_id)
