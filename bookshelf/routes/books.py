"""
Bookshelf API — Book Route Handlers
====================================

What:  CRUD endpoints for the Book resource.
How:   Routes stay thin: read the request, run the boundary dependencies
       (auth guard, id resolution), delegate to BookService, pick the status code.

Endpoints:
    GET       /books              public, paginated
    POST      /books              bearer token, 201
    GET       /books/{book_id}    public, served through the read-through cache
    PUT/PATCH /books/{book_id}    bearer token
    DELETE    /books/{book_id}    bearer token, 204

Auth runs before id resolution, so an anonymous request for an unknown id
gets 401, not 404.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.config import settings
from bookshelf.database import get_db_session
from bookshelf.dependencies import (
    RequestBookUrls,
    get_book_service,
    get_book_urls,
    require_token,
    resolve_book,
)
from bookshelf.models.book import Book
from bookshelf.schemas.book import BookCollection, BookEnvelope, BookPayload
from bookshelf.schemas.common import ErrorResponse
from bookshelf.services.book_service import BookService
from bookshelf.services.credential_service import AccessContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/books", tags=["Books"])

# The body is taken as a raw object so that BookValidator reports every rule
# in one response; this documents its expected shape in OpenAPI.
_BOOK_BODY_DOC = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": BookPayload.model_json_schema()}},
    }
}

_BOOK_BODY_EXAMPLE = {
    "title": "Nouveau livre test",
    "author": "Moi-même",
    "summary": "Test nouveau livre",
    "isbn": "1111111111111",
}

_AUTH_ERRORS = {401: {"description": "Missing or invalid bearer token", "model": ErrorResponse}}
_VALIDATION_ERRORS = {422: {"description": "Validation failed", "model": ErrorResponse}}
_NOT_FOUND = {404: {"description": "Book not found", "model": ErrorResponse}}


@router.get(
    "",
    name="list_books",
    response_model=BookCollection,
    summary="List books",
    description=(
        "Returns books ordered by id, one page at a time, with `links` "
        "(first/last/prev/next) and `meta` (current_page, per_page, total, from, to)."
    ),
    responses={**_VALIDATION_ERRORS},
)
async def list_books(
    page: int = Query(default=1, ge=1, description="Page number, starting at 1"),
    per_page: Optional[int] = Query(
        default=None,
        ge=1,
        le=settings.books_max_per_page,
        description=f"Books per page (default {settings.books_per_page})",
    ),
    db: AsyncSession = Depends(get_db_session),
    service: BookService = Depends(get_book_service),
    urls: RequestBookUrls = Depends(get_book_urls),
) -> BookCollection:
    return await service.index(
        db, page=page, per_page=per_page or settings.books_per_page, urls=urls
    )


@router.post(
    "",
    name="store_book",
    status_code=201,
    response_model=BookEnvelope,
    summary="Create a book",
    responses={
        201: {"description": "Book created", "model": BookEnvelope},
        **_AUTH_ERRORS,
        **_VALIDATION_ERRORS,
    },
    openapi_extra=_BOOK_BODY_DOC,
)
async def store_book(
    _: AccessContext = Depends(require_token),
    fields: Optional[Dict[str, Any]] = Body(default=None, examples=[_BOOK_BODY_EXAMPLE]),
    db: AsyncSession = Depends(get_db_session),
    service: BookService = Depends(get_book_service),
    urls: RequestBookUrls = Depends(get_book_urls),
) -> BookEnvelope:
    return await service.create(db, fields or {}, urls)


@router.get(
    "/{book_id}",
    name="show_book",
    response_model=BookEnvelope,
    summary="Get a book",
    description="Served from the book cache when possible (entries live 60 minutes).",
    responses={**_NOT_FOUND},
)
async def show_book(
    book_id: int,
    db: AsyncSession = Depends(get_db_session),
    service: BookService = Depends(get_book_service),
    urls: RequestBookUrls = Depends(get_book_urls),
) -> BookEnvelope:
    return await service.show(db, book_id, urls)


@router.put(
    "/{book_id}",
    name="update_book",
    response_model=BookEnvelope,
    summary="Replace a book",
    description="All four fields are required and re-validated.",
    responses={**_AUTH_ERRORS, **_NOT_FOUND, **_VALIDATION_ERRORS},
    openapi_extra=_BOOK_BODY_DOC,
)
@router.patch(
    "/{book_id}",
    name="update_book",
    response_model=BookEnvelope,
    summary="Update a book",
    description="Same contract as PUT: all four fields are required and re-validated.",
    responses={**_AUTH_ERRORS, **_NOT_FOUND, **_VALIDATION_ERRORS},
    openapi_extra=_BOOK_BODY_DOC,
)
async def update_book(
    _: AccessContext = Depends(require_token),
    book: Book = Depends(resolve_book),
    fields: Optional[Dict[str, Any]] = Body(default=None, examples=[_BOOK_BODY_EXAMPLE]),
    db: AsyncSession = Depends(get_db_session),
    service: BookService = Depends(get_book_service),
    urls: RequestBookUrls = Depends(get_book_urls),
) -> BookEnvelope:
    return await service.update(db, book, fields or {}, urls)


@router.delete(
    "/{book_id}",
    name="destroy_book",
    status_code=204,
    response_class=Response,
    summary="Delete a book",
    responses={204: {"description": "Book deleted"}, **_AUTH_ERRORS, **_NOT_FOUND},
)
async def destroy_book(
    _: AccessContext = Depends(require_token),
    book: Book = Depends(resolve_book),
    db: AsyncSession = Depends(get_db_session),
    service: BookService = Depends(get_book_service),
) -> Response:
    await service.destroy(db, book)
    return Response(status_code=204)
