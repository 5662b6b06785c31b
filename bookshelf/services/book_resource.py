"""
Bookshelf API — Book Response Shaping
======================================

What:  Builds the client views of books and book pages.
Why:   What clients receive is a view, not the stored row: the author is
       upper-cased for display and every book carries links to itself and
       to the collection. Pages carry navigation links and position metadata.
How:   URLs come from a BookUrls object supplied by the HTTP layer, so this
       module (and the service using it) never imports FastAPI.

Example book view:
    {
        "id": 7,
        "title": "Nouveau livre test",
        "author": "MOI-MÊME",
        "summary": "Test nouveau livre",
        "isbn": "1111111111111",
        "_links": {
            "self":   "http://host/api/v1/books/7",
            "update": "http://host/api/v1/books/7",
            "delete": "http://host/api/v1/books/7",
            "all":    "http://host/api/v1/books"
        }
    }
"""

from typing import Protocol, Union

from bookshelf.models.book import Book
from bookshelf.schemas.book import (
    BookCollection,
    BookLinks,
    BookResource,
    BookSnapshot,
    PaginationLinks,
    PaginationMeta,
)
from bookshelf.services.book_store import BookPage


class BookUrls(Protocol):
    """Absolute URLs of the book routes."""

    def item(self, book_id: int) -> str: ...

    def collection(self) -> str: ...

    def page(self, page: int, per_page: int) -> str: ...


def display_author(author: str) -> str:
    # str.upper() is Unicode-aware: "Moi-même" → "MOI-MÊME"
    return author.upper()


def to_resource(book: Union[Book, BookSnapshot], urls: BookUrls) -> BookResource:
    item_url = urls.item(book.id)
    return BookResource(
        id=book.id,
        title=book.title,
        author=display_author(book.author),
        summary=book.summary,
        isbn=book.isbn,
        links=BookLinks(
            self_=item_url,
            update=item_url,
            delete=item_url,
            all=urls.collection(),
        ),
    )


def to_collection(page: BookPage, urls: BookUrls) -> BookCollection:
    """
    Wraps a BookPage with navigation links and metadata.

    prev is null on the first page, next is null on the last page. A page
    past the end has no items, a prev link to the page before it, and no next.
    """
    current = page.page
    per_page = page.per_page
    last = page.last_page

    return BookCollection(
        data=[to_resource(book, urls) for book in page.items],
        links=PaginationLinks(
            first=urls.page(1, per_page),
            last=urls.page(last, per_page),
            prev=urls.page(current - 1, per_page) if current > 1 else None,
            next=urls.page(current + 1, per_page) if current < last else None,
        ),
        meta=PaginationMeta(
            current_page=current,
            per_page=per_page,
            total=page.total,
            from_=page.first_position,
            to=page.last_position,
            last_page=last,
            path=urls.collection(),
        ),
    )
