"""
Bookshelf API — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Database tests run against a throwaway SQLite file. The schema is
       created before and dropped after each of them, so every test starts
       from an empty catalog.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── database:        create_all / drop_all around every database test
    ├── db_session:      AsyncSession for service and store tests
    ├── book_cache:      empty InMemoryBookCache
    ├── book_urls:       fixed BookUrls for service tests (no HTTP request)
    ├── app:             fresh FastAPI app (fresh rate-limit counters)
    ├── test_client:     HTTPX AsyncClient bound to `app`
    └── auth_headers:    Authorization header of a freshly registered user
"""

import os
import tempfile

# Override settings for testing BEFORE any bookshelf imports
_test_dir = tempfile.mkdtemp(prefix="bookshelf_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir}/test.db"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"  # bcrypt minimum, keeps hashing fast
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["API_PREFIX"] = "/api/v1"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from bookshelf.database import Base, async_session_factory, engine
from bookshelf.dependencies import get_book_cache
from bookshelf.main import create_app
from bookshelf.services.book_cache import InMemoryBookCache
import bookshelf.models  # noqa: F401  registers the tables on Base.metadata

API = "/api/v1"

VALID_BOOK = {
    "title": "Nouveau livre test",
    "author": "Moi-même",
    "summary": "Test nouveau livre",
    "isbn": "1111111111111",
}


def book_fields(**overrides):
    """A valid create/update body, with selected fields replaced."""
    fields = dict(VALID_BOOK)
    fields.update(overrides)
    return fields


class StaticBookUrls:
    """BookUrls for tests that call the service without an HTTP request."""

    base = "http://test/api/v1/books"

    def item(self, book_id: int) -> str:
        return f"{self.base}/{book_id}"

    def collection(self) -> str:
        return self.base

    def page(self, page: int, per_page: int) -> str:
        return f"{self.base}?page={page}&per_page={per_page}"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    """
    Provides a real AsyncSession on the test database.

    Usage:
        async def test_create(db_session):
            book = await book_store.create(db_session, payload)
    """
    async with async_session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Services
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def book_cache():
    return InMemoryBookCache(ttl=3600, prefix="book:")


@pytest.fixture
def book_urls():
    return StaticBookUrls()


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(book_cache):
    """A fresh application whose book cache is the test's `book_cache`."""
    application = create_app()
    application.dependency_overrides[get_book_cache] = lambda: book_cache
    return application


@pytest_asyncio.fixture
async def test_client(app, database):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_ping(test_client):
            response = await test_client.get("/api/v1/ping")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def auth_headers(test_client):
    """Registers a user and returns its bearer Authorization header."""
    response = await test_client.post(
        f"{API}/register",
        json={"name": "Test User", "email": "tester@example.com", "password": "secret-password"},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}
