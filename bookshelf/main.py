"""
Bookshelf API — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn bookshelf.main:app),
       and by the test suite to get a fresh app (fresh rate-limit counters) per test.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware: Request ID → Rate Limit → Logging       │
    │                                                      │
    │  Routes:                                             │
    │    /books, /books/{id}           (BookService)       │
    │    /register /login /logout /user (CredentialService)│
    │    /ping, /health                                    │
    │                                                      │
    │  Exception Handlers:                                 │
    │    Validation→422  Auth→401  NotFound→404            │
    │    RateLimit→429   Cache→503 Database→500            │
    └──────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookshelf import __version__
from bookshelf.config import settings
from bookshelf.database import dispose_engine
from bookshelf.dependencies import close_book_cache, get_book_cache
from bookshelf.exceptions import (
    BookshelfError,
    CacheUnavailableError,
    DatabaseError,
    InvalidCredentialsError,
    NotFoundError,
    RateLimitExceededError,
    UnauthenticatedError,
    ValidationFailedError,
    summarize_errors,
)
from bookshelf.middleware.logging import RequestLoggingMiddleware
from bookshelf.middleware.rate_limit import RateLimitMiddleware
from bookshelf.middleware.request_id import RequestIDMiddleware, request_id_var
from bookshelf.routes import auth, books, health
from bookshelf.validation import field_errors

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout
    (container runtimes collect stdout).
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # These log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, configuration check, cache backend
    Shutdown: cache connections, database pool
    """
    setup_logging()
    logger.info("Bookshelf API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    cache = get_book_cache()
    logger.info("Book cache backend: %s (ttl=%ds)", cache.backend_name, cache.ttl)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)

    yield

    logger.info("Bookshelf API shutting down...")
    await close_book_cache()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, **extra) -> dict:
    body = {"error": error, "message": message}
    body.update(extra)
    body["request_id"] = request_id_var.get("")
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps exception types to HTTP status codes and response bodies.

    Handler hierarchy:
        ValidationFailedError / UniqueConstraintError → 422 (with `errors`)
        RequestValidationError (FastAPI)              → 422 (with `errors`)
        InvalidCredentialsError                       → 422
        UnauthenticatedError                          → 401
        NotFoundError                                 → 404
        StarletteHTTPException                        → its own status
        RateLimitExceededError                        → 429
        CacheUnavailableError                         → 503
        DatabaseError                                 → 500
        BookshelfError (base)                         → 500
        Exception (fallback)                          → 500

    Handlers never expose internal details (stack traces, SQL) in the response.
    """

    @app.exception_handler(ValidationFailedError)
    async def handle_validation_failed(request: Request, exc: ValidationFailedError):
        logger.info("[%s] Validation failed: %s", request_id_var.get(""), exc.errors)
        return JSONResponse(
            status_code=422,
            content=_error_body("validation_error", exc.message, errors=exc.errors),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = field_errors(exc.errors())
        return JSONResponse(
            status_code=422,
            content=_error_body("validation_error", summarize_errors(errors), errors=errors),
        )

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        return JSONResponse(
            status_code=422,
            content=_error_body("invalid_credentials", exc.message),
        )

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthenticated", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body("http_error", str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return JSONResponse(
            status_code=429,
            content=_error_body("rate_limit_exceeded", exc.message),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(CacheUnavailableError)
    async def handle_cache_unavailable(request: Request, exc: CacheUnavailableError):
        logger.error("[%s] Cache unavailable: %s | Context: %s",
                     request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=503,
            content=_error_body("service_unavailable", exc.message),
            headers={"Retry-After": "5"},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s",
                     request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error", "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(BookshelfError)
    async def handle_bookshelf_error(request: Request, exc: BookshelfError):
        logger.error("[%s] Unhandled application error: %s | Context: %s",
                     request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Bookshelf API",
        description=(
            "Catalog of books with token-based authentication. Reading is public; "
            "creating, updating and deleting books requires a bearer token from "
            "/register or /login."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → RateLimit → Logging → GZip → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(books.router)
    app.include_router(auth.router)
    app.include_router(health.router)

    return app


# uvicorn expects `bookshelf.main:app` to be importable
app = create_app()
