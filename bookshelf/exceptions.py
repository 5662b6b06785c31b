"""
Bookshelf API — Custom Exception Hierarchy
===========================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    BookshelfError (base)
    ├── ValidationFailedError     → 422 Unprocessable Entity (field → messages)
    │   └── UniqueConstraintError → 422 (isbn/email already taken)
    ├── InvalidCredentialsError   → 422 (deliberately generic)
    ├── UnauthenticatedError      → 401 Unauthorized
    ├── NotFoundError             → 404 Not Found
    ├── RateLimitExceededError    → 429 Too Many Requests
    ├── CacheUnavailableError     → 503 Service Unavailable
    └── DatabaseError             → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional


class BookshelfError(Exception):
    """
    Base exception for all Bookshelf application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


def summarize_errors(errors: Dict[str, List[str]]) -> str:
    """
    Builds the top-level message of a validation failure.

    The first field message, followed by how many others were collected:
        "The title field is required. (and 2 more errors)"
    """
    messages = [message for field_messages in errors.values() for message in field_messages]
    if not messages:
        return "The given data was invalid."
    remaining = len(messages) - 1
    if remaining == 0:
        return messages[0]
    plural = "error" if remaining == 1 else "errors"
    return f"{messages[0]} (and {remaining} more {plural})"


class ValidationFailedError(BookshelfError):
    """
    Raised when client input fails validation.

    What:    One or more fields were rejected; `errors` maps each offending
             field to the list of its messages.
    When:    Book payload rules, register payload rules, malformed bodies.
    HTTP:    422 Unprocessable Entity

    Example response:
        {
            "error": "validation_error",
            "message": "The title field must be at least 3 characters.",
            "errors": {"title": ["The title field must be at least 3 characters."]},
            "request_id": "1a2b3c4d"
        }
    """

    def __init__(
        self,
        errors: Dict[str, List[str]],
        context: Optional[Dict[str, Any]] = None,
    ):
        self.errors = errors
        super().__init__(message=summarize_errors(errors), context=context)


class UniqueConstraintError(ValidationFailedError):
    """
    Raised when the database rejects a write on a unique index.

    Why a subclass: Clients see exactly the same 422 shape as a field-level
    rule, but the store can raise it without knowing about HTTP, and logs can
    tell a lost insert race apart from a plain bad payload.
    """

    def __init__(
        self,
        field: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["field"] = field
        super().__init__(
            errors={field: [f"The {field} has already been taken."]},
            context=ctx,
        )
        self.field = field


class InvalidCredentialsError(BookshelfError):
    """
    Raised when a login attempt does not match a user.

    The same message is used for an unknown email and a wrong password so the
    endpoint cannot be used to discover which accounts exist.
    HTTP: 422
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid credentials.", context=context)


class UnauthenticatedError(BookshelfError):
    """Missing, malformed, unknown or revoked bearer token. HTTP: 401"""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Unauthenticated.", context=context)


class NotFoundError(BookshelfError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; the store converts None into
    this exception so the global handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RateLimitExceededError(BookshelfError):
    """
    Raised when a client exceeds a per-IP request rate limit.

    Response includes:
        - retry_after: Seconds until the oldest request leaves the window
        - Retry-After header for HTTP-compliant clients
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class CacheUnavailableError(BookshelfError):
    """
    Raised when the cache backend cannot invalidate an entry.

    Reads tolerate an unreachable cache and go to the database. Invalidation
    does not: a write must not report success while a stale entry may still
    be served for up to an hour.
    HTTP: 503
    """

    def __init__(
        self,
        message: str = "The book cache is temporarily unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(BookshelfError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; details are logged
    server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
