"""
Bookshelf API — Shared Response Schemas
========================================

What:  Error and health response models used across all routers.
Why:   Clients need one consistent structure to parse errors programmatically.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "The isbn field must be 13 characters.",
            "errors": {"isbn": ["The isbn field must be 13 characters."]},
            "request_id": "550e8400"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    errors: Optional[Dict[str, List[str]]] = Field(
        default=None, description="Per-field validation messages (422 only)"
    )
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    cache: str = Field(description="Book cache backend status: available, unavailable, disabled")
    uptime_seconds: float = Field(description="Seconds since service started")
