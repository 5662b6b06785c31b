"""
Bookshelf API — Health Check and Ping Routes
=============================================

What:  GET /health for monitoring and load balancer probes, and GET {prefix}/ping
       as a trivial liveness answer for API clients.
How:   /health checks the database (SELECT 1) and the book cache backend.

Status levels:
    - healthy:   database and cache reachable
    - degraded:  cache unreachable (reads still work, from the database)
    - unhealthy: database unreachable
"""

import logging
import time

from fastapi import APIRouter, Depends
from sqlalchemy import text

from bookshelf import __version__
from bookshelf.config import settings
from bookshelf.database import engine
from bookshelf.dependencies import get_book_cache
from bookshelf.schemas.common import HealthResponse
from bookshelf.schemas.user import MessageResponse
from bookshelf.services.cache_base import BookCache

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(cache: BookCache = Depends(get_book_cache)) -> HealthResponse:
    db_status = "connected"
    cache_status = "available"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if cache.backend_name == "none":
        cache_status = "disabled"
    elif not await cache.ping():
        cache_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall
        logger.warning("Health check: %s book cache unreachable", cache.backend_name)

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        cache=cache_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )


@router.get(
    f"{settings.api_prefix}/ping",
    response_model=MessageResponse,
    summary="Ping",
)
async def ping() -> MessageResponse:
    return MessageResponse(message="pong")
