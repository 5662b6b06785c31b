"""
Bookshelf API — Rate Limiting Middleware
=========================================

What:  Per-IP sliding window rate limits, one window per rule.
Why:   POST /login must not be usable for password guessing at full speed;
       the whole API gets a generous global ceiling against abuse.
How:   Each rule tracks request timestamps per (rule, client IP) in memory.

Rules (from settings):
    global  every route except health/docs   RATE_LIMIT_REQUESTS per RATE_LIMIT_WINDOW
    login   POST {API_PREFIX}/login          LOGIN_RATE_LIMIT_REQUESTS per LOGIN_RATE_LIMIT_WINDOW
    A request is counted against every rule that matches it and is rejected
    if any of them is exhausted.

Algorithm: Sliding Window Log
    1. Drop timestamps older than the rule's window
    2. If the remaining count >= limit, reject with 429 and Retry-After
    3. Otherwise record the current timestamp and let the request through

Scope:
    Counters live in this middleware instance: correct for one process, not
    shared between workers.
"""

import logging
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from bookshelf.config import settings
from bookshelf.exceptions import RateLimitExceededError
from bookshelf.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    """A limit of `requests` per `window` seconds, optionally bound to one route."""

    name: str
    requests: int
    window: int
    method: Optional[str] = None
    path: Optional[str] = None

    def matches(self, method: str, path: str) -> bool:
        if self.method is not None and method != self.method:
            return False
        if self.path is not None and path.rstrip("/") != self.path:
            return False
        return True


def default_rules() -> List[RateLimitRule]:
    return [
        RateLimitRule(
            name="global",
            requests=settings.rate_limit_requests,
            window=settings.rate_limit_window,
        ),
        RateLimitRule(
            name="login",
            requests=settings.login_rate_limit_requests,
            window=settings.login_rate_limit_window,
            method="POST",
            path=f"{settings.api_prefix}/login",
        ),
    ]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Excluded paths:
        /health, /docs, /openapi.json, /redoc are never limited.

    Response on rate limit:
        HTTP 429 with a Retry-After header and the standard error body.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, rules: Optional[List[RateLimitRule]] = None, **kwargs):
        super().__init__(app, **kwargs)
        self.rules = rules if rules is not None else default_rules()
        # (rule name, client IP) → request timestamps inside the rule's window
        self._requests: Dict[Tuple[str, str], List[float]] = defaultdict(list)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = (
            getattr(request.client, "host", "unknown")
            if request.client
            else "unknown"
        )
        now = time.time()
        matching = [rule for rule in self.rules if rule.matches(request.method, path)]

        # A rejected request is not recorded against any rule
        for rule in matching:
            key = (rule.name, client_ip)
            window_start = now - rule.window
            self._requests[key] = [ts for ts in self._requests[key] if ts > window_start]

            if len(self._requests[key]) >= rule.requests:
                oldest = self._requests[key][0]
                retry_after = int(oldest + rule.window - now) + 1
                logger.warning(
                    "Rate limit '%s' exceeded for IP %s: %d requests in %ds window",
                    rule.name,
                    client_ip,
                    len(self._requests[key]),
                    rule.window,
                )
                return self._reject(RateLimitExceededError(retry_after=retry_after))

        for rule in matching:
            self._requests[(rule.name, client_ip)].append(now)

        self._seen += 1
        if self._seen % 1000 == 0:
            self._cleanup_inactive(now)

        return await call_next(request)

    def _reject(self, exc: RateLimitExceededError) -> JSONResponse:
        return JSONResponse(
            status_code=429,
            content={
                "error": "rate_limit_exceeded",
                "message": exc.message,
                "request_id": request_id_var.get(""),
            },
            headers={"Retry-After": str(exc.retry_after)},
        )

    def _cleanup_inactive(self, now: float) -> None:
        """Drops (rule, IP) entries with no request inside their window."""
        windows = {rule.name: rule.window for rule in self.rules}
        inactive = [
            key for key, timestamps in self._requests.items()
            if not timestamps or max(timestamps) <= now - windows.get(key[0], 0)
        ]
        for key in inactive:
            del self._requests[key]

        if inactive:
            logger.debug("Cleaned up %d inactive rate limit entries", len(inactive))
