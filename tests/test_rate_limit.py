"""
Bookshelf API — Rate Limit Middleware Tests
============================================

What:  Sliding window rules of RateLimitMiddleware on a minimal app.
"""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from bookshelf.middleware.rate_limit import RateLimitMiddleware, RateLimitRule


def make_app(rules):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, rules=rules)

    @app.get("/items")
    async def items():
        return {"ok": True}

    @app.post("/items")
    async def create_item():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


async def hit(app, method, path, times):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return [(await client.request(method, path)).status_code for _ in range(times)]


class TestRateLimitRule:

    def test_unbound_rule_matches_everything(self):
        rule = RateLimitRule(name="global", requests=10, window=60)
        assert rule.matches("GET", "/anything")

    def test_bound_rule_matches_method_and_path(self):
        rule = RateLimitRule(name="login", requests=10, window=60, method="POST", path="/api/v1/login")
        assert rule.matches("POST", "/api/v1/login")
        assert rule.matches("POST", "/api/v1/login/")
        assert not rule.matches("GET", "/api/v1/login")
        assert not rule.matches("POST", "/api/v1/register")


class TestRateLimitMiddleware:

    @pytest.mark.asyncio
    async def test_requests_over_the_limit_are_rejected(self):
        app = make_app([RateLimitRule(name="global", requests=3, window=60)])
        assert await hit(app, "GET", "/items", 4) == [200, 200, 200, 429]

    @pytest.mark.asyncio
    async def test_health_is_never_limited(self):
        app = make_app([RateLimitRule(name="global", requests=1, window=60)])
        assert await hit(app, "GET", "/health", 3) == [200, 200, 200]

    @pytest.mark.asyncio
    async def test_route_rule_only_counts_its_route(self):
        app = make_app([RateLimitRule(name="writes", requests=1, window=60, method="POST", path="/items")])
        assert await hit(app, "GET", "/items", 3) == [200, 200, 200]
        assert await hit(app, "POST", "/items", 2) == [200, 429]
