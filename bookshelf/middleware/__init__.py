"""
Bookshelf API — Middleware Package
===================================

Middleware Chain (request order):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so a 429 body already carries the request id
    2. Rate Limit rejects abusive requests before any database work
    3. Logging times everything downstream of it
"""
