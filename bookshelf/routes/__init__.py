# Routes package init
"""
Bookshelf API — API Routes Package
===================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource or concern.

Route Inventory (API_PREFIX defaults to /api/v1):
    - books.py:   GET    {API_PREFIX}/books             (paginated list)
                  POST   {API_PREFIX}/books             (create, token required)
                  GET    {API_PREFIX}/books/{id}        (single book, cached)
                  PUT    {API_PREFIX}/books/{id}        (update, token required)
                  PATCH  {API_PREFIX}/books/{id}        (same as PUT)
                  DELETE {API_PREFIX}/books/{id}        (delete, token required)
    - auth.py:    POST   {API_PREFIX}/register, /login, /logout
                  GET    {API_PREFIX}/user
    - health.py:  GET    /health, {API_PREFIX}/ping

Routes stay THIN: extract the request data, call a service, pick the status
code. Business rules live in bookshelf.services.
"""
