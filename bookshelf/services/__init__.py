# Services package init
"""
Bookshelf API — Services Layer
===============================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Services take a session plus plain data, apply the rules and return
       domain objects. Routes receive them through FastAPI dependencies.

Service Inventory:
    - BookCache (abstract): read-through cache of single-book snapshots
    - InMemoryBookCache / RedisBookCache / NullBookCache: cache backends
    - BookValidator: field rules and ISBN uniqueness for create/update
    - BookStore: persistence of books (ids, pagination, unique isbn)
    - book_resource: JSON representation with hypermedia links
    - BookService: orchestrates validate → invalidate → persist → invalidate
    - CredentialService: registration, login, bearer tokens
"""
