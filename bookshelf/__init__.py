"""
Bookshelf API — Application Package Initializer
================================================

What: Marks the `bookshelf` directory as a Python package.
Why:  Enables module imports like `from bookshelf.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │   Routes + Dependencies (HTTP)      │  ← auth guard, id resolution, status codes
    ├─────────────────────────────────────┤
    │   Services (Business Logic)         │  ← validator → store → cache, shaping
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database / Cache (Persistence)    │  ← async sessions, key-value cache
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
