# Importing the models registers them with Base.metadata (Alembic, test schema setup)
from bookshelf.models.book import Book
from bookshelf.models.user import PersonalAccessToken, User

__all__ = ["Book", "PersonalAccessToken", "User"]
