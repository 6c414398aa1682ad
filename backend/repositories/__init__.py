from .base import BookDAO, BookNotFoundError, DAOError
from .books import PostgresBookDAO, SqlBookDAO, SqliteBookDAO
from .memory import InMemoryBookDAO
from .factory import new_dao
from . import models

__all__ = [
    "BookDAO",
    "BookNotFoundError",
    "DAOError",
    "InMemoryBookDAO",
    "PostgresBookDAO",
    "SqlBookDAO",
    "SqliteBookDAO",
    "new_dao",
    "models",
]
