"""
Backend selection at startup.
"""
import logging

from domain.models import BackendMode
from repositories.base import BookDAO
from repositories.books import PostgresBookDAO, SqliteBookDAO
from repositories.memory import InMemoryBookDAO
from services.library_loader import seed_from_catalogue
from settings import ConfigError, Settings

logger = logging.getLogger(__name__)


def new_dao(settings: Settings) -> BookDAO:
    """
    Build the store named by `settings.DB_MODE`.

    The memory and sqlite stores are seeded from the catalogue file; the
    postgres store is seeded on demand through /admin/initdb.
    """
    try:
        mode = BackendMode(settings.DB_MODE)
    except ValueError:
        raise ConfigError(f"unknown DB_MODE: {settings.DB_MODE!r}")

    if mode == BackendMode.MEMORY:
        dao: BookDAO = InMemoryBookDAO()
        seed_from_catalogue(dao, settings.LIBRARY_FILE, settings.IMAGES_DIR)
    elif mode == BackendMode.SQLITE:
        dao = SqliteBookDAO(settings.SQLITE_PATH)
        seed_from_catalogue(dao, settings.LIBRARY_FILE, settings.IMAGES_DIR)
    else:
        logger.info(
            "Connecting to postgres host=%s port=%s db=%s user=%s",
            settings.PG_HOST,
            settings.PG_PORT,
            settings.PG_DATABASE,
            settings.PG_USER,
        )
        dao = PostgresBookDAO(settings.postgres_url)

    logger.info("Using %s backend", mode.value)
    return dao
