"""
Book repository backed by SQLAlchemy (SQLite or PostgreSQL).
"""
import functools
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from db import build_engine, init_db, make_session_factory
from domain.models import BookImage, BookInfo, BookSearchType
from repositories.base import (
    BookDAO,
    BookNotFoundError,
    DAOError,
    check_pagination,
    check_search_type,
    encode_image,
    format_added_on,
    parse_added_on,
)
from repositories.models import BookImageORM, BookLikeORM, BookORM, UserORM
from storage.file_storage import ImageStorage

logger = logging.getLogger(__name__)


def _translate_errors(method):
    """Surface driver failures as DAOError; DAOError itself passes through."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            raise DAOError(f"{method.__name__} failed: {e}") from e

    return wrapper


def _images_from_orm(images: Iterable[BookImageORM]) -> List[BookImage]:
    return [
        BookImage(image_id=img.image_id, book_id=img.book_id, image=encode_image(img.image))
        for img in images
        if img.image
    ]


def _book_from_orm(orm: BookORM, with_images: bool = True) -> BookInfo:
    return BookInfo(
        id=orm.id,
        title=orm.title,
        author=orm.author,
        description=orm.description or "",
        has_been_read=bool(orm.read),
        images=_images_from_orm(orm.images) if with_images else [],
        added_on=format_added_on(orm.added_on),
        goodreads_link=orm.goodreads_link or "",
    )


class SqlBookDAO(BookDAO):
    """CRUD operations shared by the SQL backends."""

    def __init__(self, database_url: str):
        self.engine = build_engine(database_url)
        self.SessionLocal = make_session_factory(self.engine)

    def create_schema(self) -> None:
        init_db(self.engine)

    def _search_column(self, search_type: BookSearchType):
        return BookORM.author if search_type == BookSearchType.BY_AUTHOR else BookORM.title

    @_translate_errors
    def add_all(self, books: Iterable[BookInfo], images_dir: str) -> int:
        storage = ImageStorage(images_dir)
        inserted = 0
        seen: set[int] = set()
        with self.SessionLocal() as session:
            for book in books:
                logger.info("Reading: (%s)", book)
                if book.id in seen or session.get(BookORM, book.id) is not None:
                    logger.info("Book with ID: %d already exists, skipping", book.id)
                    continue
                seen.add(book.id)
                orm = BookORM(
                    id=book.id,
                    title=book.title,
                    author=book.author,
                    description=book.description,
                    read=book.has_been_read,
                    added_on=parse_added_on(book.added_on),
                    goodreads_link=book.goodreads_link,
                )
                for image_name in book.image_names:
                    orm.images.append(BookImageORM(image=storage.read_image(image_name)))
                session.add(orm)
                inserted += 1
            session.commit()
        self._sync_id_sequence()
        return inserted

    def _sync_id_sequence(self) -> None:
        """Move the PostgreSQL id sequence past explicitly inserted ids."""
        if self.engine.dialect.name != "postgresql":
            return
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    "SELECT setval(pg_get_serial_sequence('books', 'id'), "
                    "COALESCE((SELECT MAX(id) FROM books), 0) + 1, false)"
                )
            )

    @_translate_errors
    def add_image_to_book(self, book_id: int, image_data: bytes) -> Optional[int]:
        if not image_data:
            return None
        with self.SessionLocal() as session:
            if session.get(BookORM, book_id) is None:
                raise BookNotFoundError(book_id)
            orm = BookImageORM(book_id=book_id, image=image_data)
            session.add(orm)
            session.commit()
            return orm.image_id

    @_translate_errors
    def add_user(self, user_id: str, email: str, name: str, oauth_identifier: str) -> None:
        with self.SessionLocal() as session:
            orm = session.get(UserORM, user_id)
            if orm is None:
                orm = UserORM(user_id=user_id, oauth_identifier=oauth_identifier)
            orm.email = email
            orm.name = name
            session.add(orm)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DAOError(f"cannot store user {user_id}: {e.orig}") from e

    @_translate_errors
    def get_user_email(self, user_id: str) -> Optional[str]:
        with self.SessionLocal() as session:
            orm = session.get(UserORM, user_id)
            return orm.email if orm else None

    def close(self) -> None:
        self.engine.dispose()

    @_translate_errors
    def create_book(self, book: BookInfo, image: Optional[bytes] = None) -> int:
        with self.SessionLocal() as session:
            orm = BookORM(
                title=book.title,
                author=book.author,
                description=book.description,
                read=book.has_been_read,
                added_on=parse_added_on(book.added_on) if book.added_on else datetime.now(),
                goodreads_link=book.goodreads_link,
            )
            if image:
                orm.images.append(BookImageORM(image=image))
            session.add(orm)
            session.commit()
            return orm.id

    @_translate_errors
    def get_all_authors(self) -> List[str]:
        with self.SessionLocal() as session:
            rows = session.execute(select(BookORM.author).distinct().order_by(BookORM.author))
            return [author for (author,) in rows]

    @_translate_errors
    def get_all_books(self) -> List[BookInfo]:
        with self.SessionLocal() as session:
            query = (
                select(BookORM)
                .options(selectinload(BookORM.images))
                .order_by(BookORM.author, BookORM.title)
            )
            return [_book_from_orm(b) for b in session.scalars(query)]

    @_translate_errors
    def get_book_by_id(self, book_id: int) -> BookInfo:
        with self.SessionLocal() as session:
            orm = session.get(BookORM, book_id, options=[selectinload(BookORM.images)])
            if orm is None:
                raise BookNotFoundError(book_id)
            return _book_from_orm(orm)

    @_translate_errors
    def get_book_count(self) -> int:
        with self.SessionLocal() as session:
            return session.scalar(select(func.count(BookORM.id))) or 0

    @_translate_errors
    def get_books_with_pagination(self, offset: int, limit: int) -> List[BookInfo]:
        check_pagination(offset, limit)
        with self.SessionLocal() as session:
            query = select(BookORM).order_by(BookORM.title, BookORM.id).limit(limit).offset(offset)
            return [_book_from_orm(b, with_images=False) for b in session.scalars(query)]

    @_translate_errors
    def get_books_by_search_type(self, text: str, search_type: BookSearchType) -> List[BookInfo]:
        check_search_type(search_type)
        column = self._search_column(search_type)
        with self.SessionLocal() as session:
            query = select(BookORM).options(selectinload(BookORM.images))
            if text:
                query = query.where(func.lower(column).contains(text.lower(), autoescape=True))
            query = query.order_by(BookORM.title, BookORM.id)
            return [_book_from_orm(b) for b in session.scalars(query)]

    @_translate_errors
    def get_images_by_book_id(self, book_id: int) -> List[BookImage]:
        with self.SessionLocal() as session:
            query = (
                select(BookImageORM)
                .where(BookImageORM.book_id == book_id)
                .order_by(BookImageORM.image_id)
            )
            return _images_from_orm(session.scalars(query))

    @_translate_errors
    def liked_by(self, book_id: int, user_id: str) -> bool:
        with self.SessionLocal() as session:
            query = select(BookLikeORM.like_id).where(
                BookLikeORM.book_id == book_id, BookLikeORM.user_id == user_id
            )
            return session.scalar(query) is not None

    @_translate_errors
    def like_book(self, book_id: int, user_id: str) -> None:
        if self.liked_by(book_id, user_id):
            return
        with self.SessionLocal() as session:
            session.add(BookLikeORM(book_id=book_id, user_id=user_id))
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                # a concurrent like for the same pair is fine
                if self.liked_by(book_id, user_id):
                    return
                raise DAOError(f"cannot like book {book_id} for user {user_id}: {e.orig}") from e

    @_translate_errors
    def likes_count(self, book_id: int) -> int:
        with self.SessionLocal() as session:
            query = select(func.count(BookLikeORM.like_id)).where(BookLikeORM.book_id == book_id)
            return session.scalar(query) or 0

    def ping(self) -> None:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise DAOError(f"database unreachable: {e}") from e

    @_translate_errors
    def remove_image(self, image_id: int) -> bool:
        with self.SessionLocal() as session:
            orm = session.get(BookImageORM, image_id)
            if orm is None:
                return False
            session.delete(orm)
            session.commit()
            return True

    @_translate_errors
    def unlike_book(self, book_id: int, user_id: str) -> None:
        with self.SessionLocal() as session:
            session.query(BookLikeORM).filter(
                BookLikeORM.book_id == book_id, BookLikeORM.user_id == user_id
            ).delete()
            session.commit()

    @_translate_errors
    def update_book(
        self,
        book_id: int,
        title: str,
        author: str,
        description: str,
        read: bool,
        goodreads_link: str,
    ) -> None:
        with self.SessionLocal() as session:
            orm = session.get(BookORM, book_id)
            if orm is None:
                raise BookNotFoundError(book_id)
            orm.title = title
            orm.author = author
            orm.description = description
            orm.read = read
            orm.goodreads_link = goodreads_link
            session.add(orm)
            session.commit()


class SqliteBookDAO(SqlBookDAO):
    """Embedded file-backed store; creates its own schema on open."""

    def __init__(self, db_path: str):
        super().__init__(f"sqlite:///{db_path}")
        self.create_schema()


class PostgresBookDAO(SqlBookDAO):
    """Relational server store; seeding is an explicit admin action."""

    def __init__(self, database_url: str, create_schema: bool = True):
        super().__init__(database_url)
        if create_schema:
            self.create_schema()
