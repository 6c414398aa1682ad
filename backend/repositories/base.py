"""
Storage-agnostic contract shared by every book backend.
"""
import base64
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Iterable, List, Optional

from domain.models import BookImage, BookInfo, BookSearchType


class DAOError(Exception):
    """Base error for persistence failures."""


class BookNotFoundError(DAOError):
    def __init__(self, book_id: int):
        super().__init__(f"book {book_id} does not exist")
        self.book_id = book_id


def encode_image(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def format_added_on(value) -> str:
    """Render a stored timestamp as YYYY-MM-DD."""
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    return str(value)[:10]


def parse_added_on(value: Optional[str]) -> datetime:
    """Parse a catalogue date, falling back to now for blank values."""
    if not value:
        return datetime.now()
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        return datetime.strptime(text[:10], "%Y-%m-%d")


def check_pagination(offset: int, limit: int) -> None:
    if offset < 0 or limit < 0:
        raise ValueError("offset and limit must be non-negative")


def check_search_type(search_type: BookSearchType) -> None:
    if search_type not in (BookSearchType.BY_TITLE, BookSearchType.BY_AUTHOR):
        raise ValueError(f"unsupported search type: {search_type}")


class BookDAO(ABC):
    """CRUD operations for books, their images, likes and users."""

    @abstractmethod
    def add_all(self, books: Iterable[BookInfo], images_dir: str) -> int:
        """Insert catalogue books keeping their ids; existing ids are skipped."""

    @abstractmethod
    def add_image_to_book(self, book_id: int, image_data: bytes) -> Optional[int]:
        ...

    @abstractmethod
    def add_user(self, user_id: str, email: str, name: str, oauth_identifier: str) -> None:
        ...

    @abstractmethod
    def get_user_email(self, user_id: str) -> Optional[str]:
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    @abstractmethod
    def create_book(self, book: BookInfo, image: Optional[bytes] = None) -> int:
        ...

    @abstractmethod
    def get_all_authors(self) -> List[str]:
        ...

    @abstractmethod
    def get_all_books(self) -> List[BookInfo]:
        ...

    @abstractmethod
    def get_book_by_id(self, book_id: int) -> BookInfo:
        ...

    @abstractmethod
    def get_book_count(self) -> int:
        ...

    @abstractmethod
    def get_books_with_pagination(self, offset: int, limit: int) -> List[BookInfo]:
        ...

    @abstractmethod
    def get_books_by_search_type(self, text: str, search_type: BookSearchType) -> List[BookInfo]:
        ...

    @abstractmethod
    def get_images_by_book_id(self, book_id: int) -> List[BookImage]:
        ...

    @abstractmethod
    def liked_by(self, book_id: int, user_id: str) -> bool:
        ...

    @abstractmethod
    def like_book(self, book_id: int, user_id: str) -> None:
        ...

    @abstractmethod
    def likes_count(self, book_id: int) -> int:
        ...

    @abstractmethod
    def ping(self) -> None:
        ...

    @abstractmethod
    def remove_image(self, image_id: int) -> bool:
        ...

    @abstractmethod
    def unlike_book(self, book_id: int, user_id: str) -> None:
        ...

    @abstractmethod
    def update_book(
        self,
        book_id: int,
        title: str,
        author: str,
        description: str,
        read: bool,
        goodreads_link: str,
    ) -> None:
        ...
