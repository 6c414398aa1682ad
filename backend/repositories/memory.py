"""
In-memory book repository for development.

Nothing survives a restart; the store is reseeded from the catalogue file.
"""
import logging
import threading
from copy import deepcopy
from datetime import date
from typing import Dict, Iterable, List, Optional, Set, Tuple

from domain.models import BookImage, BookInfo, BookSearchType
from repositories.base import (
    BookDAO,
    BookNotFoundError,
    DAOError,
    check_pagination,
    check_search_type,
    encode_image,
)
from storage.file_storage import ImageStorage

logger = logging.getLogger(__name__)


def _title_key(book: BookInfo):
    return (book.title, book.id)


class InMemoryBookDAO(BookDAO):
    """Map-based store: books by id, images by book id, liked book ids by user."""

    def __init__(self) -> None:
        self._books: Dict[int, BookInfo] = {}
        self._images: Dict[int, List[BookImage]] = {}
        self._likes: Dict[str, Set[int]] = {}
        self._users: Dict[str, Dict[str, str]] = {}
        self._next_image_id = 1
        self._lock = threading.RLock()

    def _with_images(self, book: BookInfo) -> BookInfo:
        result = deepcopy(book)
        result.images = list(self._images.get(book.id, []))
        return result

    def _store_image(self, book_id: int, data: bytes) -> Optional[int]:
        if not data:
            return None
        image_id = self._next_image_id
        self._next_image_id += 1
        self._images.setdefault(book_id, []).append(
            BookImage(image_id=image_id, book_id=book_id, image=encode_image(data))
        )
        return image_id

    def add_all(self, books: Iterable[BookInfo], images_dir: str) -> int:
        storage = ImageStorage(images_dir)
        with self._lock:
            # stage the whole batch so a missing image leaves the store untouched
            staged: List[Tuple[BookInfo, List[bytes]]] = []
            staged_ids: Set[int] = set()
            for book in books:
                logger.info("Reading: (%s)", book)
                if book.id in self._books or book.id in staged_ids:
                    logger.info("Book with ID: %d already exists, skipping", book.id)
                    continue
                image_data = [storage.read_image(name) for name in book.image_names]
                stored = deepcopy(book)
                stored.images = []
                staged.append((stored, image_data))
                staged_ids.add(book.id)

            for stored, image_data in staged:
                self._books[stored.id] = stored
                for data in image_data:
                    self._store_image(stored.id, data)
        return len(staged)

    def add_image_to_book(self, book_id: int, image_data: bytes) -> Optional[int]:
        if not image_data:
            return None
        with self._lock:
            if book_id not in self._books:
                raise BookNotFoundError(book_id)
            return self._store_image(book_id, image_data)

    def add_user(self, user_id: str, email: str, name: str, oauth_identifier: str) -> None:
        with self._lock:
            for other_id, other in self._users.items():
                if other_id != user_id and other["email"] == email:
                    raise DAOError(f"cannot store user {user_id}: email already in use")
            user = self._users.setdefault(user_id, {"oauth_identifier": oauth_identifier})
            user["email"] = email
            user["name"] = name

    def get_user_email(self, user_id: str) -> Optional[str]:
        with self._lock:
            user = self._users.get(user_id)
            return user["email"] if user else None

    def close(self) -> None:
        return None

    def create_book(self, book: BookInfo, image: Optional[bytes] = None) -> int:
        with self._lock:
            book_id = max(self._books, default=0) + 1
            stored = deepcopy(book)
            stored.id = book_id
            stored.images = []
            stored.image_names = []
            stored.added_on = book.added_on or date.today().isoformat()
            self._books[book_id] = stored
            self._store_image(book_id, image or b"")
            return book_id

    def get_all_authors(self) -> List[str]:
        with self._lock:
            return sorted({b.author for b in self._books.values()})

    def get_all_books(self) -> List[BookInfo]:
        with self._lock:
            books = sorted(self._books.values(), key=lambda b: (b.author, b.title, b.id))
            return [self._with_images(b) for b in books]

    def get_book_by_id(self, book_id: int) -> BookInfo:
        with self._lock:
            book = self._books.get(book_id)
            if book is None:
                raise BookNotFoundError(book_id)
            return self._with_images(book)

    def get_book_count(self) -> int:
        with self._lock:
            return len(self._books)

    def get_books_with_pagination(self, offset: int, limit: int) -> List[BookInfo]:
        check_pagination(offset, limit)
        with self._lock:
            books = sorted(self._books.values(), key=_title_key)
            return [deepcopy(b) for b in books[offset:offset + limit]]

    def get_books_by_search_type(self, text: str, search_type: BookSearchType) -> List[BookInfo]:
        check_search_type(search_type)
        needle = (text or "").lower()
        with self._lock:
            found = []
            for book in self._books.values():
                haystack = book.author if search_type == BookSearchType.BY_AUTHOR else book.title
                if needle in haystack.lower():
                    found.append(book)
            found.sort(key=_title_key)
            return [self._with_images(b) for b in found]

    def get_images_by_book_id(self, book_id: int) -> List[BookImage]:
        with self._lock:
            return list(self._images.get(book_id, []))

    def liked_by(self, book_id: int, user_id: str) -> bool:
        with self._lock:
            return book_id in self._likes.get(user_id, set())

    def like_book(self, book_id: int, user_id: str) -> None:
        with self._lock:
            if book_id not in self._books:
                raise DAOError(f"cannot like book {book_id}: no such book")
            if user_id not in self._users:
                raise DAOError(f"cannot like book {book_id}: unknown user {user_id}")
            self._likes.setdefault(user_id, set()).add(book_id)

    def likes_count(self, book_id: int) -> int:
        with self._lock:
            return sum(1 for liked in self._likes.values() if book_id in liked)

    def ping(self) -> None:
        return None

    def remove_image(self, image_id: int) -> bool:
        with self._lock:
            for images in self._images.values():
                for index, image in enumerate(images):
                    if image.image_id == image_id:
                        del images[index]
                        return True
        return False

    def unlike_book(self, book_id: int, user_id: str) -> None:
        with self._lock:
            self._likes.get(user_id, set()).discard(book_id)

    def update_book(
        self,
        book_id: int,
        title: str,
        author: str,
        description: str,
        read: bool,
        goodreads_link: str,
    ) -> None:
        with self._lock:
            book = self._books.get(book_id)
            if book is None:
                raise BookNotFoundError(book_id)
            book.title = title
            book.author = author
            book.description = description
            book.has_been_read = read
            book.goodreads_link = goodreads_link
