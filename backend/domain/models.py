"""
Core domain models for the book catalogue.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class BackendMode(str, Enum):
    """Persistence backend selected at startup."""
    MEMORY = "memory"
    SQLITE = "sqlite"
    POSTGRES = "postgres"


class BookSearchType(str, Enum):
    """Field a search text is matched against."""
    UNKNOWN = "unknown"
    BY_TITLE = "byTitle"
    BY_AUTHOR = "byAuthor"

    @classmethod
    def parse(cls, raw: str) -> "BookSearchType":
        value = (raw or "").strip().lower()
        if value == "bytitle":
            return cls.BY_TITLE
        if value == "byauthor":
            return cls.BY_AUTHOR
        return cls.UNKNOWN


class LikeStatus(str, Enum):
    LIKED = "liked"
    NOT_LIKED = "not-liked"
    UNAUTHENTICATED = "unauthenticated"
    ERROR = "error"


@dataclass
class BookImage:
    """A stored image, base64 encoded for embedding in pages."""
    image_id: int
    book_id: int
    image: str


@dataclass
class BookInfo:
    """
    A catalogued book.

    `image_names` only matters when seeding from the catalogue file; stored
    images come back through `images`.
    """
    id: int = 0
    title: str = ""
    author: str = ""
    description: str = ""
    has_been_read: bool = False
    image_names: List[str] = field(default_factory=list)
    images: List[BookImage] = field(default_factory=list)
    added_on: str = ""
    goodreads_link: str = ""

    def __str__(self) -> str:
        return f'{self.id}) "{self.title}" by "{self.author}"'


@dataclass
class UserInfo:
    """Profile returned by the OAuth provider's userinfo endpoint."""
    sub: str
    name: str = ""
    nickname: str = ""
    picture: str = ""
    email: str = ""
    email_verified: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserInfo":
        return cls(
            sub=data.get("sub", ""),
            name=data.get("name", "") or "",
            nickname=data.get("nickname", "") or "",
            picture=data.get("picture", "") or "",
            email=data.get("email", "") or "",
            email_verified=bool(data.get("email_verified", False)),
        )

    def __str__(self) -> str:
        return (
            f"Name=({self.name}), email=({self.email}), nickname=({self.nickname}), "
            f"verified=({self.email_verified}), sub=({self.sub})"
        )
