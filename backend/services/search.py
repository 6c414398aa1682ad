"""
Search helpers shared by the web pages and the command-line tool.
"""
from typing import Iterable, List

from domain.models import BookInfo, BookSearchType
from repositories.base import BookDAO

DEFAULT_SEARCH_TYPE = BookSearchType.BY_TITLE.value


def unique_search_types(raw: str | None) -> List[str]:
    """Split a comma-separated list, dropping blanks and repeats in order."""
    seen: List[str] = []
    for item in (raw or "").split(","):
        item = item.strip()
        if item and item not in seen:
            seen.append(item)
    return seen or [DEFAULT_SEARCH_TYPE]


def search_books(dao: BookDAO, text: str, search_types: Iterable[str]) -> List[BookInfo]:
    """
    Run one search per requested type and concatenate the results.

    Raises:
        ValueError: if a search type is not byTitle or byAuthor
    """
    results: List[BookInfo] = []
    for raw in search_types:
        search_type = BookSearchType.parse(raw)
        if search_type == BookSearchType.UNKNOWN:
            raise ValueError(f"unknown search type: {raw!r}")
        results.extend(dao.get_books_by_search_type(text, search_type))
    return results


def matches(book: BookInfo, query: str, by_title: bool, by_author: bool) -> bool:
    """Case-insensitive substring match on the selected fields."""
    needle = query.lower()
    if by_title and needle in book.title.lower():
        return True
    if by_author and needle in book.author.lower():
        return True
    return False
