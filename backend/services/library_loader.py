"""
Catalogue loader.

The catalogue is a TOML file holding an array of `[[Book]]` tables:

    [[Book]]
    ID = 1
    Title = "Rayuela"
    Author = "Julio Cortázar"
    Description = "..."
    HasBeenRead = true
    ImageNames = ["rayuela.jpg"]
    AddedOn = "2023-10-01"
    GoodreadsLink = "https://www.goodreads.com/book/show/53413"

Keys are matched case-insensitively.
"""
from __future__ import annotations

import logging
import time
import tomllib
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List

from domain.models import BookInfo

logger = logging.getLogger(__name__)

DEFAULT_LIBRARY_FILE = Path("library") / "books_db.toml"


class CatalogueError(Exception):
    """The catalogue file or one of its images could not be read."""


def _lower_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {str(k).lower(): v for k, v in data.items()}


def _as_date_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def book_from_entry(entry: Dict[str, Any]) -> BookInfo:
    data = _lower_keys(entry)
    if "id" not in data:
        raise CatalogueError(f"catalogue entry without ID: {entry!r}")
    try:
        book_id = int(data["id"])
    except (TypeError, ValueError):
        raise CatalogueError(f"catalogue entry with invalid ID: {data['id']!r}")
    return BookInfo(
        id=book_id,
        title=str(data.get("title", "")),
        author=str(data.get("author", "")),
        description=str(data.get("description", "") or ""),
        has_been_read=bool(data.get("hasbeenread", False)),
        image_names=[str(name) for name in data.get("imagenames", []) or []],
        added_on=_as_date_text(data.get("addedon")),
        goodreads_link=str(data.get("goodreadslink", "") or ""),
    )


def parse_library(text: str) -> List[BookInfo]:
    """Parse catalogue TOML text into books, in file order."""
    try:
        document = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise CatalogueError(f"invalid catalogue: {e}") from e
    entries = _lower_keys(document).get("book", [])
    if not isinstance(entries, list):
        raise CatalogueError("catalogue must hold an array of [[Book]] tables")
    return [book_from_entry(entry) for entry in entries]


def load_library(path: str | Path = DEFAULT_LIBRARY_FILE) -> List[BookInfo]:
    """Read and parse the catalogue file."""
    library_path = Path(path)
    try:
        text = library_path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogueError(f"cannot read catalogue {library_path}: {e}") from e
    return parse_library(text)


def seed_from_catalogue(dao, library_file: str | Path, images_dir: str) -> int:
    """
    Load the catalogue into a store, skipping books it already holds.

    Returns:
        Number of books inserted
    """
    books = load_library(library_file)
    start = time.perf_counter()
    try:
        inserted = dao.add_all(books, images_dir)
    except (OSError, ValueError) as e:
        raise CatalogueError(f"cannot read catalogue image: {e}") from e
    logger.info(
        "Books loaded in: %.2f seconds (%d new of %d)",
        time.perf_counter() - start,
        inserted,
        len(books),
    )
    return inserted
