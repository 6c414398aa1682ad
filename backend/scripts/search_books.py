"""Search the catalogue file from the command line.

Usage:
    python -m scripts.search_books --title "rayuela"
    python -m scripts.search_books --author borges
    python -m scripts.search_books cortázar

A bare query matches both titles and authors.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from domain.models import BookInfo
from services.library_loader import DEFAULT_LIBRARY_FILE, CatalogueError, load_library
from services.search import matches


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search the book catalogue.")
    parser.add_argument("--title", default="", help="Search by title.")
    parser.add_argument("--author", default="", help="Search by author.")
    parser.add_argument(
        "--library",
        default=str(DEFAULT_LIBRARY_FILE),
        help="Path to the catalogue TOML file.",
    )
    parser.add_argument("query", nargs="?", default="", help="Search titles and authors.")
    return parser


def format_book(book: BookInfo) -> str:
    lines = [f'"{book.title}" by {book.author}']
    if book.description:
        lines.append(book.description)
    lines.append(f"id: {book.id}")
    lines.append(f"Added on: {book.added_on}")
    lines.append(f"Read: {'yes' if book.has_been_read else 'no'}")
    return "\n".join(lines)


def run_search(books: List[BookInfo], query: str, by_title: bool, by_author: bool) -> int:
    found = 0
    for book in books:
        if matches(book, query, by_title, by_author):
            print(format_book(book))
            print()
            found += 1
    print(f"{found} books found (from {len(books)} books documented).")
    return found


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.title:
        query, by_title, by_author = args.title, True, False
    elif args.author:
        query, by_title, by_author = args.author, False, True
    elif args.query:
        query, by_title, by_author = args.query, True, True
    else:
        parser.print_usage()
        return 2

    try:
        books = load_library(args.library)
    except CatalogueError as e:
        print(f"Error loading the catalogue: {e}", file=sys.stderr)
        return 1

    run_search(books, query, by_title, by_author)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
