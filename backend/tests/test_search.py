import pytest

from domain.models import BookInfo, BookSearchType
from repositories import InMemoryBookDAO
from services.search import matches, search_books, unique_search_types


@pytest.fixture
def dao():
    store = InMemoryBookDAO()
    store.add_all(
        [
            BookInfo(id=1, title="Rayuela", author="Julio Cortázar"),
            BookInfo(id=2, title="Ficciones", author="Jorge Luis Borges"),
            BookInfo(id=3, title="Borges y yo", author="Jorge Luis Borges"),
        ],
        "images",
    )
    return store


def test_unique_search_types_defaults_to_title():
    assert unique_search_types(None) == ["byTitle"]
    assert unique_search_types(" , ") == ["byTitle"]


def test_unique_search_types_drops_repeats_in_order():
    assert unique_search_types("byAuthor,byTitle,byAuthor") == ["byAuthor", "byTitle"]


def test_search_type_parse_ignores_case():
    assert BookSearchType.parse("BYAUTHOR") == BookSearchType.BY_AUTHOR
    assert BookSearchType.parse("isbn") == BookSearchType.UNKNOWN


def test_search_books_concatenates_per_type(dao):
    results = search_books(dao, "borges", ["byTitle", "byAuthor"])
    assert [b.id for b in results] == [3, 3, 2]


def test_search_books_unknown_type_raises(dao):
    with pytest.raises(ValueError):
        search_books(dao, "x", ["byIsbn"])


def test_matches_selected_fields_only():
    book = BookInfo(id=1, title="Rayuela", author="Julio Cortázar")
    assert matches(book, "RAY", by_title=True, by_author=False)
    assert not matches(book, "julio", by_title=True, by_author=False)
    assert matches(book, "julio", by_title=False, by_author=True)
