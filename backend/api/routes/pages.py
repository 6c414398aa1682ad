"""
HTML page routes for browsing the catalogue.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from api.dependencies import get_dao, render_error, render_page
from repositories.base import BookDAO, BookNotFoundError, DAOError
from services.search import search_books, unique_search_types

router = APIRouter()
logger = logging.getLogger(__name__)

DB_ERROR_MESSAGE = "error getting information from the database"


@router.get("/")
async def index_page(request: Request):
    return render_page(request, "index.html")


@router.get("/about")
async def about_page(request: Request):
    return render_page(request, "about.html")


@router.get("/contact")
async def contact_page(request: Request):
    return render_page(request, "contact.html")


@router.get("/error")
async def error_page(request: Request):
    return render_page(request, "error5xx.html", error_message="Something went wrong")


@router.get("/allbooks")
async def all_books_page(request: Request, dao: BookDAO = Depends(get_dao)):
    """All books ordered by author."""
    try:
        books = dao.get_all_books()
    except DAOError as e:
        logger.error("Error getting books: %s", e)
        return render_error(request, DB_ERROR_MESSAGE)
    return render_page(request, "allbooks.html", results=books)


@router.get("/books_by_author")
async def books_by_author_page(request: Request, dao: BookDAO = Depends(get_dao)):
    try:
        authors = dao.get_all_authors()
    except DAOError as e:
        logger.error("Error getting authors: %s", e)
        return render_error(request, DB_ERROR_MESSAGE)
    return render_page(request, "books_by_author.html", authors=authors)


@router.get("/search_books")
async def search_books_page(
    request: Request,
    textSearch: str = "",
    searchType: Optional[str] = None,
    dao: BookDAO = Depends(get_dao),
):
    """Search by title and/or author, e.g. ?textSearch=borges&searchType=byTitle,byAuthor"""
    search_types = unique_search_types(searchType)
    logger.debug("textSearch=(%s), searchTypes=(%s)", textSearch, search_types)
    try:
        results = search_books(dao, textSearch, search_types)
    except ValueError as e:
        logger.info("Unknown book search type: %s", e)
        return render_error(request, "Wrong search", status_code=400)
    except DAOError as e:
        logger.error("error getting info from the database: %s", e)
        return render_error(request, DB_ERROR_MESSAGE)
    return render_page(
        request,
        "search_books.html",
        results=results,
        text_search=textSearch,
        search_types=search_types,
    )


@router.get("/book_info")
async def book_info_page(request: Request, id: str = "", dao: BookDAO = Depends(get_dao)):
    try:
        book_id = int(id)
    except ValueError:
        return RedirectResponse("/error", status_code=303)
    try:
        book = dao.get_book_by_id(book_id)
    except BookNotFoundError as e:
        return render_error(request, str(e), status_code=404)
    except DAOError as e:
        logger.error("error getting book %d: %s", book_id, e)
        return render_error(request, DB_ERROR_MESSAGE)
    return render_page(request, "book_info.html", results=[book], book=book)
