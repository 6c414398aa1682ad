"""
Books API routes.

Admin forms for adding and modifying books plus the JSON endpoints used by
the pages' scripts.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from api.dependencies import (
    PageError,
    get_dao,
    get_settings,
    render_error,
    render_page,
    require_admin,
    require_captcha,
)
from domain.models import BookImage, BookInfo, BookSearchType
from repositories.base import BookDAO, BookNotFoundError, DAOError
from services.library_loader import CatalogueError, seed_from_catalogue
from settings import Settings
from storage.file_storage import is_image

router = APIRouter()
logger = logging.getLogger(__name__)


class BookImageResponse(BaseModel):
    image_id: int
    book_id: int
    image: str


class BookDetailResponse(BaseModel):
    id: int
    title: str
    author: str
    description: str
    images: List[BookImageResponse]


class BooksCountResponse(BaseModel):
    booksCount: int


class StatusResponse(BaseModel):
    status: str


def image_to_response(image: BookImage) -> BookImageResponse:
    return BookImageResponse(image_id=image.image_id, book_id=image.book_id, image=image.image)


def book_to_response(book: BookInfo) -> BookDetailResponse:
    """Convert domain BookInfo to API response."""
    return BookDetailResponse(
        id=book.id,
        title=book.title,
        author=book.author,
        description=book.description,
        images=[image_to_response(img) for img in book.images],
    )


async def read_upload(upload: Optional[UploadFile], max_bytes: int) -> bytes:
    """
    Read an optional uploaded image.

    Browsers post an empty part when no file was chosen; that reads as b"".
    """
    if upload is None:
        return b""
    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise PageError(413, f"image larger than {max_bytes} bytes")
    if data and not is_image(data):
        raise PageError(400, f"{upload.filename or 'upload'} is not an image")
    return data


@router.get("/admin/add")
async def add_book_page(request: Request, _admin: str = Depends(require_admin)):
    return render_page(request, "add_book.html")


@router.post("/addbook", response_class=PlainTextResponse)
async def add_book(
    title: str = Form(...),
    author: str = Form(...),
    description: str = Form(""),
    read: Optional[str] = Form(None),
    goodreadsLink: str = Form(""),
    image: Optional[UploadFile] = File(None),
    _admin: str = Depends(require_admin),
    _captcha: None = Depends(require_captcha),
    dao: BookDAO = Depends(get_dao),
    settings: Settings = Depends(get_settings),
):
    """Create a book from the admin form."""
    image_data = await read_upload(image, settings.MAX_UPLOAD_BYTES)
    book = BookInfo(
        title=title.strip(),
        author=author.strip(),
        description=description,
        has_been_read=read == "on",
        goodreads_link=goodreadsLink.strip(),
    )
    if not book.title or not book.author:
        raise PageError(400, "title and author are required")
    try:
        book_id = dao.create_book(book, image_data or None)
    except DAOError as e:
        logger.error("cannot create book %s: %s", book, e)
        raise PageError(500, "error saving the book")
    logger.info("Created book %d", book_id)
    return "Book added successfully"


@router.get("/admin/modify")
async def modify_book_page(
    request: Request,
    book_id: str = "",
    _admin: str = Depends(require_admin),
    dao: BookDAO = Depends(get_dao),
):
    try:
        book = dao.get_book_by_id(int(book_id))
    except ValueError:
        return render_error(request, "wrong ID", status_code=400)
    except BookNotFoundError as e:
        return render_error(request, str(e), status_code=404)
    except DAOError as e:
        logger.error("error getting book %s: %s", book_id, e)
        return render_error(request, "error getting information from the database")
    return render_page(request, "modify.html", book=book, goodreads_link=book.goodreads_link)


@router.post("/modify", response_class=PlainTextResponse)
async def modify_book(
    book_id: int = Form(...),
    title: str = Form(...),
    author: str = Form(...),
    description: str = Form(""),
    read: Optional[str] = Form(None),
    goodreadsLink: str = Form(""),
    image: Optional[UploadFile] = File(None),
    _admin: str = Depends(require_admin),
    _captcha: None = Depends(require_captcha),
    dao: BookDAO = Depends(get_dao),
    settings: Settings = Depends(get_settings),
):
    """Overwrite a book's fields, appending the uploaded image if any."""
    image_data = await read_upload(image, settings.MAX_UPLOAD_BYTES)
    logger.debug(
        "bookID=(%s), title=(%s), author=(%s), read=(%s), goodreadsLink=(%s)",
        book_id, title, author, read, goodreadsLink,
    )
    try:
        dao.update_book(
            book_id,
            title.strip(),
            author.strip(),
            description,
            read == "on",
            goodreadsLink.strip(),
        )
        dao.add_image_to_book(book_id, image_data)
    except BookNotFoundError as e:
        raise PageError(404, str(e))
    except DAOError as e:
        logger.error("cannot modify book %d: %s", book_id, e)
        raise PageError(500, "error saving the book")
    return "Book modified successfully"


@router.post("/removeimage", response_class=PlainTextResponse)
async def remove_image(
    image_id: int = Form(...),
    _admin: str = Depends(require_admin),
    dao: BookDAO = Depends(get_dao),
):
    logger.info("about to remove image %d", image_id)
    try:
        removed = dao.remove_image(image_id)
    except DAOError as e:
        logger.error("cannot remove image %d: %s", image_id, e)
        raise HTTPException(status_code=500, detail="Error removing image")
    if not removed:
        raise HTTPException(status_code=404, detail="Image not found")
    return "Image removed"


@router.get("/admin/initdb", response_model=StatusResponse)
def create_db_from_file(
    _admin: str = Depends(require_admin),
    dao: BookDAO = Depends(get_dao),
    settings: Settings = Depends(get_settings),
):
    """Seed the store from the catalogue file."""
    try:
        seed_from_catalogue(dao, settings.LIBRARY_FILE, settings.IMAGES_DIR)
    except (CatalogueError, DAOError) as e:
        logger.error("error: %s", e)
        return StatusResponse(status="error")
    return StatusResponse(status="OK")


@router.get("/api/books", response_model=List[BookDetailResponse])
async def books_list(start_with: str = "", dao: BookDAO = Depends(get_dao)):
    """Books whose author contains `start_with`."""
    try:
        books = dao.get_books_by_search_type(start_with, BookSearchType.BY_AUTHOR)
    except DAOError as e:
        logger.error("error: %s", e)
        raise HTTPException(status_code=500, detail="Database error")
    return [book_to_response(b) for b in books]


@router.get("/api/booksCount", response_model=BooksCountResponse)
async def books_count(dao: BookDAO = Depends(get_dao)):
    try:
        return BooksCountResponse(booksCount=dao.get_book_count())
    except DAOError as e:
        logger.error("error: %s", e)
        raise HTTPException(status_code=500, detail="Database error")
