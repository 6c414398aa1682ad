"""
Likes API routes.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from api.dependencies import get_current_user_id, get_dao
from domain.models import LikeStatus
from repositories.base import BookDAO, DAOError

router = APIRouter()
logger = logging.getLogger(__name__)


class LikeStatusResponse(BaseModel):
    status: str


class LikesCountResponse(BaseModel):
    count: int


class UnlikeRequest(BaseModel):
    book_id: int


def _require_user(user_id: Optional[str]) -> str:
    if user_id is None:
        raise HTTPException(status_code=401, detail="You need to log in")
    return user_id


@router.get("/check_like/{book_id}", response_model=LikeStatusResponse)
async def check_like_status(
    book_id: int,
    user_id: Optional[str] = Depends(get_current_user_id),
    dao: BookDAO = Depends(get_dao),
):
    """Whether the logged-in user likes the book."""
    if user_id is None:
        return LikeStatusResponse(status=LikeStatus.UNAUTHENTICATED.value)
    try:
        liked = dao.liked_by(book_id, user_id)
    except DAOError as e:
        logger.error("error checking like status: %s", e)
        return LikeStatusResponse(status=LikeStatus.ERROR.value)
    status = LikeStatus.LIKED if liked else LikeStatus.NOT_LIKED
    return LikeStatusResponse(status=status.value)


@router.get("/likes_count", response_model=LikesCountResponse)
async def likes_count(book_id: Optional[str] = None, dao: BookDAO = Depends(get_dao)):
    if not book_id:
        raise HTTPException(status_code=400, detail="book_id is required")
    try:
        parsed_id = int(book_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid book_id")
    try:
        return LikesCountResponse(count=dao.likes_count(parsed_id))
    except DAOError as e:
        logger.error("error counting likes: %s", e)
        raise HTTPException(status_code=500, detail="Error querying the database")


@router.post("/like", response_class=PlainTextResponse)
async def like_book(
    book_id: int = Form(...),
    user_id: Optional[str] = Depends(get_current_user_id),
    dao: BookDAO = Depends(get_dao),
):
    user_id = _require_user(user_id)
    try:
        dao.like_book(book_id, user_id)
    except DAOError as e:
        logger.error("error liking book %d: %s", book_id, e)
        raise HTTPException(status_code=500, detail="Error storing the like")
    return "Liked successfully"


@router.delete("/like", response_class=PlainTextResponse)
async def unlike_book(
    data: UnlikeRequest,
    user_id: Optional[str] = Depends(get_current_user_id),
    dao: BookDAO = Depends(get_dao),
):
    user_id = _require_user(user_id)
    logger.debug("trying to unlike book_id=(%s), user_id=(%s)", data.book_id, user_id)
    try:
        dao.unlike_book(data.book_id, user_id)
    except DAOError as e:
        logger.error("error unliking book %d: %s", data.book_id, e)
        raise HTTPException(status_code=500, detail="Error removing the like")
    return "Unliked successfully"
