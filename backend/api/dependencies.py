"""
Shared request dependencies and page rendering helpers.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import Depends, Form, Request
from fastapi.templating import Jinja2Templates

from repositories.base import BookDAO
from services.captcha import verify_captcha
from settings import Settings

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"
SESSION_STATE_KEY = "oauth_state"


class PageError(Exception):
    """Rendered as the HTML error page with the given status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_dao(request: Request) -> BookDAO:
    return request.app.state.dao


def get_current_user_id(request: Request) -> Optional[str]:
    """User id stored in the session cookie, or None when logged out."""
    user_id = request.session.get(SESSION_USER_KEY)
    return user_id if isinstance(user_id, str) and user_id else None


def require_admin(
    user_id: Optional[str] = Depends(get_current_user_id),
    dao: BookDAO = Depends(get_dao),
    settings: Settings = Depends(get_settings),
) -> str:
    """Only the configured main app user may change the catalogue."""
    if user_id is None:
        raise PageError(401, "You need to log in to access this page")
    email = dao.get_user_email(user_id)
    if not settings.MAIN_APP_USER or email != settings.MAIN_APP_USER:
        logger.warning("user %s (%s) tried to reach an admin page", user_id, email)
        raise PageError(403, "Only admins can access this page")
    return user_id


def require_captcha(
    request: Request,
    settings: Settings = Depends(get_settings),
    token: Optional[str] = Form(None, alias="g-recaptcha-response"),
) -> None:
    if not settings.captcha_enabled:
        logger.debug("captcha secret not configured; skipping verification")
        return
    client_ip = request.client.host if request.client else None
    if not verify_captcha(settings.CAPTCHA_SECRET_KEY, token, client_ip):
        raise PageError(403, "Captcha verification failed")


def page_context(request: Request, **extra: Any) -> Dict[str, Any]:
    settings: Settings = request.app.state.settings
    context = {
        "year": datetime.now().strftime("%Y"),
        "site_key": settings.CAPTCHA_SITE_KEY,
        "logged_in": get_current_user_id(request) is not None,
    }
    context.update(extra)
    return context


def render_page(request: Request, name: str, status_code: int = 200, **extra: Any):
    templates: Jinja2Templates = request.app.state.templates
    return templates.TemplateResponse(
        request, name, page_context(request, **extra), status_code=status_code
    )


def render_error(request: Request, message: str, status_code: int = 500):
    return render_page(request, "error5xx.html", status_code=status_code, error_message=message)
