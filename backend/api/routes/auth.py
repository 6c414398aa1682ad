"""
Login routes delegating to the OAuth provider.
"""
import logging
import secrets

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from api.dependencies import (
    SESSION_STATE_KEY,
    SESSION_USER_KEY,
    get_dao,
    get_settings,
    render_error,
)
from repositories.base import BookDAO, DAOError
from services.auth import (
    OAUTH_IDENTIFIER,
    OAuthConfig,
    OAuthError,
    auth_code_url,
    exchange_code,
    fetch_user_info,
    generate_state,
)
from settings import Settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/ingresar")
async def login(request: Request, settings: Settings = Depends(get_settings)):
    """Start the authorization-code flow."""
    state = generate_state()
    request.session[SESSION_STATE_KEY] = state
    url = auth_code_url(OAuthConfig.from_settings(settings), state)
    return RedirectResponse(url, status_code=303)


@router.get("/auth/callback")
def auth_callback(
    request: Request,
    code: str = "",
    state: str = "",
    dao: BookDAO = Depends(get_dao),
    settings: Settings = Depends(get_settings),
):
    expected_state = request.session.pop(SESSION_STATE_KEY, None)
    if not expected_state or not secrets.compare_digest(expected_state.encode(), state.encode()):
        logger.warning("OAuth callback with unexpected state")
        return render_error(request, "Invalid login state", status_code=400)

    config = OAuthConfig.from_settings(settings)
    try:
        access_token = exchange_code(config, code)
        user = fetch_user_info(config, access_token)
    except OAuthError as e:
        logger.error("cannot get user info from the OAuth provider: %s", e)
        return render_error(request, "cannot get user info from the login provider")

    try:
        dao.add_user(user.sub, user.email, user.name, OAUTH_IDENTIFIER)
    except DAOError as e:
        logger.error("cannot store user %s: %s", user.sub, e)
        return render_error(request, "Error saving the user in the database")

    request.session[SESSION_USER_KEY] = user.sub
    logger.info("User logged in: %s", user)
    return RedirectResponse("/", status_code=303)


@router.get("/salir")
async def logout(request: Request):
    request.session.clear()
    return RedirectResponse("/", status_code=303)
