"""OAuth login helpers for an Auth0 tenant.

Only the authorization-code flow is used: build the authorize URL, exchange
the returned code for an access token, then read the user's profile.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from typing import List
from urllib.parse import urlencode

import requests

from domain.models import UserInfo
from settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_SCOPES = ["openid", "profile", "email"]
OAUTH_IDENTIFIER = "auth0"
REQUEST_TIMEOUT_SEC = 10.0

_session = requests.Session()


class OAuthError(Exception):
    """The provider rejected a request or answered with something unusable."""


@dataclass(frozen=True)
class OAuthConfig:
    domain: str
    client_id: str
    client_secret: str
    redirect_url: str
    scopes: List[str] = field(default_factory=lambda: list(DEFAULT_SCOPES))

    @classmethod
    def from_settings(cls, settings: Settings) -> "OAuthConfig":
        return cls(
            domain=settings.AUTH0_DOMAIN,
            client_id=settings.AUTH0_CLIENT_ID,
            client_secret=settings.AUTH0_CLIENT_SECRET,
            redirect_url=settings.AUTH0_CALLBACK_URL,
        )

    @property
    def authorize_url(self) -> str:
        return f"https://{self.domain}/authorize"

    @property
    def token_url(self) -> str:
        return f"https://{self.domain}/oauth/token"

    @property
    def userinfo_url(self) -> str:
        return f"https://{self.domain}/userinfo"


def generate_state(length: int = 32) -> str:
    """Random URL-safe value used to bind the callback to this session."""
    return secrets.token_urlsafe(length)


def auth_code_url(config: OAuthConfig, state: str) -> str:
    params = {
        "response_type": "code",
        "client_id": config.client_id,
        "redirect_uri": config.redirect_url,
        "scope": " ".join(config.scopes),
        "state": state,
    }
    return f"{config.authorize_url}?{urlencode(params)}"


def exchange_code(config: OAuthConfig, code: str) -> str:
    """Trade an authorization code for an access token."""
    if not code:
        raise OAuthError("missing authorization code")
    try:
        resp = _session.post(
            config.token_url,
            data={
                "grant_type": "authorization_code",
                "client_id": config.client_id,
                "client_secret": config.client_secret,
                "code": code,
                "redirect_uri": config.redirect_url,
            },
            timeout=REQUEST_TIMEOUT_SEC,
        )
    except requests.RequestException as e:
        raise OAuthError(f"token request failed: {e}") from e
    if resp.status_code != 200:
        raise OAuthError(f"token endpoint answered {resp.status_code}: {resp.text}")
    try:
        token = resp.json()["access_token"]
    except (ValueError, KeyError) as e:
        raise OAuthError("token response without access_token") from e
    return token


def fetch_user_info(config: OAuthConfig, access_token: str) -> UserInfo:
    try:
        resp = _session.get(
            config.userinfo_url,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=REQUEST_TIMEOUT_SEC,
        )
    except requests.RequestException as e:
        raise OAuthError(f"userinfo request failed: {e}") from e
    if resp.status_code != 200:
        raise OAuthError(f"userinfo endpoint answered {resp.status_code}: {resp.text}")
    try:
        payload = resp.json()
    except ValueError as e:
        raise OAuthError("userinfo response is not JSON") from e
    user = UserInfo.from_dict(payload)
    if not user.sub:
        raise OAuthError("userinfo response without sub")
    logger.debug("Fetched user info: %s", user)
    return user
