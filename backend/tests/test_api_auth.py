from urllib.parse import parse_qs, urlparse

import pytest

from api.routes import auth as auth_routes
from domain.models import UserInfo
from services.auth import OAuthError


def _start_login(client) -> str:
    resp = client.get("/ingresar")
    assert resp.status_code == 303
    location = urlparse(resp.headers["location"])
    assert location.netloc == "tenant.example.com"
    assert location.path == "/authorize"
    query = parse_qs(location.query)
    assert query["client_id"] == ["client-id"]
    assert query["redirect_uri"] == ["http://testserver/auth/callback"]
    return query["state"][0]


@pytest.fixture
def provider(monkeypatch):
    calls = {}

    def fake_exchange(config, code):
        calls["code"] = code
        return "access-token"

    def fake_user_info(config, token):
        calls["token"] = token
        return UserInfo(sub="auth0|42", name="Ana", email="ana@example.com")

    monkeypatch.setattr(auth_routes, "exchange_code", fake_exchange)
    monkeypatch.setattr(auth_routes, "fetch_user_info", fake_user_info)
    return calls


def test_login_callback_stores_user_and_session(client, memory_dao, provider):
    state = _start_login(client)
    resp = client.get("/auth/callback", params={"code": "abc", "state": state})
    assert resp.status_code == 303
    assert resp.headers["location"] == "/"
    assert provider == {"code": "abc", "token": "access-token"}
    assert memory_dao.get_user_email("auth0|42") == "ana@example.com"
    # the session now identifies the user
    assert client.get("/api/check_like/1").json() == {"status": "not-liked"}


def test_callback_rejects_wrong_state(client, memory_dao, provider):
    _start_login(client)
    resp = client.get("/auth/callback", params={"code": "abc", "state": "forged"})
    assert resp.status_code == 400
    assert memory_dao.get_user_email("auth0|42") is None


def test_callback_rejects_non_ascii_state(client, memory_dao, provider):
    _start_login(client)
    resp = client.get("/auth/callback", params={"code": "abc", "state": "é"})
    assert resp.status_code == 400
    assert "Invalid login state" in resp.text
    assert memory_dao.get_user_email("auth0|42") is None


def test_callback_without_login_is_rejected(client, provider):
    resp = client.get("/auth/callback", params={"code": "abc", "state": "anything"})
    assert resp.status_code == 400


def test_callback_provider_failure_renders_error(client, monkeypatch):
    def failing_exchange(config, code):
        raise OAuthError("token endpoint answered 403")

    monkeypatch.setattr(auth_routes, "exchange_code", failing_exchange)
    state = _start_login(client)
    resp = client.get("/auth/callback", params={"code": "abc", "state": state})
    assert resp.status_code == 500
    assert "login provider" in resp.text


def test_logout_clears_session(client, provider):
    state = _start_login(client)
    client.get("/auth/callback", params={"code": "abc", "state": state})
    resp = client.get("/salir")
    assert resp.status_code == 303
    assert client.get("/api/check_like/1").json() == {"status": "unauthenticated"}
