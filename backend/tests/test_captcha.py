from unittest.mock import patch

import requests

from services import captcha


class DummyResponse:
    def __init__(self, json_data, status_code=200):
        self._json = json_data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}")

    def json(self):
        return self._json


def test_missing_token_is_rejected_without_request():
    with patch.object(captcha.requests, "post") as mock_post:
        assert captcha.verify_captcha("secret", None) is False
        mock_post.assert_not_called()


def test_successful_verification_sends_secret_and_ip():
    with patch.object(captcha.requests, "post", return_value=DummyResponse({"success": True})) as mock_post:
        assert captcha.verify_captcha("secret", "token", "10.0.0.1") is True
    args, kwargs = mock_post.call_args
    assert args[0] == captcha.VERIFY_URL
    assert kwargs["data"] == {"secret": "secret", "response": "token", "remoteip": "10.0.0.1"}
    assert kwargs["timeout"] == captcha.REQUEST_TIMEOUT_SEC


def test_negative_answer_is_rejected():
    response = DummyResponse({"success": False, "error-codes": ["invalid-input-response"]})
    with patch.object(captcha.requests, "post", return_value=response):
        assert captcha.verify_captcha("secret", "token") is False


def test_network_failure_is_rejected():
    with patch.object(captcha.requests, "post", side_effect=requests.ConnectionError("down")):
        assert captcha.verify_captcha("secret", "token") is False


def test_http_error_is_rejected():
    with patch.object(captcha.requests, "post", return_value=DummyResponse({}, status_code=500)):
        assert captcha.verify_captcha("secret", "token") is False
