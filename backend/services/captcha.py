"""
Google reCAPTCHA verification for the admin forms.
"""
import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"
REQUEST_TIMEOUT_SEC = 10.0
FORM_FIELD = "g-recaptcha-response"


def verify_captcha(secret_key: str, response_token: Optional[str], remote_ip: Optional[str] = None) -> bool:
    """
    Ask Google whether the token posted by the form is valid.

    Returns False on a missing token, a network failure or a negative answer.
    """
    if not response_token:
        return False
    data = {"secret": secret_key, "response": response_token}
    if remote_ip:
        data["remoteip"] = remote_ip
    try:
        resp = requests.post(VERIFY_URL, data=data, timeout=REQUEST_TIMEOUT_SEC)
        resp.raise_for_status()
        payload = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("captcha verification failed: %s", e)
        return False
    if not payload.get("success", False):
        logger.info("captcha rejected: %s", payload.get("error-codes"))
        return False
    return True
