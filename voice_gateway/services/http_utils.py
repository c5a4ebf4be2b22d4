"""
Shared helpers for the outbound HTTP calls made by the service clients.

All clients go through ``post()``/``get()`` so that timeouts are always set and
network failures surface as ``TransportError`` instead of ``requests`` exceptions.
"""

import logging
from typing import Any, Optional

import requests

from voice_gateway.config.constants import LOGGER_NAME
from voice_gateway.errors import TransportError

logger = logging.getLogger(LOGGER_NAME)


def new_http_session() -> requests.Session:
    return requests.Session()


def post(http: requests.Session, url: str, timeout: float, **kwargs: Any) -> requests.Response:
    """
    POST with an explicit timeout.

    Raises:
        TransportError: on connection failures and timeouts
    """
    try:
        return http.post(url, timeout=timeout, **kwargs)
    except requests.Timeout:
        logger.warning(f"Request to {url} timed out after {timeout}s")
        raise TransportError(f"Request timed out after {timeout} seconds") from None
    except requests.RequestException as e:
        logger.warning(f"Request to {url} failed: {e}")
        raise TransportError(f"Request failed: {e}") from e


def get(http: requests.Session, url: str, timeout: float, **kwargs: Any) -> requests.Response:
    """GET counterpart of ``post()``."""
    try:
        return http.get(url, timeout=timeout, **kwargs)
    except requests.Timeout:
        logger.warning(f"Request to {url} timed out after {timeout}s")
        raise TransportError(f"Request timed out after {timeout} seconds") from None
    except requests.RequestException as e:
        logger.warning(f"Request to {url} failed: {e}")
        raise TransportError(f"Request failed: {e}") from e


def bearer_headers(token: str, content_type: Optional[str] = "application/json") -> dict:
    headers = {"Authorization": f"Bearer {token}"}
    if content_type:
        headers["Content-Type"] = content_type
    return headers


def parse_json(response: requests.Response) -> Any:
    """Decode a JSON body, returning None when it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return None


def extract_error_message(response: requests.Response) -> str:
    """
    Best-effort human readable message for a failed response.

    Understands ``{"error": {"message": ...}}`` (OpenAI), ``{"error": "...",
    "error_description": "..."}`` (OAuth) and ``[{"message": ...}]`` (Salesforce
    REST). Anything else falls back to ``"<status> <reason>"``.
    """
    body = parse_json(response)

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            description = body.get("error_description")
            return f"{error}: {description}" if description else error
        if body.get("message"):
            return str(body["message"])
    elif isinstance(body, list) and body:
        first = body[0]
        if isinstance(first, dict) and first.get("message"):
            return str(first["message"])

    reason = response.reason or ""
    return f"{response.status_code} {reason}".strip()
