"""
Ordered primary/alternate endpoint attempts for the agent platform.

The platform exposes the same logical endpoint under two URL shapes: a stable
API gateway and a path bound to the org instance. ``try_endpoints`` walks an
ordered list once, stops at the first usable response, and never goes back to
an endpoint it already tried.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

import requests

from voice_gateway.config.constants import LOGGER_NAME
from voice_gateway.errors import TransportError
from voice_gateway.services import http_utils

logger = logging.getLogger(LOGGER_NAME)

T = TypeVar("T")

PRIMARY = "primary"
ALTERNATE = "alternate"


@dataclass(frozen=True)
class Endpoint:
    name: str
    url: str
    body: Dict[str, Any]

    @property
    def is_alternate(self) -> bool:
        return self.name == ALTERNATE


@dataclass(frozen=True)
class Attempt:
    endpoint: Endpoint
    status_code: Optional[int]
    message: str


class EndpointsExhausted(Exception):
    """Every endpoint in the ladder failed."""

    def __init__(self, attempts: List[Attempt]):
        self.attempts = list(attempts)
        super().__init__(self.message)

    def has_status(self, status_code: int) -> bool:
        return any(a.status_code == status_code for a in self.attempts)

    @property
    def status_code(self) -> Optional[int]:
        """401 wins over 404, which wins over whatever the last attempt saw."""
        for status in (401, 404):
            if self.has_status(status):
                return status
        return self.attempts[-1].status_code if self.attempts else None

    @property
    def message(self) -> str:
        if not self.attempts:
            return "No endpoint available"
        return "; ".join(f"{a.endpoint.name}: {a.message}" for a in self.attempts)


class UnusableResponse(ValueError):
    """Raised by a response parser when a success status carries an unusable body."""


def try_endpoints(
    http: requests.Session,
    endpoints: Iterable[Endpoint],
    timeout: float,
    headers: Dict[str, str],
    parse: Callable[[requests.Response], T],
    success_codes: Tuple[int, ...] = (200,),
) -> Tuple[T, Endpoint]:
    """
    POST to each endpoint in order until one succeeds.

    Args:
        http: Session used for the requests
        endpoints: Ordered endpoints, primary first
        timeout: Per-request timeout in seconds
        headers: Headers sent with every attempt
        parse: Turns a success response into a value, or raises ``UnusableResponse``
        success_codes: Status codes treated as success

    Returns:
        The parsed value and the endpoint that produced it

    Raises:
        EndpointsExhausted: with one ``Attempt`` per endpoint tried
    """
    attempts: List[Attempt] = []

    for endpoint in endpoints:
        try:
            response = http_utils.post(http, endpoint.url, timeout, json=endpoint.body, headers=headers)
        except TransportError as e:
            attempts.append(Attempt(endpoint, None, e.message))
            continue

        if response.status_code in success_codes:
            try:
                return parse(response), endpoint
            except UnusableResponse as e:
                logger.warning(f"{endpoint.name} endpoint returned an unusable body: {e}")
                attempts.append(Attempt(endpoint, response.status_code, str(e)))
                continue

        message = http_utils.extract_error_message(response)
        logger.warning(f"{endpoint.name} endpoint {endpoint.url} failed: {response.status_code} {message}")
        attempts.append(Attempt(endpoint, response.status_code, message))

    raise EndpointsExhausted(attempts)
