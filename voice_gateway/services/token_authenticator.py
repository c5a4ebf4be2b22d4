"""
OAuth2 client-credentials authentication against the agent platform's org.
"""

import logging
from typing import Optional

import requests
from pydantic import ValidationError

from voice_gateway.config.constants import (
    AUTH_TIMEOUT,
    LOGGER_NAME,
    OAUTH_TOKEN_PATH,
)
from voice_gateway.config.settings import AgentCredentials
from voice_gateway.errors import AuthError, GatewayError, TransportError
from voice_gateway.models.agent_schemas import AuthToken, TokenResponse
from voice_gateway.models.result import OperationResult
from voice_gateway.services import http_utils
from voice_gateway.services.conversation_store import ConversationState

logger = logging.getLogger(LOGGER_NAME)


class TokenAuthenticator:
    """
    Exchanges stored credentials for a short-lived bearer token.

    A failed exchange is never retried here; the caller decides whether to try again.
    """

    def __init__(self, http: Optional[requests.Session] = None):
        self.http = http or http_utils.new_http_session()

    @staticmethod
    def token_url(credentials: AgentCredentials) -> str:
        return f"https://{credentials.server_host}{OAUTH_TOKEN_PATH}"

    def fetch_token(self, credentials: AgentCredentials, timeout: float = AUTH_TIMEOUT) -> AuthToken:
        """
        Request a new token.

        Raises:
            AuthError: on a non-200 response, a blank access token or a network failure
        """
        url = self.token_url(credentials)
        logger.info(f"Requesting access token from {url}")

        try:
            response = http_utils.post(
                self.http,
                url,
                timeout,
                data={
                    "grant_type": "client_credentials",
                    "client_id": credentials.client_id,
                    "client_secret": credentials.client_secret,
                },
            )
        except TransportError as e:
            raise AuthError(f"Authentication failed: {e.message}") from e

        if response.status_code != 200:
            message = http_utils.extract_error_message(response)
            logger.error(f"Authentication failed: {response.status_code} {message}")
            raise AuthError(f"Authentication failed: {message}", response.status_code)

        try:
            body = TokenResponse.model_validate(http_utils.parse_json(response) or {})
        except ValidationError:
            raise AuthError("Authentication failed: malformed token response", response.status_code) from None

        if not body.access_token or not body.access_token.strip():
            logger.error("Token endpoint returned 200 without an access token")
            raise AuthError("Authentication failed: no access token", response.status_code)

        logger.info(f"Authenticated; instance URL: {body.instance_url or '(none)'}")
        return AuthToken(
            access_token=body.access_token,
            instance_url=(body.instance_url or "").rstrip("/"),
        )

    def refresh(self, credentials: AgentCredentials, state: ConversationState) -> AuthToken:
        """
        Fetch a token and install it on ``state``.

        The existing session is kept; a new token is assumed to be valid for it
        until the platform says otherwise.
        """
        token = self.fetch_token(credentials)
        state.token = token
        return token

    def authenticate(self, credentials: AgentCredentials) -> OperationResult[AuthToken]:
        """Result-returning wrapper around ``fetch_token()``."""
        try:
            return OperationResult.ok(self.fetch_token(credentials))
        except GatewayError as e:
            return OperationResult.fail(e)
