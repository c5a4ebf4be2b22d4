"""
Agent session lifecycle.

A session is opened lazily, bound to the conversation's current token, and kept
until the platform reports it missing. Opening one walks the primary/alternate
endpoint ladder and reauthenticates at most once on a 401.
"""

import logging
import secrets
from typing import List, Optional

import requests
from pydantic import ValidationError

from voice_gateway.config.constants import (
    AGENT_API_VERSION,
    ALTERNATE_AGENT_PATH,
    INITIAL_SEQUENCE_ID,
    LOGGER_NAME,
    SESSION_TIMEOUT,
)
from voice_gateway.config.settings import AgentCredentials
from voice_gateway.errors import GatewayError, SessionError
from voice_gateway.models.agent_schemas import (
    AuthToken,
    InstanceConfig,
    Session,
    SessionCreateRequest,
    SessionCreateResponse,
    StreamingCapabilities,
)
from voice_gateway.models.result import OperationResult
from voice_gateway.services import http_utils
from voice_gateway.services.conversation_store import ConversationState
from voice_gateway.services.endpoint_ladder import (
    ALTERNATE,
    PRIMARY,
    Endpoint,
    EndpointsExhausted,
    UnusableResponse,
    try_endpoints,
)
from voice_gateway.services.token_authenticator import TokenAuthenticator

logger = logging.getLogger(LOGGER_NAME)

# One initial round plus one after reauthentication
MAX_SESSION_ROUNDS = 2


def new_external_session_key() -> str:
    """128 random bits as 32 hex characters; a correlation id, not a secret."""
    return secrets.token_hex(16)[:32]


def alternate_base(instance_url: str) -> str:
    return instance_url.rstrip("/") + ALTERNATE_AGENT_PATH.format(version=AGENT_API_VERSION)


def _parse_session(response: requests.Response) -> str:
    try:
        body = SessionCreateResponse.model_validate(http_utils.parse_json(response) or {})
    except ValidationError:
        raise UnusableResponse("malformed session response") from None
    if not body.sessionId or not body.sessionId.strip():
        raise UnusableResponse("response did not contain a sessionId")
    return body.sessionId


class SessionManager:
    """
    Creates and holds the agent session for a conversation.

    Args:
        authenticator: Used to obtain or refresh the conversation's token
        http: Session used for the session-create requests
    """

    def __init__(self, authenticator: TokenAuthenticator, http: Optional[requests.Session] = None):
        self.authenticator = authenticator
        self.http = http or authenticator.http

    def session_endpoints(self, credentials: AgentCredentials, token: AuthToken, session_key: str) -> List[Endpoint]:
        primary_body = SessionCreateRequest(
            externalSessionKey=session_key,
            instanceConfig=InstanceConfig(endpoint=token.instance_url),
            streamingCapabilities=StreamingCapabilities(),
        ).model_dump(exclude_none=True)

        endpoints = [
            Endpoint(PRIMARY, f"{credentials.api_base}/agents/{credentials.agent_id}/sessions", primary_body)
        ]

        if token.instance_url:
            alternate_body = {k: v for k, v in primary_body.items() if k != "streamingCapabilities"}
            endpoints.append(
                Endpoint(
                    ALTERNATE,
                    f"{alternate_base(token.instance_url)}/agents/{credentials.agent_id}/sessions",
                    alternate_body,
                )
            )
        return endpoints

    def open_session(self, credentials: AgentCredentials, state: ConversationState) -> Session:
        """
        Open a new session and store it on ``state`` with sequence id 1.

        The caller must hold ``state.lock``.

        Raises:
            AuthError: if a token cannot be obtained
            SessionError: if every endpoint failed, including after one reauthentication
        """
        if state.token is None:
            self.authenticator.refresh(credentials, state)

        state.invalidate_session()
        reauthenticated = False

        for _ in range(MAX_SESSION_ROUNDS):
            session_key = new_external_session_key()
            endpoints = self.session_endpoints(credentials, state.token, session_key)
            try:
                session_id, endpoint = try_endpoints(
                    self.http,
                    endpoints,
                    SESSION_TIMEOUT,
                    http_utils.bearer_headers(state.token.access_token),
                    _parse_session,
                    success_codes=(200, 201),
                )
            except EndpointsExhausted as e:
                if e.has_status(401) and not reauthenticated:
                    logger.info(f"[{state.key}] Session create returned 401, reauthenticating")
                    reauthenticated = True
                    self.authenticator.refresh(credentials, state)
                    continue
                logger.error(f"[{state.key}] Failed to create agent session: {e.message}")
                raise SessionError(f"Failed to create agent session: {e.message}", e.status_code) from None

            state.session = Session(session_id=session_id, sequence_id=INITIAL_SEQUENCE_ID)
            logger.info(f"[{state.key}] Created agent session {session_id} via {endpoint.name} endpoint")
            return state.session

    def create_session(self, credentials: AgentCredentials, state: ConversationState) -> OperationResult[Session]:
        """Result-returning wrapper around ``open_session()``."""
        with state.lock:
            try:
                return OperationResult.ok(self.open_session(credentials, state))
            except GatewayError as e:
                return OperationResult.fail(e)
