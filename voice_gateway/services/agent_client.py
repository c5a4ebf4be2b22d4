"""
Client for sending user messages to the conversational agent platform.

This module provides the AgentClient class, the only entry point the HTTP layer
uses for agent conversations. It keeps a token and a session per conversation
key and heals itself from the two failures the platform produces in practice:

- 401: the bearer token expired; fetch a new one and resend.
- 404: the session expired on the platform; open a new session and resend.

Each of those recoveries happens at most once per call, so a persistently
failing platform produces a bounded number of requests and then an AgentError.
The whole call, recoveries included, runs under the conversation's lock.
"""

import logging
from typing import List, Optional

import requests
from pydantic import ValidationError

from voice_gateway.config.constants import (
    CONNECTIVITY_TIMEOUT,
    DEFAULT_CONVERSATION_KEY,
    LOGGER_NAME,
    MESSAGE_TIMEOUT,
    NO_AGENT_RESPONSE,
)
from voice_gateway.config.settings import AgentCredentials, CredentialStore
from voice_gateway.errors import AgentError, GatewayError, InvalidInputError
from voice_gateway.models.agent_schemas import (
    AgentMessage,
    AgentReply,
    AuthToken,
    MessageRequest,
    MessageResponse,
    Session,
)
from voice_gateway.models.result import OperationResult
from voice_gateway.services import http_utils
from voice_gateway.services.conversation_store import ConversationState, ConversationStore
from voice_gateway.services.endpoint_ladder import (
    ALTERNATE,
    PRIMARY,
    Endpoint,
    EndpointsExhausted,
    try_endpoints,
)
from voice_gateway.services.session_manager import SessionManager, alternate_base
from voice_gateway.services.token_authenticator import TokenAuthenticator

logger = logging.getLogger(LOGGER_NAME)

# Initial attempt, one after reauthentication, one after reopening the session
MAX_DELIVERY_ROUNDS = 3


def _parse_reply(response: requests.Response) -> str:
    try:
        body = MessageResponse.model_validate(http_utils.parse_json(response) or {})
    except ValidationError:
        logger.warning("Agent returned an unexpected message body")
        return NO_AGENT_RESPONSE
    return body.reply_text()


class AgentClient:
    """
    Sends messages into agent sessions on behalf of the front end.

    Args:
        credential_store: Source of the agent platform credentials
        store: Per-conversation token/session registry
        http: Session shared by the authenticator, session manager and this client
    """

    def __init__(
        self,
        credential_store: CredentialStore[AgentCredentials],
        store: Optional[ConversationStore] = None,
        http: Optional[requests.Session] = None,
        authenticator: Optional[TokenAuthenticator] = None,
        session_manager: Optional[SessionManager] = None,
    ):
        self.credential_store = credential_store
        self.store = store if store is not None else ConversationStore()
        self.http = http or http_utils.new_http_session()
        self.authenticator = authenticator or TokenAuthenticator(self.http)
        self.session_manager = session_manager or SessionManager(self.authenticator, self.http)

    def message_endpoints(
        self, credentials: AgentCredentials, token: AuthToken, session: Session, text: str
    ) -> List[Endpoint]:
        body = MessageRequest(
            message=AgentMessage(sequenceId=session.sequence_id, text=text)
        ).model_dump()

        endpoints = [
            Endpoint(PRIMARY, f"{credentials.api_base}/sessions/{session.session_id}/messages", body)
        ]
        if token.instance_url:
            endpoints.append(
                Endpoint(
                    ALTERNATE,
                    f"{alternate_base(token.instance_url)}/sessions/{session.session_id}/messages",
                    body,
                )
            )
        return endpoints

    def send_message(self, text: str, conversation_key: str = DEFAULT_CONVERSATION_KEY) -> OperationResult[AgentReply]:
        """
        Deliver one user message and return the agent's reply.

        A token and a session are created first if the conversation has none.

        Args:
            text: The user's message, must not be blank
            conversation_key: Which conversation's token and session to use

        Returns:
            OperationResult wrapping an AgentReply, or the error that stopped delivery
        """
        if text is None or not text.strip():
            return OperationResult.fail(InvalidInputError("Message text is required"))

        try:
            credentials = self.credential_store.get()
        except GatewayError as e:
            logger.error(f"Agent integration unavailable: {e}")
            return OperationResult.fail(e)

        with self.store.locked(conversation_key) as state:
            try:
                reply = self.deliver(credentials, state, text)
            except GatewayError as e:
                logger.error(f"[{state.key}] Agent message failed: {e}")
                return OperationResult.fail(e)

        return OperationResult.ok(reply)

    def deliver(self, credentials: AgentCredentials, state: ConversationState, text: str) -> AgentReply:
        """
        Send ``text`` in the conversation's session. The caller must hold ``state.lock``.

        Raises:
            AuthError, SessionError, AgentError
        """
        reauthenticated = False
        reopened = False

        for _ in range(MAX_DELIVERY_ROUNDS):
            if state.token is None:
                self.authenticator.refresh(credentials, state)
            if not state.has_session:
                self.session_manager.open_session(credentials, state)

            session = state.session
            endpoints = self.message_endpoints(credentials, state.token, session, text)
            try:
                reply_text, endpoint = try_endpoints(
                    self.http,
                    endpoints,
                    MESSAGE_TIMEOUT,
                    http_utils.bearer_headers(state.token.access_token),
                    _parse_reply,
                )
            except EndpointsExhausted as e:
                if e.has_status(401) and not reauthenticated:
                    logger.info(f"[{state.key}] Message returned 401, reauthenticating")
                    reauthenticated = True
                    self.authenticator.refresh(credentials, state)
                    continue
                if e.has_status(404):
                    state.invalidate_session()
                    if not reopened:
                        logger.info(f"[{state.key}] Session {session.session_id} not found, opening a new one")
                        reopened = True
                        continue
                raise AgentError(f"Failed to send message to agent: {e.message}", e.status_code) from None

            session.sequence_id += 1
            logger.info(
                f"[{state.key}] Agent replied via {endpoint.name} endpoint; "
                f"next sequence id {session.sequence_id}"
            )
            return AgentReply(
                agent_response=reply_text,
                next_sequence_id=session.sequence_id,
                session_id=session.session_id,
            )

    def reset(self, conversation_key: str = DEFAULT_CONVERSATION_KEY) -> bool:
        """Drop the cached token and session of a conversation."""
        return self.store.discard(conversation_key)

    def check_connectivity(self) -> OperationResult[bool]:
        """Verify the credentials by requesting a token with a short timeout."""
        try:
            credentials = self.credential_store.get()
            self.authenticator.fetch_token(credentials, timeout=CONNECTIVITY_TIMEOUT)
        except GatewayError as e:
            return OperationResult.fail(e)
        return OperationResult.ok(True)
