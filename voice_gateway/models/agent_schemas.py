"""
Pydantic models for the conversational agent platform.

This module provides type-safe models for the OAuth token response, the session
and message endpoints, and the gateway's own token/session state. Response
models are validated at the boundary; absent fields fall back to explicit
defaults instead of raising.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from voice_gateway.config.constants import (
    INITIAL_SEQUENCE_ID,
    MESSAGE_TYPE_TEXT,
    NO_AGENT_RESPONSE,
)


# Gateway state
class AuthToken(BaseModel):
    """Bearer token and the org instance it was issued for."""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(..., repr=False)
    instance_url: str = ""


class Session(BaseModel):
    """An open agent session and the sequence id of the next message."""

    session_id: str
    sequence_id: int = Field(INITIAL_SEQUENCE_ID, ge=1)


# OAuth
class TokenResponse(BaseModel):
    """Body of a successful client-credentials grant."""

    model_config = ConfigDict(extra="ignore")

    access_token: Optional[str] = None
    instance_url: Optional[str] = None
    token_type: Optional[str] = None


# Session creation
class InstanceConfig(BaseModel):
    endpoint: str


class StreamingCapabilities(BaseModel):
    chunkTypes: List[str] = Field(default_factory=lambda: [MESSAGE_TYPE_TEXT])


class SessionCreateRequest(BaseModel):
    """Body posted to the session endpoint."""

    externalSessionKey: str
    instanceConfig: InstanceConfig
    streamingCapabilities: Optional[StreamingCapabilities] = None
    bypassUser: bool = True


class SessionCreateResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sessionId: Optional[str] = None


# Messaging
class AgentMessage(BaseModel):
    sequenceId: int
    type: Literal["Text"] = MESSAGE_TYPE_TEXT
    text: str


class MessageRequest(BaseModel):
    """Body posted to the message endpoint."""

    message: AgentMessage


class AgentResponseMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    message: Optional[str] = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    messages: List[AgentResponseMessage] = Field(default_factory=list)

    def reply_text(self) -> str:
        """Text of the first agent message, or the placeholder if there is none."""
        if self.messages and self.messages[0].message and self.messages[0].message.strip():
            return self.messages[0].message
        return NO_AGENT_RESPONSE


class AgentReply(BaseModel):
    """What ``AgentClient.send_message`` hands back on success."""

    agent_response: str
    next_sequence_id: int
    session_id: str
