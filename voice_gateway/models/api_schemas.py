"""
Request and response bodies of the gateway's HTTP API.

Field names follow the front end's camelCase convention; each model also accepts
the snake_case name so server-side callers can build them naturally.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from voice_gateway.config.constants import DEFAULT_CONVERSATION_KEY
from voice_gateway.models.speech_schemas import ChatMessage


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TranscribeRequest(ApiModel):
    audio_data: str = Field(..., alias="audioData", description="Data URI or base64 audio")
    language: Optional[str] = None


class TranscribeResponse(ApiModel):
    success: bool = True
    text: str


class ChatRequest(ApiModel):
    messages: List[ChatMessage] = Field(..., min_length=1)
    max_tokens: Optional[int] = Field(None, alias="maxTokens", gt=0)


class ChatResponse(ApiModel):
    success: bool = True
    content: str


class SpeechRequestBody(ApiModel):
    text: str
    voice: Optional[str] = None

    @field_validator("text")
    def validate_text(cls, v):
        if not v.strip():
            raise ValueError("Text cannot be empty")
        return v


class SpeechResponse(ApiModel):
    success: bool = True
    audio_data: str = Field(..., alias="audioData")
    content_type: str = Field(..., alias="contentType")


class AgentMessageRequest(ApiModel):
    text: str
    conversation_id: str = Field(DEFAULT_CONVERSATION_KEY, alias="conversationId")

    @field_validator("conversation_id")
    def validate_conversation_id(cls, v):
        v = v.strip()
        return v or DEFAULT_CONVERSATION_KEY


class AgentMessageResponse(ApiModel):
    success: bool = True
    agent_response: str = Field(..., alias="agentResponse")
    next_sequence_id: int = Field(..., alias="nextSequenceId")
    session_id: str = Field(..., alias="sessionId")


class ErrorResponse(ApiModel):
    success: bool = False
    error: str
    error_type: str = Field(..., alias="errorType")


class IntegrationStatus(ApiModel):
    configured: bool
    reachable: bool = False
    error: Optional[str] = None


class IntegrationsStatusResponse(ApiModel):
    integrations: Dict[str, IntegrationStatus]
