"""
Pydantic models for the OpenAI-compatible speech and chat endpoints.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    """Role of a participant in a conversation."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    role: MessageRole
    content: str

    model_config = ConfigDict(use_enum_values=True)


class ChatCompletionRequest(BaseModel):
    model: str
    messages: List[ChatMessage]
    max_tokens: int


class ChoiceMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Optional[str] = None
    content: Optional[str] = None


class Choice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: ChoiceMessage = Field(default_factory=ChoiceMessage)


class ChatCompletionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    choices: List[Choice] = Field(default_factory=list)

    def content(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""


class TranscriptionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str = ""


class SpeechRequest(BaseModel):
    model: str
    voice: str
    input: str
    response_format: str


class SynthesizedSpeech(BaseModel):
    """Audio returned by the TTS endpoint, ready to hand to the browser."""

    content_type: str
    data_uri: str
    size: int
