"""
Models module for the data structures exchanged by the voice gateway.

Key components:
- agent_schemas: Token, session and message models for the agent platform, plus
  the gateway's own AuthToken/Session state.
- speech_schemas: Request/response models for transcription, chat and TTS.
- api_schemas: Bodies of the gateway's HTTP API (camelCase aliases).
- result: OperationResult, returned by every public client operation.
"""

from voice_gateway.models.agent_schemas import AgentReply, AuthToken, Session
from voice_gateway.models.result import OperationResult
from voice_gateway.models.speech_schemas import ChatMessage, MessageRole, SynthesizedSpeech
