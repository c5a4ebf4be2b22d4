"""
FastAPI server exposing the voice gateway to the front end.

The front end never sees vendor credentials: it posts text or recorded audio
here and the gateway calls the speech provider and the agent platform on its
behalf. Every endpoint answers with JSON; failures come back as
``{"success": false, "error": ..., "errorType": ...}`` with a status code that
tells the caller whether to fix its input (400), wait for configuration (503)
or report an upstream problem (502).
"""

import os
from pathlib import Path

import dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from voice_gateway.config.logging_config import configure_logging
from voice_gateway.config.settings import (
    CredentialStore,
    load_agent_credentials,
    load_speech_settings,
)
from voice_gateway.errors import ConfigError, InvalidInputError
from voice_gateway.models.api_schemas import (
    AgentMessageRequest,
    AgentMessageResponse,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    IntegrationsStatusResponse,
    IntegrationStatus,
    SpeechRequestBody,
    SpeechResponse,
    TranscribeRequest,
    TranscribeResponse,
)
from voice_gateway.models.result import OperationResult
from voice_gateway.services.agent_client import AgentClient
from voice_gateway.services.chat_client import ChatClient
from voice_gateway.services.conversation_store import ConversationStore
from voice_gateway.services.speech_client import SpeechClient

# Load environment variables from .env file if it exists
env_path = Path(".") / ".env"
if env_path.exists():
    dotenv.load_dotenv(env_path)

logger = configure_logging()

PORT = int(os.getenv("PORT", "8000"))
HOST = os.getenv("HOST", "0.0.0.0")
ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

app = FastAPI(
    title="Voice Gateway",
    description="Server-side bridge from a voice assistant front end to speech and agent APIs",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

# Settings are cached for the life of the process
agent_settings = CredentialStore(load_agent_credentials)
speech_settings = CredentialStore(load_speech_settings)

conversation_store = ConversationStore()
agent_client = AgentClient(agent_settings, conversation_store)
speech_client = SpeechClient(speech_settings)
chat_client = ChatClient(speech_settings, http=speech_client.http)


def error_response(result: OperationResult) -> JSONResponse:
    """Translate a failed result into the JSON error body and status code."""
    error = result.error
    if isinstance(error, InvalidInputError):
        status_code = 400
    elif isinstance(error, ConfigError):
        status_code = 503
    else:
        status_code = 502

    body = ErrorResponse(error=result.error_message or "Unknown error", error_type=result.error_type or "GatewayError")
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


@app.get("/health")
def health_check():
    """Health check endpoint for monitoring system status.

    Returns:
        dict: Status information, which integrations are configured and how many
        conversations currently hold a cached session.
    """
    return {
        "status": "healthy",
        "agent_configured": agent_settings.is_configured(),
        "speech_configured": speech_settings.is_configured(),
        "active_conversations": len(conversation_store),
    }


@app.get("/")
def root():
    """Root endpoint to display basic information about the API."""
    return {
        "name": "Voice Gateway",
        "description": "Server-side bridge from a voice assistant front end to speech and agent APIs",
        "version": "1.0.0",
        "endpoints": {
            "/api/transcribe": "Transcribe base64 audio",
            "/api/chat": "Chat completion",
            "/api/speech": "Text to speech",
            "/api/agent/message": "Send a message to the conversational agent",
            "/api/agent/conversations/{conversation_id}": "Forget a conversation's agent session",
            "/api/integrations/status": "Connectivity check for both integrations",
            "/health": "Health check endpoint",
        },
    }


@app.post("/api/transcribe")
def transcribe(request: TranscribeRequest):
    result = speech_client.transcribe(request.audio_data, request.language)
    if not result.success:
        return error_response(result)
    return TranscribeResponse(text=result.value).model_dump(by_alias=True)


@app.post("/api/chat")
def chat(request: ChatRequest):
    result = chat_client.complete(request.messages, request.max_tokens)
    if not result.success:
        return error_response(result)
    return ChatResponse(content=result.value).model_dump(by_alias=True)


@app.post("/api/speech")
def speech(request: SpeechRequestBody):
    result = speech_client.synthesize(request.text, request.voice)
    if not result.success:
        return error_response(result)
    return SpeechResponse(
        audio_data=result.value.data_uri,
        content_type=result.value.content_type,
    ).model_dump(by_alias=True)


@app.post("/api/agent/message")
def agent_message(request: AgentMessageRequest):
    """Send one user message to the agent, creating the token and session on first use."""
    result = agent_client.send_message(request.text, request.conversation_id)
    if not result.success:
        return error_response(result)
    reply = result.value
    return AgentMessageResponse(
        agent_response=reply.agent_response,
        next_sequence_id=reply.next_sequence_id,
        session_id=reply.session_id,
    ).model_dump(by_alias=True)


@app.delete("/api/agent/conversations/{conversation_id}")
def reset_conversation(conversation_id: str):
    """Forget the cached token and session so the next message starts a new session."""
    return {"success": True, "existed": agent_client.reset(conversation_id)}


@app.get("/api/integrations/status")
def integrations_status():
    """Check that both vendors accept the configured credentials."""
    statuses = {}
    for name, store, client in (
        ("agent", agent_settings, agent_client),
        ("speech", speech_settings, speech_client),
    ):
        if not store.is_configured():
            statuses[name] = IntegrationStatus(configured=False)
            continue
        result = client.check_connectivity()
        statuses[name] = IntegrationStatus(
            configured=True,
            reachable=result.success,
            error=result.error_message,
        )
    return IntegrationsStatusResponse(integrations=statuses).model_dump(by_alias=True)


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on http://{HOST}:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT)
