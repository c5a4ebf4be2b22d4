"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for vendor URLs, timeouts and defaults so that the
clients in ``voice_gateway.services`` never hardcode them.
"""

# Logger name used throughout the application
LOGGER_NAME = "voice_gateway"

# Timeouts (seconds)
CONNECTIVITY_TIMEOUT = 10
AUTH_TIMEOUT = 30
SESSION_TIMEOUT = 30
MESSAGE_TIMEOUT = 120
TRANSCRIPTION_TIMEOUT = 120
CHAT_TIMEOUT = 120
SPEECH_TIMEOUT = 60

# Speech / chat provider defaults (OpenAI compatible)
DEFAULT_SPEECH_BASE_URL = "https://api.openai.com/v1"
DEFAULT_TRANSCRIPTION_MODEL = "whisper-1"
DEFAULT_CHAT_MODEL = "gpt-4o-mini"
DEFAULT_TTS_MODEL = "tts-1"
DEFAULT_TTS_VOICE = "alloy"
DEFAULT_TTS_FORMAT = "mp3"
DEFAULT_MAX_TOKENS = 500

# Agent platform
OAUTH_TOKEN_PATH = "/services/oauth2/token"
DEFAULT_AGENT_API_BASE = "https://api.salesforce.com/einstein/ai-agent/v1"
AGENT_API_VERSION = "v59.0"
ALTERNATE_AGENT_PATH = "/services/data/{version}/einstein/ai-agent"

# Agent message defaults
MESSAGE_TYPE_TEXT = "Text"
NO_AGENT_RESPONSE = "No response from agent"
INITIAL_SEQUENCE_ID = 1

# Conversation key used when the caller does not supply one
DEFAULT_CONVERSATION_KEY = "default"

# Conversation state retention
CONVERSATION_IDLE_TTL = 3600  # seconds without a request before a conversation is forgotten
MAX_CONVERSATIONS = 1000
