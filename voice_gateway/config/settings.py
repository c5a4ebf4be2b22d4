"""
Credential store for the two vendor integrations.

Settings are read from environment variables (optionally loaded from a ``.env``
file at start-up) exactly once and cached for the lifetime of the process.
Nothing in here is ever written back; editing settings is the job of whatever
deploys the service.

Environment variables:
    AGENT_SERVER_HOST, AGENT_CLIENT_ID, AGENT_CLIENT_SECRET, AGENT_ID,
    AGENT_ORG_ID, AGENT_ENABLED, AGENT_API_BASE
    OPENAI_API_KEY, SPEECH_BASE_URL, SPEECH_ENABLED, TRANSCRIPTION_MODEL,
    CHAT_MODEL, TTS_MODEL, TTS_VOICE, CHAT_MAX_TOKENS
"""

import logging
import os
import threading
from typing import Callable, Generic, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from voice_gateway.config.constants import (
    DEFAULT_AGENT_API_BASE,
    DEFAULT_CHAT_MODEL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_SPEECH_BASE_URL,
    DEFAULT_TRANSCRIPTION_MODEL,
    DEFAULT_TTS_MODEL,
    DEFAULT_TTS_VOICE,
    LOGGER_NAME,
)
from voice_gateway.errors import ConfigError

logger = logging.getLogger(LOGGER_NAME)

TRUE_VALUES = {"1", "true", "yes", "on"}

T = TypeVar("T")


def _flag(value: Optional[str], default: bool = True) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUE_VALUES


class AgentCredentials(BaseModel):
    """Connection settings for the conversational agent platform."""

    model_config = ConfigDict(frozen=True)

    server_host: str = Field(..., description="My Domain host of the org, without scheme")
    client_id: str
    client_secret: str = Field(..., repr=False)
    agent_id: str
    org_id: str = ""
    enabled: bool = True
    api_base: str = DEFAULT_AGENT_API_BASE

    @field_validator("server_host")
    def normalize_host(cls, v):
        """Strip scheme and trailing slashes so URLs can be built with an f-string."""
        v = v.strip()
        for prefix in ("https://", "http://"):
            if v.lower().startswith(prefix):
                v = v[len(prefix):]
        return v.rstrip("/")

    @field_validator("api_base")
    def strip_trailing_slash(cls, v):
        return v.strip().rstrip("/")


class SpeechSettings(BaseModel):
    """Connection settings for the transcription / chat / TTS provider."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(..., repr=False)
    base_url: str = DEFAULT_SPEECH_BASE_URL
    enabled: bool = True
    transcription_model: str = DEFAULT_TRANSCRIPTION_MODEL
    chat_model: str = DEFAULT_CHAT_MODEL
    tts_model: str = DEFAULT_TTS_MODEL
    voice: str = DEFAULT_TTS_VOICE
    max_tokens: int = DEFAULT_MAX_TOKENS

    @field_validator("base_url")
    def strip_trailing_slash(cls, v):
        return v.strip().rstrip("/")


def load_agent_credentials(env: Mapping[str, str]) -> AgentCredentials:
    """Build agent credentials from an environment mapping.

    Raises:
        ConfigError: if a required value is blank or the integration is disabled
    """
    if not _flag(env.get("AGENT_ENABLED")):
        raise ConfigError("Agent integration is disabled")

    required = {
        "AGENT_SERVER_HOST": env.get("AGENT_SERVER_HOST", ""),
        "AGENT_CLIENT_ID": env.get("AGENT_CLIENT_ID", ""),
        "AGENT_CLIENT_SECRET": env.get("AGENT_CLIENT_SECRET", ""),
        "AGENT_ID": env.get("AGENT_ID", ""),
    }
    missing = [name for name, value in required.items() if not value.strip()]
    if missing:
        raise ConfigError(f"Agent integration is not configured: missing {', '.join(missing)}")

    return AgentCredentials(
        server_host=required["AGENT_SERVER_HOST"],
        client_id=required["AGENT_CLIENT_ID"].strip(),
        client_secret=required["AGENT_CLIENT_SECRET"].strip(),
        agent_id=required["AGENT_ID"].strip(),
        org_id=env.get("AGENT_ORG_ID", "").strip(),
        api_base=env.get("AGENT_API_BASE") or DEFAULT_AGENT_API_BASE,
    )


def load_speech_settings(env: Mapping[str, str]) -> SpeechSettings:
    """Build speech provider settings from an environment mapping.

    Raises:
        ConfigError: if the API key is blank or the integration is disabled
    """
    if not _flag(env.get("SPEECH_ENABLED")):
        raise ConfigError("Speech integration is disabled")

    api_key = env.get("OPENAI_API_KEY", "").strip()
    if not api_key:
        raise ConfigError("Speech integration is not configured: missing OPENAI_API_KEY")

    try:
        max_tokens = int(env.get("CHAT_MAX_TOKENS") or DEFAULT_MAX_TOKENS)
    except ValueError:
        raise ConfigError("CHAT_MAX_TOKENS must be an integer") from None

    return SpeechSettings(
        api_key=api_key,
        base_url=env.get("SPEECH_BASE_URL") or DEFAULT_SPEECH_BASE_URL,
        transcription_model=env.get("TRANSCRIPTION_MODEL") or DEFAULT_TRANSCRIPTION_MODEL,
        chat_model=env.get("CHAT_MODEL") or DEFAULT_CHAT_MODEL,
        tts_model=env.get("TTS_MODEL") or DEFAULT_TTS_MODEL,
        voice=env.get("TTS_VOICE") or DEFAULT_TTS_VOICE,
        max_tokens=max_tokens,
    )


class CredentialStore(Generic[T]):
    """
    Get-and-cache access to one integration's settings.

    The first successful ``get()`` is cached until ``clear()``. Failed loads are
    not cached, so fixing the environment and retrying works without a restart.
    """

    def __init__(self, loader: Callable[[Mapping[str, str]], T], env: Optional[Mapping[str, str]] = None):
        self._loader = loader
        self._env = env
        self._cached: Optional[T] = None
        self._lock = threading.Lock()

    def get(self) -> T:
        """
        Return the cached settings, loading them on first use.

        Raises:
            ConfigError: if the settings are missing or disabled
        """
        with self._lock:
            if self._cached is None:
                env = self._env if self._env is not None else os.environ
                self._cached = self._loader(env)
                logger.info(f"Loaded settings via {self._loader.__name__}")
            return self._cached

    def is_configured(self) -> bool:
        try:
            self.get()
        except ConfigError:
            return False
        return True

    def clear(self) -> None:
        with self._lock:
            self._cached = None
