"""
Chat completions against an OpenAI-compatible provider.
"""

import logging
from typing import List, Optional

import requests
from pydantic import ValidationError

from voice_gateway.config.constants import CHAT_TIMEOUT, LOGGER_NAME
from voice_gateway.config.settings import CredentialStore, SpeechSettings
from voice_gateway.errors import GatewayError, InvalidInputError, SpeechError
from voice_gateway.models.result import OperationResult
from voice_gateway.models.speech_schemas import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
)
from voice_gateway.services import http_utils

logger = logging.getLogger(LOGGER_NAME)


class ChatClient:
    """Stateless wrapper around the chat completions endpoint."""

    def __init__(self, settings_store: CredentialStore[SpeechSettings], http: Optional[requests.Session] = None):
        self.settings_store = settings_store
        self.http = http or http_utils.new_http_session()

    def complete(self, messages: List[ChatMessage], max_tokens: Optional[int] = None) -> OperationResult[str]:
        """
        Ask the chat model for the next assistant message.

        Args:
            messages: Conversation so far, oldest first
            max_tokens: Overrides the configured completion limit

        Returns:
            OperationResult wrapping the assistant's reply text
        """
        if not messages:
            return OperationResult.fail(InvalidInputError("At least one message is required"))

        try:
            settings = self.settings_store.get()
            payload = ChatCompletionRequest(
                model=settings.chat_model,
                messages=messages,
                max_tokens=max_tokens or settings.max_tokens,
            )

            logger.info(f"Requesting chat completion from {settings.chat_model} ({len(messages)} messages)")
            response = http_utils.post(
                self.http,
                f"{settings.base_url}/chat/completions",
                CHAT_TIMEOUT,
                headers=http_utils.bearer_headers(settings.api_key),
                json=payload.model_dump(mode="json"),
            )

            if response.status_code != 200:
                message = http_utils.extract_error_message(response)
                logger.error(f"Chat completion failed: {response.status_code} {message}")
                raise SpeechError(f"Chat completion failed: {message}", response.status_code)

            try:
                body = ChatCompletionResponse.model_validate(http_utils.parse_json(response) or {})
            except ValidationError:
                raise SpeechError("Chat completion failed: malformed response", response.status_code) from None
        except GatewayError as e:
            return OperationResult.fail(e)

        return OperationResult.ok(body.content())
