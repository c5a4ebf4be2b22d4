"""
Transcription and text-to-speech against an OpenAI-compatible provider.

Both calls are one-shot: one request, one response, no retries and no state.
"""

import logging
from typing import Optional

import requests
from pydantic import ValidationError

from voice_gateway.config.constants import (
    CONNECTIVITY_TIMEOUT,
    DEFAULT_TTS_FORMAT,
    LOGGER_NAME,
    SPEECH_TIMEOUT,
    TRANSCRIPTION_TIMEOUT,
)
from voice_gateway.config.settings import CredentialStore, SpeechSettings
from voice_gateway.errors import GatewayError, InvalidInputError, SpeechError
from voice_gateway.models.result import OperationResult
from voice_gateway.models.speech_schemas import (
    SpeechRequest,
    SynthesizedSpeech,
    TranscriptionResponse,
)
from voice_gateway.services import http_utils
from voice_gateway.services.audio_payload import decode_audio_payload, to_data_uri

logger = logging.getLogger(LOGGER_NAME)

DEFAULT_SPEECH_CONTENT_TYPE = "audio/mpeg"


class SpeechClient:
    """
    Client for the provider's audio endpoints.

    Args:
        settings_store: Source of the provider settings (API key, models, voice)
        http: Session used for the requests
    """

    def __init__(self, settings_store: CredentialStore[SpeechSettings], http: Optional[requests.Session] = None):
        self.settings_store = settings_store
        self.http = http or http_utils.new_http_session()

    def transcribe(self, audio: str, language: Optional[str] = None) -> OperationResult[str]:
        """
        Transcribe a recording.

        Args:
            audio: Data URI or base64 encoded audio
            language: Optional ISO-639-1 hint passed to the model

        Returns:
            OperationResult wrapping the transcribed text
        """
        try:
            settings = self.settings_store.get()
            decoded = decode_audio_payload(audio)

            form = {
                "model": settings.transcription_model,
                "response_format": "json",
                "temperature": "0",
            }
            if language:
                form["language"] = language

            logger.info(f"Transcribing {len(decoded.data)} bytes of {decoded.mime_type}")
            response = http_utils.post(
                self.http,
                f"{settings.base_url}/audio/transcriptions",
                TRANSCRIPTION_TIMEOUT,
                headers=http_utils.bearer_headers(settings.api_key, content_type=None),
                data=form,
                files={"file": (decoded.filename, decoded.data, decoded.mime_type)},
            )

            if response.status_code != 200:
                message = http_utils.extract_error_message(response)
                logger.error(f"Transcription failed: {response.status_code} {message}")
                raise SpeechError(f"Transcription failed: {message}", response.status_code)

            try:
                body = TranscriptionResponse.model_validate(http_utils.parse_json(response) or {})
            except ValidationError:
                raise SpeechError("Transcription failed: malformed response", response.status_code) from None
        except GatewayError as e:
            return OperationResult.fail(e)

        return OperationResult.ok(body.text.strip())

    def synthesize(self, text: str, voice: Optional[str] = None) -> OperationResult[SynthesizedSpeech]:
        """
        Turn text into speech.

        Returns:
            OperationResult wrapping the audio as a data URI plus its content type
        """
        if text is None or not text.strip():
            return OperationResult.fail(InvalidInputError("Text is required"))

        try:
            settings = self.settings_store.get()
            payload = SpeechRequest(
                model=settings.tts_model,
                voice=voice or settings.voice,
                input=text,
                response_format=DEFAULT_TTS_FORMAT,
            )

            logger.info(f"Synthesizing {len(text)} characters with voice {payload.voice}")
            response = http_utils.post(
                self.http,
                f"{settings.base_url}/audio/speech",
                SPEECH_TIMEOUT,
                headers=http_utils.bearer_headers(settings.api_key),
                json=payload.model_dump(),
            )

            if response.status_code != 200:
                message = http_utils.extract_error_message(response)
                logger.error(f"Speech synthesis failed: {response.status_code} {message}")
                raise SpeechError(f"Speech synthesis failed: {message}", response.status_code)

            if not response.content:
                raise SpeechError("Speech synthesis failed: empty audio response", response.status_code)
        except GatewayError as e:
            return OperationResult.fail(e)

        content_type = response.headers.get("Content-Type", DEFAULT_SPEECH_CONTENT_TYPE).split(";")[0].strip()
        return OperationResult.ok(
            SynthesizedSpeech(
                content_type=content_type,
                data_uri=to_data_uri(response.content, content_type),
                size=len(response.content),
            )
        )

    def check_connectivity(self) -> OperationResult[bool]:
        """List the provider's models with a short timeout to verify the API key."""
        try:
            settings = self.settings_store.get()
            response = http_utils.get(
                self.http,
                f"{settings.base_url}/models",
                CONNECTIVITY_TIMEOUT,
                headers=http_utils.bearer_headers(settings.api_key, content_type=None),
            )
            if response.status_code != 200:
                raise SpeechError(http_utils.extract_error_message(response), response.status_code)
        except GatewayError as e:
            return OperationResult.fail(e)
        return OperationResult.ok(True)
