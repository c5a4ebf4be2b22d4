"""
Helpers for moving audio between the browser and the speech provider.

The front end sends recordings as data URIs (``data:audio/webm;base64,...``) or
as a bare base64 string, optionally behind a comma-delimited prefix. The
provider wants raw bytes in a multipart upload and answers TTS requests with raw
bytes, which go back to the browser as a data URI.
"""

import base64
import binascii
import re
from typing import NamedTuple, Optional

from voice_gateway.errors import InvalidInputError

DEFAULT_AUDIO_MIME = "audio/webm"

DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,;]+)*;base64,(?P<payload>.*)$", re.DOTALL)

# MIME type -> file extension the transcription endpoint recognises
MIME_EXTENSIONS = {
    "audio/webm": "webm",
    "video/webm": "webm",
    "audio/ogg": "ogg",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/mp4": "mp4",
    "audio/x-m4a": "m4a",
    "audio/m4a": "m4a",
    "audio/flac": "flac",
}


class DecodedAudio(NamedTuple):
    data: bytes
    mime_type: str

    @property
    def filename(self) -> str:
        return f"audio.{extension_for_mime(self.mime_type)}"


def extension_for_mime(mime_type: Optional[str]) -> str:
    if not mime_type:
        return MIME_EXTENSIONS[DEFAULT_AUDIO_MIME]
    return MIME_EXTENSIONS.get(mime_type.split(";")[0].strip().lower(), "webm")


def decode_audio_payload(value: str) -> DecodedAudio:
    """
    Decode a data URI or (prefixed) base64 string into audio bytes.

    Raises:
        InvalidInputError: if the value is empty or not valid base64
    """
    if not value or not value.strip():
        raise InvalidInputError("Audio data is required")

    value = value.strip()
    mime_type = DEFAULT_AUDIO_MIME

    match = DATA_URI_PATTERN.match(value)
    if match:
        mime_type = (match.group("mime") or DEFAULT_AUDIO_MIME).lower()
        payload = match.group("payload")
    elif "," in value:
        payload = value.split(",", 1)[1]
    else:
        payload = value

    payload = "".join(payload.split())
    if not payload:
        raise InvalidInputError("Audio data is empty")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInputError("Audio data is not valid base64") from None

    if not data:
        raise InvalidInputError("Audio data is empty")

    return DecodedAudio(data=data, mime_type=mime_type)


def to_data_uri(data: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(data).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"
