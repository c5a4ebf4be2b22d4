"""
Error taxonomy for the voice gateway.

Every failure that can reach a caller is one of these classes. Clients raise
them internally; public operations catch them and hand them back inside an
``OperationResult`` so the front end can render an error state.
"""

from typing import Optional


class GatewayError(Exception):
    """Base class for all gateway failures.

    Attributes:
        message: Human readable description, safe to show to the front end
        status_code: HTTP status returned by the remote service, if any
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (status {self.status_code})"
        return self.message


class ConfigError(GatewayError):
    """Integration settings are missing or the integration is disabled."""


class InvalidInputError(GatewayError):
    """The caller supplied an unusable request (blank text, bad audio)."""


class TransportError(GatewayError):
    """Network failure or timeout before any HTTP status was received."""


class AuthError(GatewayError):
    """The OAuth token endpoint refused the credentials or returned no token."""


class SessionError(GatewayError):
    """No agent session could be created on any endpoint shape."""


class AgentError(GatewayError):
    """A message could not be delivered to the agent."""


class SpeechError(GatewayError):
    """Transcription, chat or speech synthesis failed at the provider."""
