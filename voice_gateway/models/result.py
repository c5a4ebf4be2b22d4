"""
Result object returned by every public gateway operation.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from voice_gateway.errors import GatewayError

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """
    Outcome of one gateway call.

    Rules:
      - success=True means ``value`` holds the operation's output.
      - success=False means ``error`` describes the failure; ``value`` is None.
      - Public operations never raise; they return ``OperationResult.fail(...)``.
    """

    success: bool
    value: Optional[T] = None
    error: Optional[GatewayError] = None

    @classmethod
    def ok(cls, value: T) -> "OperationResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: GatewayError) -> "OperationResult[T]":
        return cls(success=False, error=error)

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None

    @property
    def error_type(self) -> Optional[str]:
        return type(self.error).__name__ if self.error else None
