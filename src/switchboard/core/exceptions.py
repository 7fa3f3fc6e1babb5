"""
Custom Exceptions for Switchboard
=================================

Structured error handling lets callers react to a failure by type rather
than by parsing strings.

Error Codes:
- 1xxx: Client errors (task validation)
- 3xxx: Backend errors (provider failure, interrupted stream)
- 5xxx: System errors (configuration, internal)
"""

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Structured error codes for user-friendly messages"""

    # 1xxx: Client Errors
    VALIDATION_ERROR = 1001

    # 3xxx: Backend Errors
    PROVIDER_ERROR = 3001
    PROVIDER_RATE_LIMITED = 3002
    STREAM_INTERRUPTED = 3003

    # 5xxx: System Errors
    INTERNAL_ERROR = 5001
    CONFIGURATION_ERROR = 5003


class SwitchboardError(Exception):
    """Base exception for all Switchboard errors"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging"""
        return {
            'error_type': self.__class__.__name__,
            'error_code': int(self.error_code),
            'message': self.message,
            'details': self.details
        }

    def user_message(self) -> str:
        """Get user-friendly error message based on error code"""
        code_messages = {
            ErrorCode.VALIDATION_ERROR: "Invalid input provided",
            ErrorCode.PROVIDER_ERROR: "AI backend request failed",
            ErrorCode.PROVIDER_RATE_LIMITED: "AI backend rate limit reached. Please try again later",
            ErrorCode.STREAM_INTERRUPTED: "Generation stream was interrupted",
            ErrorCode.INTERNAL_ERROR: "Internal server error",
            ErrorCode.CONFIGURATION_ERROR: "AI backend is not configured",
        }
        return f"Error {self.error_code}: {code_messages.get(self.error_code, self.message)}"


class ConfigurationError(SwitchboardError):
    """Raised when a backend credential or setting is missing"""

    def __init__(self, credential: str, message: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(
            message or f"{credential} is not configured. AI generation is disabled.",
            ErrorCode.CONFIGURATION_ERROR,
            {"credential": credential, **(details or {})},
        )
        self.credential = credential


class ProviderError(SwitchboardError):
    """Raised when a backend call fails; carries the backend's own message"""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        code = ErrorCode.PROVIDER_RATE_LIMITED if status_code == 429 else ErrorCode.PROVIDER_ERROR
        super().__init__(message, code, {"provider": provider, "status_code": status_code, **(details or {})})
        self.provider = provider
        self.status_code = status_code


class StreamInterrupted(SwitchboardError):
    """Raised when the backend connection drops while a stream is in flight"""

    def __init__(self, provider: str, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.STREAM_INTERRUPTED, {"provider": provider, **(details or {})})
        self.provider = provider


class ValidationError(SwitchboardError):
    """Raised when input validation fails"""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)
