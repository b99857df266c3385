"""Exceptions raised by the tutoring orchestration layer"""  # noqa: D415

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Provider failure classes the orchestrator is allowed to act on."""

    QUOTA_EXCEEDED = "quota_exceeded"
    TRANSPORT = "transport"


class GeminiTutorError(Exception):
    """Base exception for gemini_tutor errors"""  # noqa: D415


class ConfigurationError(GeminiTutorError):
    """Raised when configuration cannot be resolved or validated"""  # noqa: D415


class ValidationError(GeminiTutorError, ValueError):
    """Raised when caller input is invalid"""  # noqa: D415


class ProviderError(GeminiTutorError):
    """A failure reported by the model provider, already classified.

    Adapters convert SDK exceptions into this type so that nothing above the
    adapter boundary has to inspect raw error text.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.TRANSPORT,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class QuotaExceededError(ProviderError):
    """Raised when the provider rejects a call for rate or quota reasons"""  # noqa: D415

    def __init__(self, message: str, *, status_code: int | None = 429) -> None:
        super().__init__(
            message, kind=ErrorKind.QUOTA_EXCEEDED, status_code=status_code
        )


class EmptyResponseError(ProviderError):
    """Raised when the provider answers without the expected payload"""  # noqa: D415


class SessionNotInitializedError(GeminiTutorError):
    """Raised when a session slot is used before it was started."""

    def __init__(self, slot: str) -> None:
        super().__init__(
            f"The {slot} session is not initialized. Start it before sending messages."
        )
        self.slot = slot
