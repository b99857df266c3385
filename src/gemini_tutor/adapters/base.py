"""Provider adapter protocols and error classification.

Adapters are the only code that talks to the model provider. Everything
above this boundary sees ``ProviderResponse`` values and ``ProviderError``
exceptions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from gemini_tutor.constants import QUOTA_ERROR_MARKERS, QUOTA_STATUS_CODE
from gemini_tutor.exceptions import ErrorKind, ProviderError

if TYPE_CHECKING:
    from gemini_tutor.core.types import APIPart, GenerationConfig, ProviderResponse


@runtime_checkable
class ProviderSession(Protocol):
    """A stateful conversation held by the provider."""

    async def send(self, parts: tuple[APIPart, ...]) -> ProviderResponse: ...


@runtime_checkable
class GenerationAdapter(Protocol):
    """Minimal surface the orchestrator needs from a model provider."""

    async def generate(
        self,
        *,
        model_name: str,
        parts: tuple[APIPart, ...],
        config: GenerationConfig,
    ) -> ProviderResponse: ...

    async def create_session(
        self, *, model_name: str, config: GenerationConfig
    ) -> ProviderSession: ...


def _status_of(exc: BaseException) -> object:
    for attr in ("code", "status_code", "status"):
        value = getattr(exc, attr, None)
        if value is not None:
            return value
    return None


def classify_error(exc: BaseException) -> ErrorKind:
    """Decide whether a failure is quota exhaustion.

    ``ProviderError`` carries its kind. Any other exception counts as quota
    exhaustion when it reports HTTP 429 or its text mentions "429" or
    "quota" (case-sensitive). Everything else is a transport failure.
    """
    if isinstance(exc, ProviderError):
        return exc.kind

    status = _status_of(exc)
    if status == QUOTA_STATUS_CODE or str(status) == str(QUOTA_STATUS_CODE):
        return ErrorKind.QUOTA_EXCEEDED

    for text in (str(exc), repr(exc)):
        if any(marker in text for marker in QUOTA_ERROR_MARKERS):
            return ErrorKind.QUOTA_EXCEEDED
    return ErrorKind.TRANSPORT


def is_quota_error(exc: BaseException) -> bool:
    return classify_error(exc) is ErrorKind.QUOTA_EXCEEDED
