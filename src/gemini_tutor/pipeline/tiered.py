"""Tiered model calls with a single quota fallback.

A call names a primary tier and optionally a fallback tier. Only quota
exhaustion on the primary triggers the fallback, and the fallback is tried
exactly once. There is no retry loop, delay, cache or rate limiting here.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import logging
from typing import TYPE_CHECKING, TypeAlias, TypeVar

from gemini_tutor.adapters.base import is_quota_error
from gemini_tutor.core.models import ModelTier
from gemini_tutor.core.types import TieredResult
from gemini_tutor.exceptions import QuotaExceededError
from gemini_tutor.telemetry import TelemetryContext

if TYPE_CHECKING:
    from gemini_tutor.config import FrozenConfig
    from gemini_tutor.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

T = TypeVar("T")

Invoke: TypeAlias = Callable[[str], Awaitable[T]]


class TieredCaller:
    """Runs ``invoke(model_id)`` against a primary tier, falling back on quota."""

    def __init__(
        self,
        config: FrozenConfig,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self._config = config
        self._telemetry = telemetry or TelemetryContext()

    def model_for(self, tier: ModelTier | str) -> str:
        return self._config.model_for(tier)

    async def call(
        self,
        operation_name: str,
        invoke: Invoke[T],
        primary: ModelTier | str,
        fallback: ModelTier | str | None = None,
    ) -> TieredResult[T]:
        """Invoke ``primary``; on quota exhaustion try ``fallback`` once.

        Raises:
            QuotaExceededError: The primary hit its quota and no fallback
                was configured. Errors from the fallback propagate unchanged.
            Exception: Any non-quota failure of the primary, unchanged.
        """
        primary_model = self.model_for(primary)
        with self._telemetry(f"tiered.{operation_name}", model=primary_model) as tele:
            try:
                output = await invoke(primary_model)
                return TieredResult(output=output, model_id=primary_model)
            except Exception as primary_error:
                if not is_quota_error(primary_error):
                    raise
                if fallback is None:
                    if isinstance(primary_error, QuotaExceededError):
                        raise
                    raise QuotaExceededError(str(primary_error)) from primary_error
                fallback_model = self.model_for(fallback)
                log.warning(
                    "[%s] Quota limit on %s. Falling back to %s.",
                    operation_name,
                    primary_model,
                    fallback_model,
                )
                tele.count("fallback", model=fallback_model)

            output = await invoke(fallback_model)
            return TieredResult(output=output, model_id=fallback_model)
