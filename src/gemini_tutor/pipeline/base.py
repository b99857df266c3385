"""Shared plumbing for pipeline agents."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from gemini_tutor.core.types import GenerationConfig, ProviderResponse, TextPart
from gemini_tutor.telemetry import TelemetryContext

if TYPE_CHECKING:
    from gemini_tutor.adapters.base import GenerationAdapter
    from gemini_tutor.core.models import ModelTier
    from gemini_tutor.core.types import APIPart, PipelineRequest, TieredResult
    from gemini_tutor.telemetry import TelemetryContextProtocol

    from .tiered import TieredCaller


def request_parts(
    request: PipelineRequest, wrap_auxiliary: Callable[[str], str] | None = None
) -> tuple[APIPart, ...]:
    """Primary content followed by the auxiliary text part, if any."""
    parts: list[APIPart] = [request.primary_part()]
    if request.auxiliary_text:
        text = request.auxiliary_text
        parts.append(TextPart(wrap_auxiliary(text) if wrap_auxiliary else text))
    return tuple(parts)


class ModelStage:
    """Base for agents that issue tiered calls through one adapter."""

    def __init__(
        self,
        adapter: GenerationAdapter,
        caller: TieredCaller,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self._adapter = adapter
        self._caller = caller
        self._telemetry = telemetry or TelemetryContext()

    async def _generate(
        self,
        operation_name: str,
        parts: tuple[APIPart, ...],
        config: GenerationConfig,
        primary: ModelTier,
        fallback: ModelTier | None = None,
    ) -> TieredResult[ProviderResponse]:
        async def invoke(model_id: str) -> ProviderResponse:
            return await self._adapter.generate(
                model_name=model_id, parts=parts, config=config
            )

        return await self._caller.call(operation_name, invoke, primary, fallback)
