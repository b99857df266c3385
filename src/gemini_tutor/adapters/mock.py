"""Deterministic adapter used when ``use_real_api`` is false (no network)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gemini_tutor.core.types import ProviderResponse, TextPart

if TYPE_CHECKING:
    from gemini_tutor.core.types import APIPart, GenerationConfig


def _first_text(parts: tuple[APIPart, ...]) -> str:
    for part in parts:
        if isinstance(part, TextPart):
            return part.text
    return ""


class MockSession:
    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        self.sent: list[tuple[APIPart, ...]] = []

    async def send(self, parts: tuple[APIPart, ...]) -> ProviderResponse:
        self.sent.append(parts)
        return ProviderResponse(
            text=f"echo: {_first_text(parts)}", model_name=self.model_name
        )


class MockAdapter:
    """Echoes the first text part back as ``"echo: <text>"``."""

    async def generate(
        self,
        *,
        model_name: str,
        parts: tuple[APIPart, ...],
        config: GenerationConfig,  # noqa: ARG002
    ) -> ProviderResponse:
        return ProviderResponse(text=f"echo: {_first_text(parts)}", model_name=model_name)

    async def create_session(
        self,
        *,
        model_name: str,
        config: GenerationConfig,  # noqa: ARG002
    ) -> MockSession:
        return MockSession(model_name)
