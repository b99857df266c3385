"""Google Gemini adapter built on the ``google-genai`` async client.

Translates provider-neutral parts and ``GenerationConfig`` into SDK types,
extracts text, grounding citations and inline images from responses, and
converts SDK exceptions into ``ProviderError`` at the boundary.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from gemini_tutor.core.types import (
    InlineDataPart,
    ProviderResponse,
    TextPart,
    Tool,
    WebSource,
)
from gemini_tutor.exceptions import ErrorKind, ProviderError, QuotaExceededError

from .base import classify_error

if TYPE_CHECKING:
    from gemini_tutor.core.types import APIPart, GenerationConfig

log = logging.getLogger(__name__)


def to_sdk_part(part: APIPart) -> types.Part:
    if isinstance(part, TextPart):
        return types.Part.from_text(text=part.text)
    if isinstance(part, InlineDataPart):
        return types.Part.from_bytes(data=bytes(part.data), mime_type=part.mime_type)
    raise TypeError(f"Unsupported part type: {type(part).__name__}")


def to_sdk_config(config: GenerationConfig) -> types.GenerateContentConfig:
    """Build the SDK config, leaving unset fields to provider defaults."""
    kwargs: dict[str, Any] = {}
    if config.system_instruction:
        kwargs["system_instruction"] = config.system_instruction
    if config.temperature is not None:
        kwargs["temperature"] = config.temperature
    if config.response_mime_type:
        kwargs["response_mime_type"] = config.response_mime_type
    if config.response_schema is not None:
        kwargs["response_schema"] = dict(config.response_schema)
    if Tool.GOOGLE_SEARCH in config.tools:
        kwargs["tools"] = [types.Tool(google_search=types.GoogleSearch())]
    if config.image_aspect_ratio or config.image_size:
        kwargs["image_config"] = types.ImageConfig(
            aspect_ratio=config.image_aspect_ratio,
            image_size=config.image_size,
        )
        kwargs["response_modalities"] = ["TEXT", "IMAGE"]
    return types.GenerateContentConfig(**kwargs)


def extract_sources(response: Any) -> tuple[WebSource, ...]:
    """Web citations from the first candidate's grounding metadata."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ()
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []
    sources = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None)
        if uri:
            sources.append(WebSource(uri=uri, title=getattr(web, "title", None) or ""))
    return tuple(sources)


def extract_images(response: Any) -> tuple[InlineDataPart, ...]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ()
    content = getattr(candidates[0], "content", None)
    images = []
    for part in getattr(content, "parts", None) or []:
        blob = getattr(part, "inline_data", None)
        data = getattr(blob, "data", None)
        if data:
            images.append(
                InlineDataPart(
                    data=bytes(data), mime_type=getattr(blob, "mime_type", None) or "image/png"
                )
            )
    return tuple(images)


def extract_text(response: Any) -> str | None:
    try:
        return response.text
    except (ValueError, AttributeError):
        # ``.text`` raises on responses that only carry non-text parts
        return None


def to_response(response: Any, model_name: str) -> ProviderResponse:
    return ProviderResponse(
        text=extract_text(response),
        sources=extract_sources(response),
        images=extract_images(response),
        model_name=model_name,
    )


def to_provider_error(exc: Exception) -> ProviderError:
    """Convert an SDK or transport exception into a classified ``ProviderError``."""
    status_code = getattr(exc, "code", None)
    if not isinstance(status_code, int):
        status_code = None
    message = str(exc) or type(exc).__name__
    if classify_error(exc) is ErrorKind.QUOTA_EXCEEDED:
        return QuotaExceededError(message, status_code=status_code)
    return ProviderError(message, kind=ErrorKind.TRANSPORT, status_code=status_code)


class GeminiChatSession:
    """Wraps an SDK async chat; the SDK keeps the conversation history."""

    def __init__(self, chat: Any, model_name: str) -> None:
        self._chat = chat
        self.model_name = model_name

    async def send(self, parts: tuple[APIPart, ...]) -> ProviderResponse:
        try:
            response = await self._chat.send_message([to_sdk_part(p) for p in parts])
        except (genai_errors.APIError, OSError) as e:
            raise to_provider_error(e) from e
        return to_response(response, self.model_name)


class GoogleGenAIAdapter:
    """Real provider adapter using ``genai.Client(...).aio``."""

    def __init__(self, api_key: str | None = None, client: Any | None = None) -> None:
        self._client = client if client is not None else genai.Client(api_key=api_key)

    async def generate(
        self,
        *,
        model_name: str,
        parts: tuple[APIPart, ...],
        config: GenerationConfig,
    ) -> ProviderResponse:
        log.debug("generate_content model=%s parts=%d", model_name, len(parts))
        try:
            response = await self._client.aio.models.generate_content(
                model=model_name,
                contents=[to_sdk_part(p) for p in parts],
                config=to_sdk_config(config),
            )
        except (genai_errors.APIError, OSError) as e:
            raise to_provider_error(e) from e
        return to_response(response, model_name)

    async def create_session(
        self, *, model_name: str, config: GenerationConfig
    ) -> GeminiChatSession:
        chat = self._client.aio.chats.create(
            model=model_name, config=to_sdk_config(config)
        )
        return GeminiChatSession(chat, model_name)
