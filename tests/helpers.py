"""Scripted fakes for adapter-level tests.

Responses are consumed in order. Each scripted item is either a
``ProviderResponse``, a plain string (wrapped as response text), a mapping
or list (serialized to JSON text), an exception instance (raised), or a
callable ``(model_name, parts, config) -> item``.
"""

from collections import deque
from dataclasses import dataclass
import json
from typing import Any

from gemini_tutor.config import FrozenConfig
from gemini_tutor.core.types import GenerationConfig, ProviderResponse, TextPart


def make_config(**overrides: Any) -> FrozenConfig:
    values: dict[str, Any] = {
        "api_key": None,
        "smart_model": "smart-model",
        "fast_model": "fast-model",
        "image_smart_model": "image-smart-model",
        "image_fast_model": "image-fast-model",
        "use_real_api": False,
    }
    values.update(overrides)
    return FrozenConfig(**values)


def to_response(item: Any, model_name: str | None = None) -> ProviderResponse:
    if isinstance(item, ProviderResponse):
        return item
    if isinstance(item, str) or item is None:
        return ProviderResponse(text=item, model_name=model_name)
    return ProviderResponse(text=json.dumps(item), model_name=model_name)


def texts_of(parts: tuple[Any, ...]) -> list[str]:
    return [p.text for p in parts if isinstance(p, TextPart)]


@dataclass
class RecordedCall:
    model_name: str
    parts: tuple[Any, ...]
    config: GenerationConfig

    @property
    def prompt(self) -> str:
        return "\n".join(texts_of(self.parts))


class _Script:
    def __init__(self, items: list[Any]) -> None:
        self._items = deque(items)

    def next(self, model_name: str, parts: tuple[Any, ...], config: Any) -> ProviderResponse:
        if not self._items:
            raise AssertionError("Scripted fake ran out of responses")
        item = self._items.popleft()
        if callable(item) and not isinstance(item, ProviderResponse):
            item = item(model_name, parts, config)
        if isinstance(item, BaseException):
            raise item
        return to_response(item, model_name)

    @property
    def remaining(self) -> int:
        return len(self._items)


class ScriptedSession:
    def __init__(self, model_name: str, config: GenerationConfig, script: _Script) -> None:
        self.model_name = model_name
        self.config = config
        self.sent: list[tuple[Any, ...]] = []
        self._script = script

    async def send(self, parts: tuple[Any, ...]) -> ProviderResponse:
        self.sent.append(parts)
        return self._script.next(self.model_name, parts, self.config)


class ScriptedAdapter:
    """Fake ``GenerationAdapter`` with separate scripts for calls and sessions."""

    def __init__(
        self,
        responses: list[Any] | None = None,
        *,
        session_responses: list[Any] | None = None,
    ) -> None:
        self.calls: list[RecordedCall] = []
        self.sessions: list[ScriptedSession] = []
        self._script = _Script(list(responses or []))
        self._session_script = _Script(list(session_responses or []))

    async def generate(
        self,
        *,
        model_name: str,
        parts: tuple[Any, ...],
        config: GenerationConfig,
    ) -> ProviderResponse:
        self.calls.append(RecordedCall(model_name, tuple(parts), config))
        return self._script.next(model_name, parts, config)

    async def create_session(
        self, *, model_name: str, config: GenerationConfig
    ) -> ScriptedSession:
        session = ScriptedSession(model_name, config, self._session_script)
        self.sessions.append(session)
        return session

    @property
    def models_called(self) -> list[str]:
        return [c.model_name for c in self.calls]
