"""Long-lived conversations, one per named slot.

Each slot (chat, exam) holds at most one session. A session is bound to
the model that answered its opening turn, and every later turn reports
that model. Starting a slot again replaces the previous session; the old
provider session is simply dropped.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
import logging
from typing import TYPE_CHECKING

from gemini_tutor.core.types import (
    ChatTurn,
    GenerationConfig,
    ProviderResponse,
    TextPart,
    Tool,
)
from gemini_tutor.exceptions import SessionNotInitializedError
from gemini_tutor.telemetry import TelemetryContext

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gemini_tutor.adapters.base import GenerationAdapter, ProviderSession
    from gemini_tutor.core.models import ModelTier
    from gemini_tutor.core.types import APIPart
    from gemini_tutor.pipeline.tiered import TieredCaller
    from gemini_tutor.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)


class SessionSlot(str, Enum):
    CHAT = "chat"
    EXAM = "exam"


@dataclasses.dataclass(slots=True)
class ConversationSession:
    """A provider session plus everything needed to audit it later."""

    slot: SessionSlot
    bound_model_id: str
    handle: ProviderSession
    persona: str | None = None
    transcript: list[ChatTurn] = dataclasses.field(default_factory=list)


def _reply(response: ProviderResponse, model_id: str, default_text: str = "") -> ChatTurn:
    return ChatTurn(
        role="model",
        text=response.text or default_text,
        model_used=model_id,
        sources=response.sources,
    )


class SessionRegistry:
    """Owns the chat and exam slots.

    Only ``start`` creates sessions. There is no lock: concurrent starts on
    one slot resolve last-write-wins.
    """

    def __init__(
        self,
        adapter: GenerationAdapter,
        caller: TieredCaller,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self._adapter = adapter
        self._caller = caller
        self._telemetry = telemetry or TelemetryContext()
        self._slots: dict[SessionSlot, ConversationSession] = {}

    async def start(
        self,
        slot: SessionSlot | str,
        tier: ModelTier,
        *,
        initial_parts: Sequence[APIPart],
        system_instruction: str | None = None,
        tools: tuple[Tool, ...] = (),
        persona: str | None = None,
        fallback: ModelTier | None = None,
        default_text: str = "",
    ) -> ChatTurn:
        """Open a new session for ``slot`` and send its opening message.

        Any previous session in the slot is discarded first, so a failed
        start leaves the slot empty. Errors propagate to the caller.
        """
        slot = SessionSlot(slot)
        self._slots.pop(slot, None)
        config = GenerationConfig(system_instruction=system_instruction, tools=tools)
        parts = tuple(initial_parts)

        async def invoke(model_id: str) -> tuple[ProviderSession, ProviderResponse]:
            handle = await self._adapter.create_session(model_name=model_id, config=config)
            return handle, await handle.send(parts)

        with self._telemetry(f"session.{slot.value}.start"):
            result = await self._caller.call(
                f"Start {slot.value}", invoke, tier, fallback
            )

        handle, response = result.output
        opening = _reply(response, result.model_id, default_text)
        self._slots[slot] = ConversationSession(
            slot=slot,
            bound_model_id=result.model_id,
            handle=handle,
            persona=persona if persona is not None else system_instruction,
            transcript=[opening],
        )
        log.info("Started %s session on %s", slot.value, result.model_id)
        return opening

    async def send(self, slot: SessionSlot | str, message: str) -> ChatTurn:
        """Send a user message into an existing session.

        Raises:
            SessionNotInitializedError: The slot has no session.
        """
        session = self.get(slot)
        if session is None:
            raise SessionNotInitializedError(SessionSlot(slot).value)

        with self._telemetry(f"session.{session.slot.value}.send"):
            response = await session.handle.send((TextPart(message),))

        # Record both turns only once the provider answered.
        session.transcript.append(ChatTurn(role="user", text=message))
        reply = _reply(response, session.bound_model_id)
        session.transcript.append(reply)
        return reply

    def get(self, slot: SessionSlot | str) -> ConversationSession | None:
        return self._slots.get(SessionSlot(slot))

    def is_active(self, slot: SessionSlot | str) -> bool:
        return self.get(slot) is not None

    def transcript(self, slot: SessionSlot | str) -> tuple[ChatTurn, ...]:
        session = self.get(slot)
        return tuple(session.transcript) if session else ()

    def clear(self, slot: SessionSlot | str) -> None:
        if self._slots.pop(SessionSlot(slot), None) is not None:
            log.debug("Cleared %s session", SessionSlot(slot).value)
