"""Tutor chat about an uploaded problem."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gemini_tutor.constants import CHAT_SYSTEM_INSTRUCTION, EMPTY_CONTEXT_MARKER
from gemini_tutor.core.models import ModelTier
from gemini_tutor.core.types import TextPart, Tool
from gemini_tutor.sessions import SessionSlot

from . import prompts

if TYPE_CHECKING:
    from gemini_tutor.core.types import APIPart, ChatTurn, PipelineRequest
    from gemini_tutor.sessions import SessionRegistry


def chat_opening_parts(request: PipelineRequest) -> tuple[APIPart, ...]:
    context = (
        prompts.chat_context(request.auxiliary_text)
        if request.auxiliary_text
        else EMPTY_CONTEXT_MARKER
    )
    return (request.primary_part(), TextPart(context))


class ChatPipeline:
    def __init__(self, sessions: SessionRegistry) -> None:
        self._sessions = sessions

    async def start(self, request: PipelineRequest) -> ChatTurn:
        return await self._sessions.start(
            SessionSlot.CHAT,
            ModelTier.FAST,
            initial_parts=chat_opening_parts(request),
            system_instruction=CHAT_SYSTEM_INSTRUCTION,
            tools=(Tool.GOOGLE_SEARCH,),
        )

    async def send(self, message: str) -> ChatTurn:
        return await self._sessions.send(SessionSlot.CHAT, message)
