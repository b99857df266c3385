"""Exam prep: an invigilator or tutor session plus an independent grading audit.

The session persona is fixed when the exam starts. At the end the
invigilator grades its own session, and a separate SMART call with no
shared history re-marks the transcript.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from gemini_tutor.constants import DEFAULT_EXAM_START_TEXT, FINISH_EXAM_COMMAND
from gemini_tutor.core.models import ModelTier
from gemini_tutor.core.types import (
    ChatTurn,
    ExamConfig,
    ExamFinish,
    GenerationConfig,
    GradingAudit,
    PipelineRequest,
    TextInput,
    TextPart,
    Tool,
)
from gemini_tutor.sessions import SessionSlot

from . import prompts
from .base import ModelStage
from .sanitizer import as_mapping, parse_structured
from .schemas import EXAM_AUDIT_SCHEMA

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gemini_tutor.adapters.base import GenerationAdapter
    from gemini_tutor.core.types import APIPart
    from gemini_tutor.sessions import SessionRegistry
    from gemini_tutor.telemetry import TelemetryContextProtocol

    from .tiered import TieredCaller

log = logging.getLogger(__name__)


def opening_parts(
    config: ExamConfig, reference: PipelineRequest | None = None
) -> tuple[APIPart, ...]:
    parts: list[APIPart] = []
    if reference is not None:
        if isinstance(reference, TextInput):
            parts.append(TextPart(prompts.reference_material_text(reference.content)))
        else:
            parts.append(reference.primary_part())
        if reference.auxiliary_text:
            parts.append(TextPart(prompts.reference_material_text(reference.auxiliary_text)))
        parts.append(TextPart(prompts.REFERENCE_MATERIAL_NOTE))
    parts.append(TextPart(prompts.exam_opening_message(strict=config.strict_mode)))
    return tuple(parts)


def _score(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value):
        return None
    return round(value)


def to_audit(raw: dict[str, Any], model_used: str) -> GradingAudit:
    """Build a ``GradingAudit``; raises ValueError when required fields are unusable."""
    fairness = _score(raw.get("fairnessScore"))
    if fairness is None:
        raise ValueError(f"fairnessScore must be a number, got {raw.get('fairnessScore')!r}")
    discrepancies = raw.get("discrepancies")
    return GradingAudit(
        audited_score=str(raw.get("auditedScore", "")),
        fairness_score=fairness,
        discrepancies=tuple(
            str(d) for d in (discrepancies if isinstance(discrepancies, list) else ())
        ),
        feedback=str(raw.get("feedback", "")),
        model_used=model_used,
    )


class ExamPipeline(ModelStage):
    def __init__(
        self,
        adapter: GenerationAdapter,
        caller: TieredCaller,
        sessions: SessionRegistry,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        super().__init__(adapter, caller, telemetry)
        self._sessions = sessions
        self._config: ExamConfig | None = None

    @property
    def config(self) -> ExamConfig | None:
        """Settings of the most recently started exam."""
        return self._config

    async def start(
        self, config: ExamConfig, reference: PipelineRequest | None = None
    ) -> ChatTurn:
        """Open the exam slot with a persona fixed for the whole session."""
        persona = prompts.exam_persona(config)
        self._config = None
        turn = await self._sessions.start(
            SessionSlot.EXAM,
            ModelTier.FAST,
            initial_parts=opening_parts(config, reference),
            system_instruction=persona,
            tools=(Tool.GOOGLE_SEARCH,) if config.real_world_mode else (),
            persona=persona,
            default_text=DEFAULT_EXAM_START_TEXT,
        )
        self._config = config
        return turn

    async def send(self, message: str) -> ChatTurn:
        return await self._sessions.send(SessionSlot.EXAM, message)

    async def finish(self, *, audit: bool | None = None) -> ExamFinish:
        """Ask the invigilator for its report, then optionally audit it.

        ``audit`` defaults to True for strict exams. A failed audit yields
        ``audit=None`` rather than an error.
        """
        report = await self._sessions.send(SessionSlot.EXAM, FINISH_EXAM_COMMAND)
        if audit is None:
            audit = self._config is not None and self._config.strict_mode
        if not audit:
            return ExamFinish(report=report)

        try:
            grading = await self.audit(self._sessions.transcript(SessionSlot.EXAM))
        except Exception as e:
            log.warning("Independent grading audit failed: %s", e, exc_info=True)
            self._telemetry.count("audit_failed")
            grading = None
        return ExamFinish(report=report, audit=grading)

    async def audit(self, transcript: Sequence[ChatTurn]) -> GradingAudit:
        """Re-mark a transcript with an independent SMART call (no fallback)."""
        result = await self._generate(
            "Exam Audit",
            (TextPart(prompts.exam_audit_prompt(prompts.format_transcript(transcript))),),
            GenerationConfig.json(EXAM_AUDIT_SCHEMA),
            ModelTier.SMART,
        )
        return to_audit(as_mapping(parse_structured(result.output.text)), result.model_id)
