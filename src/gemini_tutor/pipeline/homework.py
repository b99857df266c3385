"""Homework analysis: tuning, deep analysis and self-correcting refinement.

Stages run strictly in order:

1. Tuning (FAST) identifies subject, topic and grading rules.
2. Deep analysis (SMART, falling back to FAST) produces ordered problems.
3. Records the model itself flagged as weak are sent back once for
   refinement (SMART). Corrections replace their originals in place.
4. Raw records become immutable ``ProblemRecord`` values.

Refinement is best-effort: any failure keeps the first-pass records.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import logging
import math
from typing import Any

from gemini_tutor.constants import (
    DEEP_ANALYSIS_TEMPERATURE,
    REFINEMENT_CONFIDENCE_THRESHOLD,
    SELF_CORRECTED_CONFIDENCE,
    SELF_CORRECTED_NOTE,
)
from gemini_tutor.core.models import ModelTier
from gemini_tutor.core.types import (
    BoundingBox,
    GenerationConfig,
    HomeworkResponse,
    PipelineRequest,
    ProblemRecord,
    TextPart,
    ValidationCheck,
)

from . import prompts
from .base import ModelStage, request_parts
from .sanitizer import as_mapping, parse_structured
from .schemas import ANALYSIS_SCHEMA, REFINEMENT_SCHEMA, TUNING_SCHEMA

log = logging.getLogger(__name__)

StatusCallback = Callable[[str], None]

# --- Pure helpers over raw (parsed) records ---


def _confidence_of(raw: dict[str, Any]) -> float:
    check = raw.get("validation_check")
    score = check.get("confidence_score") if isinstance(check, dict) else None
    if isinstance(score, bool) or not isinstance(score, int | float):
        return 0
    return score


def needs_refinement(raw: dict[str, Any]) -> bool:
    """Flagged as a warning, or confidence below the fixed threshold."""
    check = raw.get("validation_check")
    status = check.get("status") if isinstance(check, dict) else None
    return status == "warning" or _confidence_of(raw) < REFINEMENT_CONFIDENCE_THRESHOLD


def select_for_refinement(problems: Sequence[dict[str, Any]]) -> list[int]:
    """1-based position ids of the records that need a second look"""  # noqa: D415
    return [i for i, raw in enumerate(problems, start=1) if needs_refinement(raw)]


def _same_value(left: Any, right: Any) -> bool:
    return left is not None and right is not None and left == right


def _find_original(
    problems: Sequence[dict[str, Any]],
    correction: dict[str, Any],
    sent_ids: frozenset[int],
) -> int | None:
    echoed = correction.get("id")
    if isinstance(echoed, int) and not isinstance(echoed, bool) and echoed in sent_ids:
        return echoed - 1
    for index, original in enumerate(problems):
        if _same_value(
            original.get("problem_statement"), correction.get("problem_statement")
        ) or _same_value(original.get("student_answer"), correction.get("student_answer")):
            return index
    return None


def merge_refined(
    problems: Sequence[dict[str, Any]],
    corrections: Sequence[Any],
    sent_ids: Sequence[int] = (),
) -> list[dict[str, Any]]:
    """Replace originals with their corrections and mark them self-corrected.

    A correction is matched by its echoed position id when that id was sent
    for refinement, otherwise by equal ``problem_statement`` or equal
    ``student_answer`` (first match wins, absent values never match).
    Unmatched corrections are dropped. The input list is not modified.
    """
    merged = [dict(p) for p in problems]
    allowed = frozenset(sent_ids)
    for correction in corrections:
        if not isinstance(correction, dict):
            continue
        index = _find_original(merged, correction, allowed)
        if index is None:
            log.debug("Dropping unmatched refinement: %.120r", correction)
            continue
        replacement = {k: v for k, v in correction.items() if k != "id"}
        replacement["validation_check"] = {
            "status": "verified",
            "confidence_score": SELF_CORRECTED_CONFIDENCE,
            "rendering_note": SELF_CORRECTED_NOTE,
        }
        merged[index] = replacement
    return merged


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _str_tuple(value: Any, *, unique: bool = False) -> tuple[str, ...]:
    if not isinstance(value, list | tuple):
        return ()
    items = [v if isinstance(v, str) else str(v) for v in value if v is not None]
    if unique:
        items = list(dict.fromkeys(items))
    return tuple(items)


def _build_validation(raw: Any, position: int) -> ValidationCheck | None:
    if not isinstance(raw, dict):
        return None
    score = raw.get("confidence_score")
    try:
        # Non-finite floats stay floats and fail the int check below.
        if isinstance(score, float) and math.isfinite(score):
            score = round(score)
        return ValidationCheck(
            status=raw.get("status"),
            confidence_score=score,
            rendering_note=_optional_str(raw.get("rendering_note")),
        )
    except (ValueError, TypeError) as e:
        log.warning("Problem %d: ignoring invalid validation_check: %s", position, e)
        return None


def _build_box(raw: Any, position: int) -> BoundingBox | None:
    try:
        return BoundingBox.from_raw(raw)
    except (ValueError, TypeError) as e:
        log.warning(
            "Problem %d: discarding bounding box outside the 0-1000 contract: %s",
            position,
            e,
        )
        return None


def build_record(
    raw: dict[str, Any], position: int, subject: str | None, topic: str | None
) -> ProblemRecord:
    is_correct = raw.get("is_correct")
    return ProblemRecord(
        id=position,
        subject=subject,
        topic=topic,
        is_correct=is_correct if isinstance(is_correct, bool) else None,
        bounding_box=_build_box(raw.get("error_location"), position),
        explanation=_optional_str(raw.get("complete_solution")) or "",
        steps=_str_tuple(raw.get("step_by_step")),
        key_concepts=_str_tuple(raw.get("key_concepts"), unique=True),
        student_answer=_optional_str(raw.get("student_answer")),
        problem_statement=_optional_str(raw.get("problem_statement")),
        visual_aid_prompt=_optional_str(raw.get("visual_aid_prompt")),
        validation=_build_validation(raw.get("validation_check"), position),
    )


# --- Pipeline ---


class HomeworkPipeline(ModelStage):
    """Grades uploaded homework or explains typed problems."""

    async def analyze(
        self,
        request: PipelineRequest,
        on_status: StatusCallback | None = None,
    ) -> HomeworkResponse:
        notify = on_status or (lambda _message: None)
        input_parts = request_parts(request, prompts.auxiliary_context)

        with self._telemetry("homework"):
            notify("Identifying subject and grading rules...")
            with self._telemetry("tuning"):
                tuning_result = await self._generate(
                    "Auto-Tuning",
                    (*input_parts, TextPart(prompts.TUNING_PROMPT)),
                    GenerationConfig.json(TUNING_SCHEMA),
                    ModelTier.FAST,
                )
            tuning = as_mapping(parse_structured(tuning_result.output.text))
            subject = _optional_str(tuning.get("subject"))
            topic = _optional_str(tuning.get("topic"))
            grading_rules = _str_tuple(tuning.get("grading_rules"))

            notify(f"Applying {subject or 'general'} grading protocols...")
            with self._telemetry("deep_analysis"):
                analysis_result = await self._generate(
                    "Deep Execution",
                    (
                        *input_parts,
                        TextPart(prompts.deep_analysis_prompt(subject, grading_rules)),
                    ),
                    GenerationConfig.json(
                        ANALYSIS_SCHEMA, temperature=DEEP_ANALYSIS_TEMPERATURE
                    ),
                    ModelTier.SMART,
                    ModelTier.FAST,
                )
            analysis = as_mapping(parse_structured(analysis_result.output.text))
            raw_problems = analysis.get("problems")
            problems = [
                p for p in (raw_problems if isinstance(raw_problems, list) else [])
                if isinstance(p, dict)
            ]

            selected = select_for_refinement(problems)
            if selected:
                notify(f"Self-correcting {len(selected)} complex problems...")
                problems = await self._refine(input_parts, problems, selected)

            records = tuple(
                build_record(raw, position, subject, topic)
                for position, raw in enumerate(problems, start=1)
            )

        return HomeworkResponse(
            problems=records,
            model_used=analysis_result.model_id,
            has_student_solution=tuning.get("has_student_solution") is True,
            subject=subject,
            topic=topic,
            grading_rules=grading_rules,
        )

    async def _refine(
        self,
        input_parts: tuple[Any, ...],
        problems: list[dict[str, Any]],
        selected: list[int],
    ) -> list[dict[str, Any]]:
        tagged = [{"id": position, **problems[position - 1]} for position in selected]
        try:
            with self._telemetry("refinement", selected=len(selected)):
                result = await self._generate(
                    "Analysis Refinement",
                    (*input_parts, TextPart(prompts.refinement_prompt(tagged))),
                    GenerationConfig.json(REFINEMENT_SCHEMA),
                    ModelTier.SMART,
                )
        except Exception as e:
            log.warning(
                "Refinement step failed, keeping original analysis: %s", e, exc_info=True
            )
            self._telemetry.count("refinement_failed")
            return problems

        corrections = as_mapping(parse_structured(result.output.text)).get("problems")
        if not isinstance(corrections, list) or not corrections:
            log.warning("Refinement returned no usable problems; keeping original analysis")
            self._telemetry.count("refinement_failed")
            return problems
        return merge_refined(problems, corrections, selected)
