"""Math lab: optional grounding, solve, then independent verification.

The verifier (FAST) reviews the solver's logic and code. When it rejects
the first pass and supplies a corrected result, the correction is returned
and flagged as auto-repaired. A failed verification never fails the solve.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging
from typing import Any

from gemini_tutor.core.models import ModelTier
from gemini_tutor.core.types import (
    GenerationConfig,
    MathLabResult,
    TextPart,
    Tool,
    WebSource,
)

from . import prompts
from .base import ModelStage
from .sanitizer import as_mapping, clean_latex, clean_svg, parse_structured

log = logging.getLogger(__name__)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def resolve_verification(
    first_pass: dict[str, Any], verdict: Any
) -> tuple[dict[str, Any], bool]:
    """Pick the final payload and whether it was auto-repaired.

    Only an explicit ``valid: false`` with a non-empty corrected object
    replaces the first pass.
    """
    verdict = as_mapping(verdict)
    correction = verdict.get("corrected_response")
    if verdict.get("valid") is False and isinstance(correction, dict) and correction:
        return correction, True
    return first_pass, False


def to_result(
    payload: dict[str, Any],
    *,
    model_used: str,
    sources: tuple[WebSource, ...],
    was_auto_repaired: bool,
    verified_by: str | None,
) -> MathLabResult:
    return MathLabResult(
        latex=clean_latex(_text(payload.get("latex"))),
        explanation=_text(payload.get("explanation")),
        python_code=_text(payload.get("pythonCode")),
        result=_text(payload.get("result")),
        plot_svg=clean_svg(payload.get("plotSvg")),
        model_used=model_used,
        was_auto_repaired=was_auto_repaired,
        sources=sources,
        verified_by=verified_by,
    )


class MathLabPipeline(ModelStage):
    async def convert_text_to_math(self, text: str) -> str:
        """Turn a natural-language expression into bare LaTeX."""
        result = await self._generate(
            "Math Convert",
            (TextPart(prompts.text_to_math_prompt(text)),),
            GenerationConfig(),
            ModelTier.FAST,
        )
        return clean_latex(result.output.text)

    async def solve(
        self,
        problem: str,
        *,
        verified_latex: str | None = None,
        use_search: bool = False,
        history: Iterable[str] = (),
    ) -> MathLabResult:
        sources: tuple[WebSource, ...] = ()
        grounding: str | None = None

        with self._telemetry("math_lab"):
            if use_search:
                searched = await self._generate(
                    "Math Search",
                    (TextPart(prompts.math_grounding_prompt(problem)),),
                    GenerationConfig(tools=(Tool.GOOGLE_SEARCH,)),
                    ModelTier.FAST,
                )
                grounding = searched.output.text or None
                sources = searched.output.sources

            solved = await self._generate(
                "Math Lab",
                (
                    TextPart(
                        prompts.math_solve_prompt(
                            problem,
                            verified_latex=verified_latex,
                            grounding=grounding,
                            history=history,
                        )
                    ),
                ),
                GenerationConfig.json(),
                ModelTier.SMART,
                ModelTier.FAST,
            )
            first_pass = as_mapping(parse_structured(solved.output.text))

            verdict: Any = {}
            verified_by: str | None = None
            try:
                checked = await self._generate(
                    "Math Verification",
                    (
                        TextPart(
                            prompts.math_verification_prompt(
                                problem,
                                first_pass.get("explanation"),
                                first_pass.get("pythonCode"),
                            )
                        ),
                    ),
                    GenerationConfig.json(),
                    ModelTier.FAST,
                )
                verdict = parse_structured(checked.output.text)
                verified_by = checked.model_id
            except Exception as e:
                log.warning("Verification step skipped: %s", e, exc_info=True)
                self._telemetry.count("verification_skipped")

        payload, repaired = resolve_verification(first_pass, verdict)
        if repaired:
            self._telemetry.count("auto_repaired")
        return to_result(
            payload,
            model_used=solved.model_id,
            sources=sources,
            was_auto_repaired=repaired,
            verified_by=verified_by,
        )
