"""Video tutoring: questions about a paused frame or a YouTube segment."""

from __future__ import annotations

import logging
from typing import Any

from gemini_tutor.constants import DEFAULT_VIDEO_ANALYSIS_TEXT
from gemini_tutor.core.models import ModelTier
from gemini_tutor.core.types import (
    FactCheck,
    GenerationConfig,
    ImageInput,
    ProviderResponse,
    TextPart,
    TieredResult,
    Tool,
    VideoAnalysis,
)

from . import prompts
from .base import ModelStage
from .sanitizer import as_mapping, parse_structured
from .schemas import VIDEO_ANALYSIS_SCHEMA

log = logging.getLogger(__name__)

_VERDICTS = ("verified", "disputed", "outdated")


def _fact_checks(raw: Any) -> tuple[FactCheck, ...]:
    if not isinstance(raw, list):
        return ()
    checks = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        claim, verdict = item.get("claim"), item.get("verdict")
        if not isinstance(claim, str) or verdict not in _VERDICTS:
            log.debug("Skipping malformed fact check: %.120r", item)
            continue
        correction, source = item.get("correction"), item.get("source")
        checks.append(
            FactCheck(
                claim=claim,
                verdict=verdict,
                correction=correction if isinstance(correction, str) else None,
                source=source if isinstance(source, str) else None,
            )
        )
    return tuple(checks)


def to_video_analysis(result: TieredResult[ProviderResponse]) -> VideoAnalysis:
    output = as_mapping(parse_structured(result.output.text))
    analysis = output.get("analysis")
    ocr_text = output.get("transcribed_text")
    return VideoAnalysis(
        text=analysis if isinstance(analysis, str) and analysis else DEFAULT_VIDEO_ANALYSIS_TEXT,
        model_used=result.model_id,
        sources=result.output.sources,
        ocr_text=ocr_text if isinstance(ocr_text, str) and ocr_text else None,
        fact_checks=_fact_checks(output.get("fact_checks")),
    )


class VideoPipeline(ModelStage):
    async def analyze_frame(
        self,
        frame: ImageInput,
        question: str,
        timestamp: float,
        *,
        fact_check: bool = False,
    ) -> VideoAnalysis:
        """Answer ``question`` about a captured frame, optionally fact-checking it."""
        tools = (Tool.GOOGLE_SEARCH,) if fact_check else ()
        result = await self._generate(
            "Video Frame",
            (
                frame.primary_part(),
                TextPart(
                    prompts.video_frame_prompt(question, timestamp, fact_check=fact_check)
                ),
            ),
            GenerationConfig.json(VIDEO_ANALYSIS_SCHEMA, tools=tools),
            ModelTier.SMART,
            ModelTier.FAST,
        )
        return to_video_analysis(result)

    async def analyze_youtube_segment(
        self,
        url: str,
        question: str,
        timestamp: float,
        *,
        fact_check: bool = False,
        full_video: bool = False,
    ) -> VideoAnalysis:
        """Answer from search results about a YouTube video (visuals are not seen)."""
        result = await self._generate(
            "YouTube Analysis",
            (
                TextPart(
                    prompts.youtube_segment_prompt(
                        url,
                        question,
                        timestamp,
                        fact_check=fact_check,
                        full_video=full_video,
                    )
                ),
            ),
            GenerationConfig.json(VIDEO_ANALYSIS_SCHEMA, tools=(Tool.GOOGLE_SEARCH,)),
            ModelTier.SMART,
            ModelTier.FAST,
        )
        return to_video_analysis(result)
