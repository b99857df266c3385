"""Diagram generation for a problem's visual aid prompt, with an independent check."""

from __future__ import annotations

import base64
import logging

from gemini_tutor.constants import VISUAL_AID_ASPECT_RATIO, VISUAL_AID_IMAGE_SIZE
from gemini_tutor.core.models import ModelTier
from gemini_tutor.core.types import (
    GenerationConfig,
    TextPart,
    VisualAid,
    VisualValidation,
)
from gemini_tutor.exceptions import EmptyResponseError

from . import prompts
from .base import ModelStage
from .sanitizer import as_mapping, parse_structured
from .schemas import VISUAL_VALIDATION_SCHEMA

log = logging.getLogger(__name__)


class VisualAidPipeline(ModelStage):
    async def generate(self, problem_statement: str, prompt: str) -> VisualAid:
        """Render ``prompt`` as a diagram and check it against the problem.

        Raises:
            EmptyResponseError: The image model answered without an image.
        """
        with self._telemetry("visual_aid"):
            generated = await self._generate(
                "Image Gen",
                (TextPart(prompts.visual_aid_prompt(prompt)),),
                GenerationConfig(
                    image_aspect_ratio=VISUAL_AID_ASPECT_RATIO,
                    image_size=VISUAL_AID_IMAGE_SIZE,
                ),
                ModelTier.IMAGE_SMART,
                ModelTier.IMAGE_FAST,
            )
            if not generated.output.images:
                raise EmptyResponseError("No image generated.")
            image = generated.output.images[0]
            log.debug(
                "Generated %s diagram (%d bytes) with %s",
                image.mime_type,
                len(image.data),
                generated.model_id,
            )

            checked = await self._generate(
                "Vis Val",
                (TextPart(prompts.visual_validation_prompt(problem_statement)), image),
                GenerationConfig.json(VISUAL_VALIDATION_SCHEMA),
                ModelTier.FAST,
            )

        verdict = as_mapping(parse_structured(checked.output.text))
        critique = verdict.get("critique")
        encoded = base64.b64encode(image.data).decode("ascii")
        return VisualAid(
            content=f"data:{image.mime_type};base64,{encoded}",
            mime_type=image.mime_type,
            validation=VisualValidation(
                is_accurate=verdict.get("isAccurate") is True,
                critique=critique if isinstance(critique, str) else None,
                model_used=generated.model_id,
            ),
        )
