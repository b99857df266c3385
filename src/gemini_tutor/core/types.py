"""Core data types that flow through the orchestration layer.

Every record here is an immutable value object. Pipelines create them from
sanitized model output and hand them to the caller; only sessions (see
``gemini_tutor.sessions``) outlive a single call.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
import math
import typing

from gemini_tutor.constants import (
    BOX_SCALE_MAX,
    DEFAULT_IMAGE_MIME_TYPE,
    DEFAULT_QUESTION_COUNT,
    SELF_CORRECTED_NOTE,
)
from gemini_tutor.exceptions import ValidationError

# --- Minimal guard helpers ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


def _is_tuple_of(value: object, typ: type | tuple[type, ...]) -> bool:
    return isinstance(value, tuple) and all(isinstance(v, typ) for v in value)


# --- Provider-neutral request parts ---


@dataclasses.dataclass(frozen=True, slots=True)
class TextPart:
    """A plain text segment of a request."""

    text: str

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.text, str),
            message="must be str",
            field_name="text",
            exc=TypeError,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class InlineDataPart:
    """Raw bytes sent inline (images, video frames)."""

    data: bytes
    mime_type: str

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.data, bytes | bytearray),
            message="must be bytes",
            field_name="data",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.mime_type, str) and "/" in self.mime_type,
            message=f"must look like 'type/subtype', got {self.mime_type!r}",
            field_name="mime_type",
        )


APIPart = TextPart | InlineDataPart


class Tool(str, Enum):
    """Provider tools a call may be granted."""

    GOOGLE_SEARCH = "google_search"


@dataclasses.dataclass(frozen=True, slots=True)
class GenerationConfig:
    """Per-call generation settings, translated by the adapter.

    Schema enforcement is advisory: providers may still return text that
    violates ``response_schema``.
    """

    response_schema: typing.Mapping[str, typing.Any] | None = None
    response_mime_type: str | None = None
    temperature: float | None = None
    tools: tuple[Tool, ...] = ()
    system_instruction: str | None = None
    image_aspect_ratio: str | None = None
    image_size: str | None = None

    @classmethod
    def json(
        cls,
        schema: typing.Mapping[str, typing.Any] | None = None,
        **kwargs: typing.Any,
    ) -> GenerationConfig:
        """Config asking for JSON output, optionally schema-constrained."""
        return cls(
            response_schema=schema, response_mime_type="application/json", **kwargs
        )


@dataclasses.dataclass(frozen=True, slots=True)
class WebSource:
    """A grounding citation."""

    uri: str
    title: str = ""


@dataclasses.dataclass(frozen=True, slots=True)
class ProviderResponse:
    """What an adapter returns for a single generation or session turn."""

    text: str | None
    sources: tuple[WebSource, ...] = ()
    images: tuple[InlineDataPart, ...] = ()
    model_name: str | None = None


_T = typing.TypeVar("_T")


@dataclasses.dataclass(frozen=True, slots=True)
class TieredResult(typing.Generic[_T]):
    """A stage payload tagged with the model that actually produced it."""

    output: _T
    model_id: str


# --- Pipeline input ---


@dataclasses.dataclass(frozen=True, slots=True)
class ImageInput:
    """An uploaded image (photo of homework, a rendered PDF page)."""

    data: bytes
    mime_type: str = DEFAULT_IMAGE_MIME_TYPE
    auxiliary_text: str | None = None

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.data, bytes | bytearray) and len(self.data) > 0,
            message="must be non-empty bytes",
            field_name="data",
            exc=ValidationError,
        )
        _require(
            condition=isinstance(self.mime_type, str) and "/" in self.mime_type,
            message=f"must look like 'type/subtype', got {self.mime_type!r}",
            field_name="mime_type",
            exc=ValidationError,
        )

    def primary_part(self) -> APIPart:
        return InlineDataPart(data=bytes(self.data), mime_type=self.mime_type)


@dataclasses.dataclass(frozen=True, slots=True)
class TextInput:
    """Typed or extracted text."""

    content: str
    auxiliary_text: str | None = None

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.content, str) and self.content.strip() != "",
            message="must be a non-empty str",
            field_name="content",
            exc=ValidationError,
        )

    def primary_part(self) -> APIPart:
        return TextPart(self.content)


PipelineRequest = ImageInput | TextInput


# --- Homework records ---


@dataclasses.dataclass(frozen=True, slots=True)
class BoundingBox:
    """Error location on a 0-1000 normalized grid, origin top-left."""

    ymin: int
    xmin: int
    ymax: int
    xmax: int

    def __post_init__(self) -> None:
        for name in ("ymin", "xmin", "ymax", "xmax"):
            value = getattr(self, name)
            _require(
                condition=isinstance(value, int) and not isinstance(value, bool),
                message="must be int",
                field_name=name,
                exc=TypeError,
            )
            _require(
                condition=0 <= value <= BOX_SCALE_MAX,
                message=f"must be within 0..{BOX_SCALE_MAX}, got {value}",
                field_name=name,
            )
        _require(
            condition=self.ymin <= self.ymax and self.xmin <= self.xmax,
            message="min coordinates must not exceed max coordinates",
            field_name="bounding_box",
        )

    @classmethod
    def from_raw(cls, raw: typing.Any) -> BoundingBox | None:
        """Build from a model mapping; ``None`` when no box was given.

        Raises ValueError or TypeError for partial or out-of-range boxes.
        Values are never rescaled from another grid.
        """
        if raw is None:
            return None
        _require(
            condition=isinstance(raw, typing.Mapping),
            message="must be an object",
            field_name="bounding_box",
            exc=TypeError,
        )
        keys = ("ymin", "xmin", "ymax", "xmax")
        present = [k for k in keys if raw.get(k) is not None]
        if not present:
            return None
        _require(
            condition=len(present) == len(keys),
            message=f"all four coordinates are required, got {present}",
            field_name="bounding_box",
        )
        coords: dict[str, int] = {}
        for key in keys:
            value = raw[key]
            _require(
                condition=isinstance(value, int | float) and not isinstance(value, bool),
                message="must be a number",
                field_name=key,
                exc=TypeError,
            )
            _require(
                condition=math.isfinite(value),
                message=f"must be finite, got {value!r}",
                field_name=key,
            )
            coords[key] = round(value)
        return cls(**coords)

    def to_dict(self) -> dict[str, int]:
        return dataclasses.asdict(self)


ValidationStatus = typing.Literal["verified", "warning"]


@dataclasses.dataclass(frozen=True, slots=True)
class ValidationCheck:
    """The model's own quality assessment of one record."""

    status: ValidationStatus
    confidence_score: int
    rendering_note: str | None = None

    def __post_init__(self) -> None:
        _require(
            condition=self.status in ("verified", "warning"),
            message=f"must be 'verified' or 'warning', got {self.status!r}",
            field_name="status",
        )
        _require(
            condition=isinstance(self.confidence_score, int)
            and not isinstance(self.confidence_score, bool)
            and 0 <= self.confidence_score <= 100,
            message=f"must be an int within 0..100, got {self.confidence_score!r}",
            field_name="confidence_score",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ProblemRecord:
    """One graded or taught item."""

    id: int
    explanation: str
    steps: tuple[str, ...] = ()
    key_concepts: tuple[str, ...] = ()
    subject: str | None = None
    topic: str | None = None
    is_correct: bool | None = None
    bounding_box: BoundingBox | None = None
    student_answer: str | None = None
    problem_statement: str | None = None
    visual_aid_prompt: str | None = None
    validation: ValidationCheck | None = None

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.id, int) and self.id >= 1,
            message="must be a positive int",
            field_name="id",
        )
        _require(
            condition=_is_tuple_of(self.steps, str),
            message="must be a tuple[str, ...]",
            field_name="steps",
            exc=TypeError,
        )
        _require(
            condition=_is_tuple_of(self.key_concepts, str),
            message="must be a tuple[str, ...]",
            field_name="key_concepts",
            exc=TypeError,
        )
        _require(
            condition=len(set(self.key_concepts)) == len(self.key_concepts),
            message="must not contain duplicates",
            field_name="key_concepts",
        )

    @property
    def was_self_corrected(self) -> bool:
        return (
            self.validation is not None
            and self.validation.rendering_note == SELF_CORRECTED_NOTE
        )


@dataclasses.dataclass(frozen=True, slots=True)
class HomeworkResponse:
    """Result of a homework analysis run."""

    problems: tuple[ProblemRecord, ...]
    model_used: str
    has_student_solution: bool = False
    subject: str | None = None
    topic: str | None = None
    grading_rules: tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True, slots=True)
class VisualValidation:
    is_accurate: bool
    model_used: str
    critique: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class VisualAid:
    """A generated diagram as a data URL plus its independent check."""

    content: str
    mime_type: str
    validation: VisualValidation


# --- Sessions and chat ---

ChatRole = typing.Literal["user", "model"]


@dataclasses.dataclass(frozen=True, slots=True)
class ChatTurn:
    """One message of a session transcript."""

    role: ChatRole
    text: str
    model_used: str | None = None
    sources: tuple[WebSource, ...] = ()

    def __post_init__(self) -> None:
        _require(
            condition=self.role in ("user", "model"),
            message=f"must be 'user' or 'model', got {self.role!r}",
            field_name="role",
        )


# --- Math lab ---


@dataclasses.dataclass(frozen=True, slots=True)
class MathLabResult:
    """Outcome of the solve/verify pipeline.

    ``was_auto_repaired`` is True iff the verification stage replaced the
    first-pass answer.
    """

    latex: str
    explanation: str
    python_code: str
    result: str
    model_used: str
    plot_svg: str | None = None
    was_auto_repaired: bool = False
    sources: tuple[WebSource, ...] = ()
    verified_by: str | None = None


# --- Video ---

FactVerdict = typing.Literal["verified", "disputed", "outdated"]


@dataclasses.dataclass(frozen=True, slots=True)
class FactCheck:
    claim: str
    verdict: FactVerdict
    correction: str | None = None
    source: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class VideoAnalysis:
    text: str
    model_used: str
    sources: tuple[WebSource, ...] = ()
    ocr_text: str | None = None
    fact_checks: tuple[FactCheck, ...] = ()


# --- Exam prep ---


@dataclasses.dataclass(frozen=True, slots=True)
class ExamConfig:
    """Settings for one exam or study session."""

    subject: str
    grade_level: str
    question_formats: tuple[str, ...] = ()
    number_of_questions: int = DEFAULT_QUESTION_COUNT
    total_marks: str | None = None
    institution_guidelines: str | None = None
    real_world_mode: bool = False
    strict_mode: bool = False
    duration_minutes: int | None = None

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.subject, str) and self.subject.strip() != "",
            message="must be a non-empty str",
            field_name="subject",
            exc=ValidationError,
        )
        _require(
            condition=_is_tuple_of(self.question_formats, str),
            message="must be a tuple[str, ...]",
            field_name="question_formats",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.number_of_questions, int)
            and self.number_of_questions >= 1,
            message="must be an int >= 1",
            field_name="number_of_questions",
            exc=ValidationError,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class GradingAudit:
    """Independent second marking of an exam transcript."""

    audited_score: str
    fairness_score: int
    discrepancies: tuple[str, ...]
    feedback: str
    model_used: str

    def __post_init__(self) -> None:
        _require(
            condition=0 <= self.fairness_score <= 100,
            message=f"must be within 0..100, got {self.fairness_score}",
            field_name="fairness_score",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ExamFinish:
    """The invigilator's own report plus the optional independent audit."""

    report: ChatTurn
    audit: GradingAudit | None = None
