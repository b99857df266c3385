"""Core types shared by adapters, pipelines and sessions."""

from .models import DEFAULT_TIER_MODELS, ModelTier
from .types import (
    APIPart,
    BoundingBox,
    ChatTurn,
    ExamConfig,
    ExamFinish,
    FactCheck,
    GenerationConfig,
    GradingAudit,
    HomeworkResponse,
    ImageInput,
    InlineDataPart,
    MathLabResult,
    PipelineRequest,
    ProblemRecord,
    ProviderResponse,
    TextInput,
    TextPart,
    TieredResult,
    Tool,
    ValidationCheck,
    VideoAnalysis,
    VisualAid,
    VisualValidation,
    WebSource,
)

__all__ = [
    "DEFAULT_TIER_MODELS",
    "APIPart",
    "BoundingBox",
    "ChatTurn",
    "ExamConfig",
    "ExamFinish",
    "FactCheck",
    "GenerationConfig",
    "GradingAudit",
    "HomeworkResponse",
    "ImageInput",
    "InlineDataPart",
    "MathLabResult",
    "ModelTier",
    "PipelineRequest",
    "ProblemRecord",
    "ProviderResponse",
    "TextInput",
    "TextPart",
    "TieredResult",
    "Tool",
    "ValidationCheck",
    "VideoAnalysis",
    "VisualAid",
    "VisualValidation",
    "WebSource",
]
