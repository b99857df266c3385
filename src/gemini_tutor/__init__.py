"""Gemini tutoring orchestrator: tiered model calls, sanitized output, tutoring agents."""

import importlib.metadata
import logging

from gemini_tutor.config import FrozenConfig, ResolvedConfig, config_scope, resolve_config
from gemini_tutor.core.models import ModelTier
from gemini_tutor.core.types import (
    BoundingBox,
    ChatTurn,
    ExamConfig,
    ExamFinish,
    FactCheck,
    GradingAudit,
    HomeworkResponse,
    ImageInput,
    MathLabResult,
    ProblemRecord,
    TextInput,
    TieredResult,
    ValidationCheck,
    VideoAnalysis,
    VisualAid,
    VisualValidation,
    WebSource,
)
from gemini_tutor.exceptions import (
    ConfigurationError,
    EmptyResponseError,
    ErrorKind,
    GeminiTutorError,
    ProviderError,
    QuotaExceededError,
    SessionNotInitializedError,
    ValidationError,
)
from gemini_tutor.orchestrator import TutorOrchestrator, create_orchestrator
from gemini_tutor.sessions import SessionRegistry, SessionSlot
from gemini_tutor.telemetry import SimpleReporter, TelemetryContext, TelemetryReporter

try:
    __version__ = importlib.metadata.version("gemini-tutor")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library logging stays silent unless the application configures handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Entry points
    "TutorOrchestrator",
    "create_orchestrator",
    # Configuration
    "FrozenConfig",
    "ResolvedConfig",
    "config_scope",
    "resolve_config",
    "ModelTier",
    # Inputs and results
    "BoundingBox",
    "ChatTurn",
    "ExamConfig",
    "ExamFinish",
    "FactCheck",
    "GradingAudit",
    "HomeworkResponse",
    "ImageInput",
    "MathLabResult",
    "ProblemRecord",
    "TextInput",
    "TieredResult",
    "ValidationCheck",
    "VideoAnalysis",
    "VisualAid",
    "VisualValidation",
    "WebSource",
    # Sessions
    "SessionRegistry",
    "SessionSlot",
    # Telemetry
    "SimpleReporter",
    "TelemetryContext",
    "TelemetryReporter",
    # Exceptions
    "ConfigurationError",
    "EmptyResponseError",
    "ErrorKind",
    "GeminiTutorError",
    "ProviderError",
    "QuotaExceededError",
    "SessionNotInitializedError",
    "ValidationError",
]
