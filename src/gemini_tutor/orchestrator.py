"""TutorOrchestrator: the single entry point that wires adapters, tiers and agents.

Create one with ``create_orchestrator()``; configuration is resolved there
and nowhere else.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging

from gemini_tutor.adapters.base import GenerationAdapter
from gemini_tutor.adapters.mock import MockAdapter
from gemini_tutor.config import FrozenConfig, ResolvedConfig, resolve_config
from gemini_tutor.core.types import (
    ChatTurn,
    ExamConfig,
    ExamFinish,
    GradingAudit,
    HomeworkResponse,
    ImageInput,
    MathLabResult,
    PipelineRequest,
    VideoAnalysis,
    VisualAid,
)
from gemini_tutor.pipeline.chat import ChatPipeline
from gemini_tutor.pipeline.exam import ExamPipeline
from gemini_tutor.pipeline.homework import HomeworkPipeline, StatusCallback
from gemini_tutor.pipeline.math_lab import MathLabPipeline
from gemini_tutor.pipeline.tiered import TieredCaller
from gemini_tutor.pipeline.video import VideoPipeline
from gemini_tutor.pipeline.visual import VisualAidPipeline
from gemini_tutor.sessions import SessionRegistry, SessionSlot
from gemini_tutor.telemetry import TelemetryContext, TelemetryContextProtocol

log = logging.getLogger(__name__)


class TutorOrchestrator:
    """Facade over the tutoring agents sharing one adapter and session registry."""

    def __init__(
        self,
        config: FrozenConfig,
        adapter: GenerationAdapter,
        *,
        telemetry: TelemetryContextProtocol | None = None,
        sessions: SessionRegistry | None = None,
    ) -> None:
        self.config = config
        self._telemetry = telemetry or TelemetryContext()
        self.caller = TieredCaller(config, self._telemetry)
        self.sessions = sessions or SessionRegistry(adapter, self.caller, self._telemetry)

        self._homework = HomeworkPipeline(adapter, self.caller, self._telemetry)
        self._visual = VisualAidPipeline(adapter, self.caller, self._telemetry)
        self._math = MathLabPipeline(adapter, self.caller, self._telemetry)
        self._video = VideoPipeline(adapter, self.caller, self._telemetry)
        self._exam = ExamPipeline(adapter, self.caller, self.sessions, self._telemetry)
        self._chat = ChatPipeline(self.sessions)

    # --- Homework ---

    async def analyze_homework(
        self, request: PipelineRequest, on_status: StatusCallback | None = None
    ) -> HomeworkResponse:
        return await self._homework.analyze(request, on_status)

    async def generate_visual_aid(self, problem_statement: str, prompt: str) -> VisualAid:
        return await self._visual.generate(problem_statement, prompt)

    # --- Tutor chat ---

    async def start_chat(self, request: PipelineRequest) -> ChatTurn:
        return await self._chat.start(request)

    async def send_chat(self, message: str) -> ChatTurn:
        return await self._chat.send(message)

    # --- Math lab ---

    async def convert_text_to_math(self, text: str) -> str:
        return await self._math.convert_text_to_math(text)

    async def solve_math(
        self,
        problem: str,
        *,
        verified_latex: str | None = None,
        use_search: bool = False,
        history: Iterable[str] = (),
    ) -> MathLabResult:
        return await self._math.solve(
            problem, verified_latex=verified_latex, use_search=use_search, history=history
        )

    # --- Video ---

    async def analyze_video_frame(
        self, frame: ImageInput, question: str, timestamp: float, *, fact_check: bool = False
    ) -> VideoAnalysis:
        return await self._video.analyze_frame(
            frame, question, timestamp, fact_check=fact_check
        )

    async def analyze_youtube_segment(
        self,
        url: str,
        question: str,
        timestamp: float,
        *,
        fact_check: bool = False,
        full_video: bool = False,
    ) -> VideoAnalysis:
        return await self._video.analyze_youtube_segment(
            url, question, timestamp, fact_check=fact_check, full_video=full_video
        )

    # --- Exam prep ---

    async def start_exam(
        self, config: ExamConfig, reference: PipelineRequest | None = None
    ) -> ChatTurn:
        return await self._exam.start(config, reference)

    async def send_exam_message(self, message: str) -> ChatTurn:
        return await self._exam.send(message)

    async def finish_exam(self, *, audit: bool | None = None) -> ExamFinish:
        return await self._exam.finish(audit=audit)

    async def audit_exam(self) -> GradingAudit:
        """Audit the current exam transcript on demand."""
        return await self._exam.audit(self.sessions.transcript(SessionSlot.EXAM))


def _default_adapter(config: FrozenConfig) -> GenerationAdapter:
    if not config.use_real_api:
        log.info("use_real_api is false; using the echo adapter")
        return MockAdapter()
    from gemini_tutor.adapters.gemini import GoogleGenAIAdapter

    return GoogleGenAIAdapter(api_key=config.api_key)


def create_orchestrator(
    config: FrozenConfig | ResolvedConfig | None = None,
    *,
    adapter: GenerationAdapter | None = None,
    telemetry: TelemetryContextProtocol | None = None,
) -> TutorOrchestrator:
    """Create an orchestrator, resolving configuration when none is given."""
    if config is None:
        config = resolve_config()
    frozen = config.to_frozen() if isinstance(config, ResolvedConfig) else config
    return TutorOrchestrator(
        frozen, adapter or _default_adapter(frozen), telemetry=telemetry
    )
