"""Model pipelines: tiered calls, output sanitizing and the tutoring agents."""

from .chat import ChatPipeline
from .exam import ExamPipeline
from .homework import HomeworkPipeline, merge_refined, select_for_refinement
from .math_lab import MathLabPipeline, resolve_verification
from .sanitizer import as_mapping, clean_latex, clean_svg, parse_structured
from .tiered import TieredCaller
from .video import VideoPipeline
from .visual import VisualAidPipeline

__all__ = [
    "ChatPipeline",
    "ExamPipeline",
    "HomeworkPipeline",
    "MathLabPipeline",
    "TieredCaller",
    "VideoPipeline",
    "VisualAidPipeline",
    "as_mapping",
    "clean_latex",
    "clean_svg",
    "merge_refined",
    "parse_structured",
    "resolve_verification",
    "select_for_refinement",
]
