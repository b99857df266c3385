"""
Project-wide constants for the Gemini tutoring orchestrator
"""  # noqa: D200, D212, D415

# ==============================================================================
# Model Tiers
# ==============================================================================

# Reasoning, math and vision. Low request budget.
DEFAULT_SMART_MODEL = "gemini-3-pro-preview"
# Chat, tuning and verification. High request budget.
DEFAULT_FAST_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_SMART_MODEL = "gemini-3-pro-image-preview"
DEFAULT_IMAGE_FAST_MODEL = "gemini-2.5-flash-image"

# Substrings that mark a raw provider error as quota exhaustion (case-sensitive)
QUOTA_ERROR_MARKERS = ("429", "quota")
QUOTA_STATUS_CODE = 429

# ==============================================================================
# Homework Analysis
# ==============================================================================

# Records below this confidence are sent back for refinement. Not configurable.
REFINEMENT_CONFIDENCE_THRESHOLD = 80
SELF_CORRECTED_CONFIDENCE = 99
SELF_CORRECTED_NOTE = "self-corrected"

DEEP_ANALYSIS_TEMPERATURE = 0.1

# Bounding boxes use a normalized 0-1000 grid, origin top-left
BOX_SCALE_MAX = 1000

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"

# ==============================================================================
# Visual Aids
# ==============================================================================

VISUAL_AID_ASPECT_RATIO = "4:3"
VISUAL_AID_IMAGE_SIZE = "1K"

# ==============================================================================
# Sessions
# ==============================================================================

CHAT_SYSTEM_INSTRUCTION = "Helpful AI Tutor. Use Google Search for facts."
FINISH_EXAM_COMMAND = "FINISH_EXAM"
DEFAULT_QUESTION_COUNT = 5
EMPTY_CONTEXT_MARKER = "Context."

# ==============================================================================
# Fallback Texts
# ==============================================================================

DEFAULT_VIDEO_ANALYSIS_TEXT = "Analysis complete."
DEFAULT_EXAM_START_TEXT = "Ready."
