"""Settings schema for the tutoring orchestrator.

Validates and coerces values gathered from files, environment and
programmatic overrides. Environment variables use the ``GEMINI_`` prefix.
"""

from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gemini_tutor.core.models import DEFAULT_TIER_MODELS, ModelTier

SETTINGS_FIELDS = (
    "api_key",
    "smart_model",
    "fast_model",
    "image_smart_model",
    "image_fast_model",
    "use_real_api",
)


class TutorSettings(BaseSettings):
    """Pydantic settings schema for the tutor configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str | None = Field(default=None, description="Google Gemini API key")

    smart_model: str = Field(
        default=DEFAULT_TIER_MODELS[ModelTier.SMART],
        description="Reasoning model (homework deep analysis, math solving)",
        min_length=1,
    )
    fast_model: str = Field(
        default=DEFAULT_TIER_MODELS[ModelTier.FAST],
        description="High-budget model (tuning, chat, verification)",
        min_length=1,
    )
    image_smart_model: str = Field(
        default=DEFAULT_TIER_MODELS[ModelTier.IMAGE_SMART],
        description="Primary image generation model",
        min_length=1,
    )
    image_fast_model: str = Field(
        default=DEFAULT_TIER_MODELS[ModelTier.IMAGE_FAST],
        description="Fallback image generation model",
        min_length=1,
    )

    use_real_api: bool = Field(
        default=False,
        description="Call the Gemini API instead of the echo adapter",
    )

    @model_validator(mode="after")
    def validate_api_key_requirement(self) -> "TutorSettings":
        """Ensure api_key is provided when use_real_api is True."""
        if self.use_real_api and not self.api_key:
            raise ValueError(
                "api_key is required when use_real_api=True. "
                "Set GEMINI_API_KEY, add it to [tool.gemini_tutor], "
                "or pass it programmatically."
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in SETTINGS_FIELDS}
