"""Model tiers and their default identifiers."""

from __future__ import annotations

from enum import Enum

from gemini_tutor.constants import (
    DEFAULT_FAST_MODEL,
    DEFAULT_IMAGE_FAST_MODEL,
    DEFAULT_IMAGE_SMART_MODEL,
    DEFAULT_SMART_MODEL,
)


class ModelTier(str, Enum):
    """Named model configurations, chosen for cost/latency/capability."""

    SMART = "smart"
    FAST = "fast"
    IMAGE_SMART = "image_smart"
    IMAGE_FAST = "image_fast"

    @property
    def settings_field(self) -> str:
        """Name of the configuration field holding this tier's model id."""
        return f"{self.value}_model"

    @classmethod
    def parse(cls, value: str | ModelTier) -> ModelTier:
        """Accept enum members, values ("smart") or names ("SMART")."""
        if isinstance(value, ModelTier):
            return value
        normalized = str(value).strip().lower()
        for tier in cls:
            if normalized in (tier.value, tier.name.lower()):
                return tier
        valid = ", ".join(t.value for t in cls)
        raise ValueError(f"Invalid model tier: {value!r}. Must be one of: {valid}")


DEFAULT_TIER_MODELS: dict[ModelTier, str] = {
    ModelTier.SMART: DEFAULT_SMART_MODEL,
    ModelTier.FAST: DEFAULT_FAST_MODEL,
    ModelTier.IMAGE_SMART: DEFAULT_IMAGE_SMART_MODEL,
    ModelTier.IMAGE_FAST: DEFAULT_IMAGE_FAST_MODEL,
}
