"""Configuration data types.

Configuration is resolved once, frozen, then passed down to every pipeline.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, NamedTuple

from gemini_tutor.core.models import ModelTier

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]

_SENSITIVE_FIELDS = frozenset({"api_key"})


class ResolvedConfig(NamedTuple):
    """Configuration after merging all sources, before freezing.

    ``origin`` records where each field's value came from.
    """

    api_key: str | None
    smart_model: str
    fast_model: str
    image_smart_model: str
    image_fast_model: str
    use_real_api: bool

    origin: SourceMap

    def __str__(self) -> str:
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"ResolvedConfig(api_key={api_key_display!r}, "
            f"smart_model={self.smart_model!r}, fast_model={self.fast_model!r}, "
            f"image_smart_model={self.image_smart_model!r}, "
            f"image_fast_model={self.image_fast_model!r}, "
            f"use_real_api={self.use_real_api!r}, origin={dict(self.origin)!r})"
        )

    def __repr__(self) -> str:
        return self.__str__()

    def to_frozen(self) -> "FrozenConfig":
        """Drop the audit metadata and return the immutable pipeline config."""
        return FrozenConfig(
            api_key=self.api_key,
            smart_model=self.smart_model,
            fast_model=self.fast_model,
            image_smart_model=self.image_smart_model,
            image_fast_model=self.image_fast_model,
            use_real_api=self.use_real_api,
        )

    def with_overrides(self, **overrides: object) -> "ResolvedConfig":
        """Return a copy with overrides applied and marked programmatic.

        Unknown fields are ignored.
        """
        new_values = self._asdict()
        new_origin = dict(self.origin)
        for field, value in overrides.items():
            if field in self._fields and field != "origin":
                new_values[field] = value
                new_origin[field] = "programmatic"
        new_values["origin"] = new_origin
        return ResolvedConfig(**new_values)

    def audit(self) -> str:
        """Redacted report of each field's value and origin"""  # noqa: D415
        lines = []
        for field in self._fields:
            if field == "origin" or field not in self.origin:
                continue
            origin = self.origin[field]
            value = getattr(self, field)
            if field in _SENSITIVE_FIELDS:
                if value is None:
                    display = f"{origin}:None"
                elif origin == "env":
                    display = f"env:GEMINI_{field.upper()}=[REDACTED]"
                else:
                    display = f"{origin}:<redacted>"
            elif origin == "env":
                display = f"env:GEMINI_{field.upper()}={value}"
            else:
                display = f"{origin}:{value}"
            lines.append(f"{field}: {display}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration handed to pipelines and the tiered caller."""

    api_key: str | None
    smart_model: str
    fast_model: str
    image_smart_model: str
    image_fast_model: str
    use_real_api: bool

    def model_for(self, tier: ModelTier | str) -> str:
        """Concrete model identifier configured for ``tier``."""
        return getattr(self, ModelTier.parse(tier).settings_field)

    def __str__(self) -> str:
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"FrozenConfig(api_key={api_key_display!r}, "
            f"smart_model={self.smart_model!r}, fast_model={self.fast_model!r}, "
            f"image_smart_model={self.image_smart_model!r}, "
            f"image_fast_model={self.image_fast_model!r}, "
            f"use_real_api={self.use_real_api!r})"
        )

    def __repr__(self) -> str:
        return self.__str__()
