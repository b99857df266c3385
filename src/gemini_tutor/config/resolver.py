"""Configuration resolution with precedence handling.

Precedence, highest first: programmatic > environment > project file > defaults.
"""

import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from gemini_tutor.exceptions import ConfigurationError

from .env_loader import EnvironmentConfigLoader
from .file_loader import FileConfigLoader
from .schema import SETTINGS_FIELDS, TutorSettings
from .types import ConfigOrigin, ResolvedConfig, SourceMap

log = logging.getLogger(__name__)


class SourceTracker:
    """Records which source supplied each configuration field."""

    def __init__(self) -> None:
        self._origins: dict[str, ConfigOrigin] = {}

    def set_multiple(self, fields: dict[str, Any], origin: ConfigOrigin) -> None:
        for field in fields:
            self._origins[field] = origin

    def get_source_map(self) -> SourceMap:
        return dict(self._origins)


class ConfigResolver:
    """Merges configuration sources and validates the result."""

    def __init__(self) -> None:
        self.file_loader = FileConfigLoader()
        self.env_loader = EnvironmentConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        profile: str | None = None,
        use_env_file: str | Path | None = None,
        project_root: Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources.

        Args:
            programmatic: Overrides with the highest precedence. Unknown keys
                are ignored.
            profile: Profile in ``[tool.gemini_tutor.profiles]``; defaults to
                ``GEMINI_PROFILE``.
            use_env_file: Optional ``.env`` file read below the real environment.
            project_root: Where to start looking for pyproject.toml.

        Raises:
            ConfigFileError: The project file is malformed or lacks the profile.
            ConfigurationError: The merged values do not validate.
        """
        tracker = SourceTracker()
        if profile is None:
            profile = os.getenv("GEMINI_PROFILE")

        merged: dict[str, Any] = {
            name: TutorSettings.model_fields[name].default for name in SETTINGS_FIELDS
        }
        tracker.set_multiple(merged, "default")

        layers: list[tuple[ConfigOrigin, dict[str, Any]]] = [
            (
                "file",
                self.file_loader.load_project_config(
                    project_root=project_root, profile=profile
                ),
            ),
        ]
        try:
            layers.append(("env", self.env_loader.load_env_config(use_env_file)))
        except (ValueError, FileNotFoundError) as e:
            raise ConfigurationError(f"Environment configuration error: {e}") from e
        layers.append(("programmatic", dict(programmatic or {})))

        for origin, values in layers:
            known = {k: v for k, v in values.items() if k in merged}
            unknown = sorted(set(values) - set(known))
            if unknown:
                log.debug("Ignoring unknown %s config keys: %s", origin, unknown)
            merged.update(known)
            tracker.set_multiple(known, origin)

        try:
            settings = TutorSettings(**merged)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        return ResolvedConfig(**settings.to_dict(), origin=tracker.get_source_map())

    def list_available_profiles(self, project_root: Path | None = None) -> list[str]:
        return self.file_loader.list_available_profiles(project_root)
