"""Configuration loading from ``[tool.gemini_tutor]`` in pyproject.toml."""

from pathlib import Path
import tomllib
from typing import Any

from gemini_tutor.exceptions import ConfigurationError

TOOL_SECTION = "gemini_tutor"


class ConfigFileError(ConfigurationError):
    """Raised when a configuration file exists but cannot be used."""

    def __init__(
        self, file_path: Path, message: str, cause: Exception | None = None
    ) -> None:
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(f"Config file error in {file_path}: {message}")


class FileConfigLoader:
    """Loads the tutor section of the nearest pyproject.toml, with profiles.

    Base values live in ``[tool.gemini_tutor]``; named profiles live in
    ``[tool.gemini_tutor.profiles.<name>]`` and are layered over the base.
    """

    def load_project_config(
        self, project_root: Path | None = None, profile: str | None = None
    ) -> dict[str, Any]:
        """Return configuration values from the project file.

        Empty when there is no pyproject.toml or no tutor section.

        Raises:
            ConfigFileError: The file cannot be parsed or the profile is missing.
        """
        pyproject_path = self.find_pyproject_toml(project_root)
        if not pyproject_path:
            return {}

        section = self._read_section(pyproject_path)
        if not section:
            if profile:
                raise ConfigFileError(
                    pyproject_path, f"Profile '{profile}' not found. Available profiles: []"
                )
            return {}

        profiles = section.pop("profiles", {})
        if profile:
            if profile not in profiles:
                raise ConfigFileError(
                    pyproject_path,
                    f"Profile '{profile}' not found. "
                    f"Available profiles: {sorted(profiles)}",
                )
            section.update(profiles[profile])
        return section

    def list_available_profiles(self, project_root: Path | None = None) -> list[str]:
        pyproject_path = self.find_pyproject_toml(project_root)
        if not pyproject_path:
            return []
        try:
            section = self._read_section(pyproject_path)
        except ConfigFileError:
            return []
        return sorted(section.get("profiles", {}))

    def find_pyproject_toml(self, start_dir: Path | None = None) -> Path | None:
        """Search ``start_dir`` (default: cwd) and its parents for pyproject.toml."""
        current = Path(start_dir if start_dir is not None else Path.cwd()).resolve()
        for directory in (current, *current.parents):
            candidate = directory / "pyproject.toml"
            if candidate.is_file():
                return candidate
        return None

    def _read_section(self, path: Path) -> dict[str, Any]:
        try:
            with path.open(mode="rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(path, f"Failed to parse TOML: {e}", cause=e) from e

        section = data.get("tool", {}).get(TOOL_SECTION, {})
        if not isinstance(section, dict):
            raise ConfigFileError(path, f"[tool.{TOOL_SECTION}] must be a table")
        return dict(section)
