"""Configuration loading from ``GEMINI_*`` environment variables.

An optional ``.env`` file is read with python-dotenv. Real environment
variables always win over values from the file, and the file never
modifies ``os.environ``.
"""

import os
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .schema import SETTINGS_FIELDS, TutorSettings

ENV_PREFIX = "GEMINI_"


def env_var_for(field: str) -> str:
    return f"{ENV_PREFIX}{field.upper()}"


class EnvironmentConfigLoader:
    """Reads the subset of settings that the environment actually sets."""

    def load_env_config(self, env_file: str | Path | None = None) -> dict[str, Any]:
        """Return coerced values for every ``GEMINI_*`` variable that is set.

        Raises:
            FileNotFoundError: ``env_file`` was given but does not exist.
            ValueError: A variable holds a value of the wrong type.
        """
        environ: dict[str, str | None] = {}
        if env_file:
            env_path = Path(env_file)
            if not env_path.is_file():
                raise FileNotFoundError(f"Environment file not found: {env_path}")
            environ.update(dotenv_values(env_path))
        environ.update(os.environ)

        values: dict[str, Any] = {}
        for field in SETTINGS_FIELDS:
            raw = environ.get(env_var_for(field))
            if raw is None:
                continue
            annotation = TutorSettings.model_fields[field].annotation
            try:
                values[field] = TypeAdapter(annotation).validate_python(raw)
            except PydanticValidationError as e:
                raise ValueError(
                    f"Invalid value for {env_var_for(field)}={raw!r}: {e}"
                ) from e
        return values

    def get_env_summary(self) -> dict[str, str]:
        """Currently set ``GEMINI_*`` variables, with secrets redacted."""
        summary = {}
        for field in SETTINGS_FIELDS:
            name = env_var_for(field)
            if name in os.environ:
                summary[name] = "<redacted>" if field == "api_key" else os.environ[name]
        return summary
