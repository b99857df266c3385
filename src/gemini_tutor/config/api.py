"""Public entry points of the configuration system"""  # noqa: D415

from pathlib import Path
from typing import Any

from .resolver import ConfigResolver
from .scope import get_ambient_resolved_config
from .types import ResolvedConfig

_resolver = ConfigResolver()


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    profile: str | None = None,
    use_env_file: str | Path | None = None,
    project_root: Path | None = None,
) -> ResolvedConfig:
    """Resolve configuration, honoring any enclosing ``config_scope``.

    Inside a scope the ambient configuration is the base and only
    ``programmatic`` overrides are applied on top of it.

    Example:
        config = resolve_config({"fast_model": "gemini-2.5-flash-lite"})
        print(config.audit())
    """
    ambient = get_ambient_resolved_config()
    if ambient is not None:
        return ambient.with_overrides(**programmatic) if programmatic else ambient
    return _resolver.resolve(
        programmatic=programmatic,
        profile=profile,
        use_env_file=use_env_file,
        project_root=project_root,
    )


def list_available_profiles(project_root: Path | None = None) -> list[str]:
    return _resolver.list_available_profiles(project_root)


def check_environment() -> dict[str, str]:
    """Currently set ``GEMINI_*`` variables, with secrets redacted."""
    return _resolver.env_loader.get_env_summary()
