"""Ambient configuration scopes for entry-time overrides.

A scope only affects ``resolve_config()`` calls made inside it. Pipelines
that already hold a ``FrozenConfig`` never see ambient changes.
"""

from collections.abc import Generator
from contextlib import contextmanager
import contextvars
from typing import Any

from .types import ResolvedConfig

_ambient_resolved_config: contextvars.ContextVar[ResolvedConfig] = (
    contextvars.ContextVar("gemini_tutor_resolved_config")
)


def get_ambient_resolved_config() -> ResolvedConfig | None:
    """The configuration set by the innermost ``config_scope``, if any."""
    return _ambient_resolved_config.get(None)


@contextmanager
def config_scope(config: ResolvedConfig) -> Generator[None]:
    """Use ``config`` for every resolution inside the block.

    Example:
        base = resolve_config()
        with config_scope(base.with_overrides(use_real_api=False)):
            tutor = create_orchestrator()
    """
    token = _ambient_resolved_config.set(config)
    try:
        yield
    finally:
        _ambient_resolved_config.reset(token)


@contextmanager
def config_override(**overrides: Any) -> Generator[None]:
    """Scope with selected fields overridden on top of the current config."""
    base_config = get_ambient_resolved_config()
    if base_config is None:
        from .api import resolve_config

        base_config = resolve_config()
    with config_scope(base_config.with_overrides(**overrides)):
        yield
