"""Configuration for the tutoring orchestrator.

Resolve once, freeze, then pass the ``FrozenConfig`` down:

- ``ResolvedConfig``: merged values plus the origin of each field
- ``FrozenConfig``: immutable values handed to pipelines
- ``config_scope`` / ``config_override``: ambient, context-local overrides
"""

from .api import check_environment, list_available_profiles, resolve_config
from .file_loader import ConfigFileError, FileConfigLoader
from .resolver import ConfigResolver, SourceTracker
from .schema import TutorSettings
from .scope import config_override, config_scope, get_ambient_resolved_config
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

__all__ = [
    "ConfigFileError",
    "ConfigOrigin",
    "ConfigResolver",
    "FileConfigLoader",
    "FrozenConfig",
    "ResolvedConfig",
    "SourceMap",
    "SourceTracker",
    "TutorSettings",
    "check_environment",
    "config_override",
    "config_scope",
    "get_ambient_resolved_config",
    "list_available_profiles",
    "resolve_config",
]
