"""Inspect the effective configuration from the command line.

Usage:
    python -m gemini_tutor.config
    python -m gemini_tutor.config --json
    python -m gemini_tutor.config --check --profile ci
"""

import argparse
import json
import sys
from typing import Any

from gemini_tutor.exceptions import ConfigurationError

from .api import resolve_config
from .types import ResolvedConfig

# ruff: noqa: T201


def get_config_warnings(resolved: ResolvedConfig) -> list[str]:
    """Non-fatal issues worth surfacing to the user"""  # noqa: D415
    warnings = []
    if not resolved.use_real_api:
        warnings.append("use_real_api is false - responses come from the echo adapter")
    if resolved.smart_model == resolved.fast_model:
        warnings.append(
            "smart_model and fast_model are identical - quota fallback cannot help"
        )
    if resolved.image_smart_model == resolved.image_fast_model:
        warnings.append(
            "image_smart_model and image_fast_model are identical - "
            "quota fallback cannot help"
        )
    return warnings


def get_config_info(profile: str | None = None) -> dict[str, Any]:
    """Structured, redacted configuration info"""  # noqa: D415
    try:
        resolved = resolve_config(profile=profile)
    except ConfigurationError as e:
        return {"status": "invalid", "error": str(e), "config": None, "sources": {}}

    frozen = resolved.to_frozen()
    return {
        "status": "valid",
        "config": {
            "smart_model": frozen.smart_model,
            "fast_model": frozen.fast_model,
            "image_smart_model": frozen.image_smart_model,
            "image_fast_model": frozen.image_fast_model,
            "use_real_api": frozen.use_real_api,
            "has_api_key": frozen.api_key is not None,
        },
        "sources": dict(resolved.origin),
        "warnings": get_config_warnings(resolved),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Inspect gemini-tutor configuration",
        prog="python -m gemini_tutor.config",
    )
    parser.add_argument("--profile", help="Configuration profile to use")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only validate (exit code 0=valid, 1=invalid)",
    )
    args = parser.parse_args(argv)

    info = get_config_info(profile=args.profile)
    if args.check:
        return 0 if info["status"] == "valid" else 1
    if args.json:
        print(json.dumps(info, indent=2))
        return 0 if info["status"] == "valid" else 1
    if info["status"] != "valid":
        print(f"Configuration error: {info['error']}", file=sys.stderr)
        return 1

    print("=== Effective Configuration ===")
    print(resolve_config(profile=args.profile).audit())
    for warning in info["warnings"]:
        print(f"warning: {warning}")
    return 0
