"""Extract structured data from free-form model output.

Schema-constrained responses still arrive as text that may be wrapped in
markdown fences, preceded by chatter, or truncated. These helpers never
raise on malformed output; callers receive an empty mapping instead.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any
import xml.etree.ElementTree as ET

log = logging.getLogger(__name__)

_OPEN_FENCE = re.compile(r"^```(?:json)?\n?")
_CLOSE_FENCE = re.compile(r"\n?```$")
_LATEX_FENCE = re.compile(r"```(?:latex)?", re.IGNORECASE)
_SVG_NAMESPACE = "http://www.w3.org/2000/svg"


def _try_brace_slice(text: str) -> tuple[bool, Any]:
    first_open = text.find("{")
    last_close = text.rfind("}")
    if first_open == -1 or last_close == -1 or last_close < first_open:
        return False, None
    try:
        return True, json.loads(text[first_open : last_close + 1])
    except (json.JSONDecodeError, RecursionError):
        return False, None


def _try_fence_strip(text: str) -> tuple[bool, Any]:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _OPEN_FENCE.sub("", cleaned, count=1)
        cleaned = _CLOSE_FENCE.sub("", cleaned, count=1)
    try:
        return True, json.loads(cleaned)
    except (json.JSONDecodeError, RecursionError):
        return False, None


def parse_structured(raw_text: str | None) -> Any:
    """Parse JSON out of a model response.

    Strategies, in order:
    1. Slice from the first ``{`` to the last ``}`` and parse strictly.
    2. Strip a surrounding markdown fence and parse strictly.

    Returns ``{}`` for absent input or when every strategy fails. The
    result of a successful parse is returned unchanged, so callers that
    need an object should pass it through ``as_mapping``.
    """
    if not raw_text:
        return {}

    for strategy in (_try_brace_slice, _try_fence_strip):
        ok, value = strategy(raw_text)
        if ok:
            return value

    log.warning("Could not parse structured output: %.200r", raw_text)
    return {}


def as_mapping(value: Any) -> dict[str, Any]:
    """Coerce a parse result to a dict (non-objects become ``{}``)"""  # noqa: D415
    return dict(value) if isinstance(value, dict) else {}


def clean_latex(text: str | None) -> str:
    """Strip code fences and display-math delimiters from a LaTeX answer."""
    if not text:
        return ""
    latex = _LATEX_FENCE.sub("", text).strip()
    latex = re.sub(r"^\\\[", "", latex)
    latex = re.sub(r"\\\]$", "", latex)
    latex = re.sub(r"^\$\$", "", latex)
    latex = re.sub(r"\$\$$", "", latex)
    return latex.strip()


def clean_svg(markup: Any) -> str | None:
    """Return a self-contained, well-formed ``<svg>`` document or None.

    None means there was nothing to draw (null, empty, prose) or the markup
    could not be parsed.
    """
    if not isinstance(markup, str):
        return None
    start = markup.find("<svg")
    end = markup.rfind("</svg>")
    if start == -1:
        return None
    if end == -1:
        # Self-closing root such as <svg ... />
        candidate = markup[start:].strip()
        if not candidate.endswith("/>"):
            return None
    else:
        candidate = markup[start : end + len("</svg>")]

    if "xmlns=" not in candidate.split(">", 1)[0]:
        candidate = candidate.replace("<svg", f'<svg xmlns="{_SVG_NAMESPACE}"', 1)

    try:
        root = ET.fromstring(candidate)
    except ET.ParseError as e:
        log.warning("Discarding malformed SVG plot: %s", e)
        return None
    if root.tag not in ("svg", f"{{{_SVG_NAMESPACE}}}svg"):
        return None
    return candidate
