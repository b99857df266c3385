"""Structured-output extraction never raises and prefers the outermost object."""

import pytest

from gemini_tutor.pipeline.sanitizer import (
    as_mapping,
    clean_latex,
    clean_svg,
    parse_structured,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("raw", [None, "", "not json at all", "{broken", "```json\n{oops\n```"])
def test_unparseable_input_returns_empty_mapping(raw):
    assert parse_structured(raw) == {}


def test_extracts_object_surrounded_by_prose():
    raw = 'Sure! Here you go: {"a": 1, "b": {"c": [1, 2]}} Hope this helps.'
    assert parse_structured(raw) == {"a": 1, "b": {"c": [1, 2]}}


def test_extracts_object_inside_markdown_fence():
    raw = '```json\n{"problems": []}\n```'
    assert parse_structured(raw) == {"problems": []}


def test_fence_strip_handles_non_object_payloads():
    assert parse_structured("```json\n[1, 2, 3]\n```") == [1, 2, 3]
    assert parse_structured("```\n[true]\n```") == [True]


def test_brace_slice_spans_first_open_to_last_close():
    # Two objects side by side are not one valid document.
    assert parse_structured('{"a": 1} and {"b": 2}') == {}


def test_failed_parse_logs_warning(caplog):
    with caplog.at_level("WARNING", logger="gemini_tutor.pipeline.sanitizer"):
        parse_structured("definitely not json")
    assert "Could not parse structured output" in caplog.text


def test_as_mapping_coerces_non_objects():
    assert as_mapping([1, 2]) == {}
    assert as_mapping("text") == {}
    assert as_mapping({"k": "v"}) == {"k": "v"}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("```latex\nx^2 + 1\n```", "x^2 + 1"),
        ("\\[ \\frac{a}{b} \\]", "\\frac{a}{b}"),
        ("$$y = mx + c$$", "y = mx + c"),
        ("  E = mc^2  ", "E = mc^2"),
        (None, ""),
    ],
)
def test_clean_latex(raw, expected):
    assert clean_latex(raw) == expected


def test_clean_svg_returns_well_formed_document():
    raw = 'Here is the plot:\n<svg width="10" height="10"><circle cx="5" cy="5" r="4"/></svg>\nDone.'
    svg = clean_svg(raw)
    assert svg is not None
    assert svg.startswith("<svg")
    assert svg.endswith("</svg>")
    assert 'xmlns="http://www.w3.org/2000/svg"' in svg


def test_clean_svg_keeps_existing_namespace():
    raw = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 1 1"></svg>'
    assert clean_svg(raw) == raw


@pytest.mark.parametrize(
    "raw", [None, "", "null", "no plot requested", 42, "<svg><g></svg>"]
)
def test_clean_svg_rejects_missing_or_malformed_markup(raw):
    assert clean_svg(raw) is None


def test_deeply_nested_object_degrades_to_empty_mapping():
    depth = 100_000
    raw = "Here you go: " + '{"a":' * depth + "1" + "}" * depth
    assert parse_structured(raw) == {}
