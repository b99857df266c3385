"""Telemetry contexts: free when disabled, scoped when enabled."""

import logging

import pytest

from gemini_tutor.core.types import TextInput
from gemini_tutor.pipeline.homework import HomeworkPipeline
from gemini_tutor.pipeline.tiered import TieredCaller
from gemini_tutor.telemetry import SimpleReporter, TelemetryContext
from tests.helpers import ScriptedAdapter, make_config

pytestmark = pytest.mark.unit


@pytest.fixture
def enabled(monkeypatch):
    monkeypatch.setenv("GEMINI_TUTOR_TELEMETRY", "1")


def test_disabled_by_default_returns_shared_noop():
    reporter = SimpleReporter()
    ctx = TelemetryContext(reporter)
    assert ctx is TelemetryContext()
    with ctx("anything") as scoped:
        scoped.count("ignored")
    assert reporter.metrics == {} and reporter.timings == {}


def test_debug_flag_enables(monkeypatch):
    monkeypatch.setenv("DEBUG", "1")
    reporter = SimpleReporter()
    with TelemetryContext(reporter)("outer"):
        pass
    assert "outer" in reporter.timings


def test_no_reporters_means_noop(enabled):
    assert TelemetryContext() is TelemetryContext()


def test_nested_scopes_and_counters(enabled):
    reporter = SimpleReporter()
    tele = TelemetryContext(reporter)
    with tele("homework"):
        with tele("refinement", selected=2):
            tele.count("refinement_failed")
        tele.metric("problems", 3)

    assert set(reporter.timings) == {"homework", "homework.refinement"}
    (_, details), = reporter.timings["homework.refinement"]
    assert details["selected"] == 2
    assert details["parent_scope"] == "homework"
    assert details["failed"] is False
    assert reporter.total("homework.refinement.refinement_failed") == 1
    assert reporter.metrics["homework.refinement.refinement_failed"][0][1]["metric_type"] == "counter"
    assert reporter.total("homework.problems") == 3


def test_failed_scope_is_marked(enabled):
    reporter = SimpleReporter()
    tele = TelemetryContext(reporter)
    with pytest.raises(RuntimeError), tele("stage"):
        raise RuntimeError("boom")
    (_, details), = reporter.timings["stage"]
    assert details["failed"] is True


def test_broken_reporter_is_logged_not_raised(enabled, caplog):
    class _Broken:
        def record_timing(self, scope, duration, **metadata):
            raise RuntimeError("disk full")

        def record_metric(self, scope, value, **metadata):
            raise RuntimeError("disk full")

    good = SimpleReporter()
    tele = TelemetryContext(_Broken(), good)
    with caplog.at_level(logging.ERROR, logger="gemini_tutor.telemetry"), tele("stage"):
        tele.count("x")

    assert good.total("stage.x") == 1
    assert "Telemetry reporter '_Broken' failed" in caplog.text


def test_empty_scope_name_rejected(enabled):
    tele = TelemetryContext(SimpleReporter())
    with pytest.raises(ValueError), tele(""):
        pass


def test_report_lists_scopes_and_metrics(enabled):
    reporter = SimpleReporter()
    tele = TelemetryContext(reporter)
    with tele("math_lab"):
        tele.count("auto_repaired")
    report = reporter.get_report()
    assert "=== Telemetry Report ===" in report
    assert "math_lab.auto_repaired" in report


@pytest.mark.asyncio
async def test_pipeline_scopes_are_recorded(enabled):
    reporter = SimpleReporter()
    tele = TelemetryContext(reporter)
    adapter = ScriptedAdapter(
        [
            {"subject": "Math"},
            {"problems": [{"complete_solution": "x", "validation_check": {"status": "warning", "confidence_score": 50}}]},
            RuntimeError("refinement down"),
        ]
    )
    pipeline = HomeworkPipeline(adapter, TieredCaller(make_config(), tele), tele)
    await pipeline.analyze(TextInput(content="x + 1 = 2"))

    assert "homework.tuning" in reporter.timings
    assert "homework.deep_analysis.tiered.Deep Execution" in reporter.timings
    assert reporter.timings["homework.refinement"][0][1]["failed"] is True
    assert reporter.total("homework.refinement_failed") == 1
