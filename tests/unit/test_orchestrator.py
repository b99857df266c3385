"""End-to-end wiring through ``create_orchestrator``."""

import pytest

import gemini_tutor
from gemini_tutor import (
    ExamConfig,
    SessionNotInitializedError,
    TextInput,
    TutorOrchestrator,
    create_orchestrator,
)
from gemini_tutor.adapters.mock import MockAdapter
from gemini_tutor.config import config_override, resolve_config
from gemini_tutor.sessions import SessionSlot
from tests.helpers import ScriptedAdapter, make_config

pytestmark = pytest.mark.unit


def test_default_orchestrator_uses_echo_adapter():
    tutor = create_orchestrator()
    assert isinstance(tutor, TutorOrchestrator)
    assert isinstance(tutor.sessions._adapter, MockAdapter)
    assert tutor.config.use_real_api is False


def test_accepts_resolved_config():
    tutor = create_orchestrator(resolve_config({"smart_model": "custom-smart"}))
    assert tutor.caller.model_for("smart") == "custom-smart"


def test_ambient_scope_is_honored():
    with config_override(fast_model="scoped-fast"):
        tutor = create_orchestrator()
    assert tutor.config.fast_model == "scoped-fast"


@pytest.mark.asyncio
async def test_echo_chat_round_trip():
    tutor = create_orchestrator()
    opening = await tutor.start_chat(TextInput(content="What is 2 + 2?"))
    reply = await tutor.send_chat("Explain please")

    assert opening.text == "echo: What is 2 + 2?"
    assert reply.text == "echo: Explain please"
    assert reply.model_used == tutor.config.fast_model


@pytest.mark.asyncio
async def test_echo_math_conversion():
    tutor = create_orchestrator()
    latex = await tutor.convert_text_to_math("x squared")
    assert latex.startswith("echo:")


@pytest.mark.asyncio
async def test_chat_and_exam_are_separate_slots():
    adapter = ScriptedAdapter(session_responses=["chat opening", "Q1"])
    tutor = create_orchestrator(make_config(), adapter=adapter)

    await tutor.start_chat(TextInput(content="hi"))
    await tutor.start_exam(ExamConfig(subject="Biology", grade_level="8"))

    assert tutor.sessions.is_active(SessionSlot.CHAT)
    assert tutor.sessions.is_active(SessionSlot.EXAM)
    assert adapter.sessions[0].config.system_instruction.startswith("Helpful")


@pytest.mark.asyncio
async def test_exam_message_before_start_raises():
    tutor = create_orchestrator(make_config(), adapter=ScriptedAdapter())
    with pytest.raises(SessionNotInitializedError):
        await tutor.send_exam_message("answer")


@pytest.mark.asyncio
async def test_audit_exam_on_demand():
    adapter = ScriptedAdapter(
        [{"auditedScore": "1/1", "fairnessScore": 100, "discrepancies": [], "feedback": "Fair"}],
        session_responses=["Q1"],
    )
    tutor = create_orchestrator(make_config(), adapter=adapter)
    await tutor.start_exam(ExamConfig(subject="Art", grade_level="5"))

    audit = await tutor.audit_exam()
    assert audit.fairness_score == 100
    assert "MODEL: Q1" in adapter.calls[0].prompt


def test_public_api_exports():
    for name in gemini_tutor.__all__:
        assert hasattr(gemini_tutor, name), name
    assert isinstance(gemini_tutor.__version__, str)
