"""Tutor chat, video questions and visual aid generation."""

import base64

import pytest

from gemini_tutor.core.types import (
    ImageInput,
    InlineDataPart,
    ProviderResponse,
    TextInput,
    TextPart,
    Tool,
    WebSource,
)
from gemini_tutor.exceptions import EmptyResponseError, QuotaExceededError
from gemini_tutor.pipeline import prompts
from gemini_tutor.pipeline.chat import ChatPipeline, chat_opening_parts
from gemini_tutor.pipeline.video import VideoPipeline
from gemini_tutor.pipeline.visual import VisualAidPipeline
from gemini_tutor.sessions import SessionRegistry
from tests.helpers import ScriptedAdapter

pytestmark = pytest.mark.unit

PNG = b"\x89PNG\r\n\x1a\n"


# --- Chat ---


def test_chat_opening_without_context_uses_marker():
    assert chat_opening_parts(TextInput(content="2x = 4")) == (
        TextPart("2x = 4"),
        TextPart("Context."),
    )


def test_chat_opening_with_extracted_text():
    parts = chat_opening_parts(ImageInput(data=b"img", auxiliary_text="x + 1 = 3"))
    assert parts[1] == TextPart("Context:\nx + 1 = 3")


@pytest.mark.asyncio
async def test_chat_runs_on_fast_with_search(caller):
    adapter = ScriptedAdapter(session_responses=["Let's look at it.", "x = 2"])
    chat = ChatPipeline(SessionRegistry(adapter, caller))

    opening = await chat.start(TextInput(content="2x = 4"))
    reply = await chat.send("What is x?")

    (session,) = adapter.sessions
    assert session.model_name == "fast-model"
    assert session.config.tools == (Tool.GOOGLE_SEARCH,)
    assert session.config.system_instruction == "Helpful AI Tutor. Use Google Search for facts."
    assert opening.model_used == reply.model_used == "fast-model"
    assert reply.text == "x = 2"


@pytest.mark.asyncio
async def test_chat_quota_on_start_has_no_fallback(caller):
    adapter = ScriptedAdapter(session_responses=[Exception("429")])
    chat = ChatPipeline(SessionRegistry(adapter, caller))
    with pytest.raises(QuotaExceededError):
        await chat.start(TextInput(content="hi"))


# --- Video ---


def test_timestamps_render_as_clock_time():
    assert prompts.format_timestamp(0) == "00:00:00"
    assert prompts.format_timestamp(3725.9) == "01:02:05"
    assert prompts.format_timestamp(-4) == "00:00:00"


@pytest.mark.asyncio
async def test_frame_analysis(caller):
    adapter = ScriptedAdapter(
        [
            {
                "analysis": "The board shows Newton's second law.",
                "transcribed_text": "F = ma",
                "fact_checks": [
                    {"claim": "F = ma", "verdict": "verified", "source": "textbook"},
                    {"claim": "g = 10", "verdict": "maybe"},
                ],
            }
        ]
    )
    frame = ImageInput(data=PNG, mime_type="image/png")
    analysis = await VideoPipeline(adapter, caller).analyze_frame(
        frame, "What law is this?", 754, fact_check=True
    )

    (call,) = adapter.calls
    assert call.model_name == "smart-model"
    assert call.parts[0] == InlineDataPart(data=PNG, mime_type="image/png")
    assert "00:12:34" in call.prompt
    assert call.config.tools == (Tool.GOOGLE_SEARCH,)
    assert analysis.text == "The board shows Newton's second law."
    assert analysis.ocr_text == "F = ma"
    assert [(f.claim, f.verdict) for f in analysis.fact_checks] == [("F = ma", "verified")]
    assert analysis.model_used == "smart-model"


@pytest.mark.asyncio
async def test_frame_without_fact_check_has_no_tools(caller):
    adapter = ScriptedAdapter([{"analysis": "ok"}])
    await VideoPipeline(adapter, caller).analyze_frame(
        ImageInput(data=PNG), "what?", 1.0
    )
    assert adapter.calls[0].config.tools == ()


@pytest.mark.asyncio
async def test_empty_analysis_gets_default_text(caller):
    adapter = ScriptedAdapter(["garbled"])
    analysis = await VideoPipeline(adapter, caller).analyze_frame(
        ImageInput(data=PNG), "what?", 1.0
    )
    assert analysis.text == "Analysis complete."
    assert analysis.ocr_text is None
    assert analysis.fact_checks == ()


@pytest.mark.asyncio
async def test_youtube_segment_uses_search_and_falls_back(caller):
    source = WebSource(uri="https://example.org/summary", title="Summary")
    adapter = ScriptedAdapter(
        [
            Exception("quota exceeded for gemini-3-pro"),
            ProviderResponse(
                text='{"analysis": "The speaker explains entropy."}', sources=(source,)
            ),
        ]
    )
    analysis = await VideoPipeline(adapter, caller).analyze_youtube_segment(
        "https://youtu.be/abc", "What is explained?", 90, full_video=True
    )

    assert adapter.models_called == ["smart-model", "fast-model"]
    assert all(c.config.tools == (Tool.GOOGLE_SEARCH,) for c in adapter.calls)
    assert "https://youtu.be/abc" in adapter.calls[0].prompt
    assert "00:01:30" in adapter.calls[0].prompt
    assert "Analyze the video broadly." in adapter.calls[0].prompt
    assert analysis.model_used == "fast-model"
    assert analysis.sources == (source,)


# --- Visual aids ---


@pytest.mark.asyncio
async def test_visual_aid_is_generated_then_checked(caller):
    image = InlineDataPart(data=PNG, mime_type="image/png")
    adapter = ScriptedAdapter(
        [
            ProviderResponse(text=None, images=(image,)),
            {"isAccurate": True, "critique": "Labels match"},
        ]
    )
    aid = await VisualAidPipeline(adapter, caller).generate(
        "A block on an incline", "Free body diagram of a block on a 30 degree incline"
    )

    generate_call, check_call = adapter.calls
    assert generate_call.model_name == "image-smart-model"
    assert generate_call.config.image_aspect_ratio == "4:3"
    assert generate_call.config.image_size == "1K"
    assert check_call.model_name == "fast-model"
    assert check_call.parts[-1] == image
    assert '"A block on an incline"' in check_call.prompt

    assert aid.content == "data:image/png;base64," + base64.b64encode(PNG).decode()
    assert aid.mime_type == "image/png"
    assert aid.validation.is_accurate is True
    assert aid.validation.critique == "Labels match"
    assert aid.validation.model_used == "image-smart-model"


@pytest.mark.asyncio
async def test_visual_aid_falls_back_to_fast_image_model(caller):
    image = InlineDataPart(data=PNG, mime_type="image/png")
    adapter = ScriptedAdapter(
        [Exception("429"), ProviderResponse(text=None, images=(image,)), {"isAccurate": False}]
    )
    aid = await VisualAidPipeline(adapter, caller).generate("p", "diagram")

    assert adapter.models_called == ["image-smart-model", "image-fast-model", "fast-model"]
    assert aid.validation.model_used == "image-fast-model"
    assert aid.validation.is_accurate is False


@pytest.mark.asyncio
async def test_visual_aid_without_image_raises(caller):
    adapter = ScriptedAdapter(["I can only describe it in words."])
    with pytest.raises(EmptyResponseError, match="No image generated."):
        await VisualAidPipeline(adapter, caller).generate("p", "diagram")
    assert len(adapter.calls) == 1
