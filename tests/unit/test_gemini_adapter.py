"""Translation between provider-neutral values and the google-genai SDK."""

from types import SimpleNamespace

from google.genai import errors as genai_errors
from google.genai import types
import pytest

from gemini_tutor.adapters.gemini import (
    GoogleGenAIAdapter,
    extract_images,
    extract_sources,
    extract_text,
    to_provider_error,
    to_sdk_config,
)
from gemini_tutor.core.types import (
    GenerationConfig,
    InlineDataPart,
    TextPart,
    Tool,
    WebSource,
)
from gemini_tutor.exceptions import ErrorKind, ProviderError, QuotaExceededError
from gemini_tutor.pipeline.schemas import VISUAL_VALIDATION_SCHEMA

pytestmark = pytest.mark.unit


def _quota_error():
    return genai_errors.ClientError(
        429,
        {"error": {"code": 429, "message": "Resource exhausted", "status": "RESOURCE_EXHAUSTED"}},
    )


def _fake_response(text="hello", *, chunks=(), parts=()):
    candidate = SimpleNamespace(
        grounding_metadata=SimpleNamespace(grounding_chunks=list(chunks)),
        content=SimpleNamespace(parts=list(parts)),
    )
    return SimpleNamespace(text=text, candidates=[candidate])


class _FakeModels:
    def __init__(self, outcome):
        self.outcome = outcome
        self.requests = []

    async def generate_content(self, *, model, contents, config):
        self.requests.append({"model": model, "contents": contents, "config": config})
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


class _FakeChat:
    def __init__(self, outcome):
        self.outcome = outcome
        self.messages = []

    async def send_message(self, message):
        self.messages.append(message)
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


class _FakeChats:
    def __init__(self, chat):
        self.chat = chat
        self.created = []

    def create(self, *, model, config):
        self.created.append({"model": model, "config": config})
        return self.chat


def _fake_client(outcome=None, chat_outcome=None):
    models = _FakeModels(outcome)
    chats = _FakeChats(_FakeChat(chat_outcome))
    return SimpleNamespace(aio=SimpleNamespace(models=models, chats=chats))


# --- Config translation ---


def test_plain_config_leaves_fields_unset():
    config = to_sdk_config(GenerationConfig())
    assert config.tools is None
    assert config.temperature is None
    assert config.response_mime_type is None


def test_json_config_with_schema_and_temperature():
    config = to_sdk_config(
        GenerationConfig.json(VISUAL_VALIDATION_SCHEMA, temperature=0.1)
    )
    assert config.response_mime_type == "application/json"
    assert config.temperature == 0.1
    assert config.response_schema is not None


def test_search_tool_and_system_instruction():
    config = to_sdk_config(
        GenerationConfig(tools=(Tool.GOOGLE_SEARCH,), system_instruction="Be brief")
    )
    assert config.system_instruction == "Be brief"
    (tool,) = config.tools
    assert tool.google_search is not None


def test_image_config_requests_image_modality():
    config = to_sdk_config(GenerationConfig(image_aspect_ratio="4:3", image_size="1K"))
    assert config.image_config.aspect_ratio == "4:3"
    assert config.image_config.image_size == "1K"
    assert config.response_modalities == ["TEXT", "IMAGE"]


# --- Response extraction ---


def test_extract_sources_skips_chunks_without_uri():
    response = _fake_response(
        chunks=[
            SimpleNamespace(web=SimpleNamespace(uri="https://a.example", title="A")),
            SimpleNamespace(web=SimpleNamespace(uri=None, title="no uri")),
            SimpleNamespace(web=None),
            SimpleNamespace(web=SimpleNamespace(uri="https://b.example", title=None)),
        ]
    )
    assert extract_sources(response) == (
        WebSource(uri="https://a.example", title="A"),
        WebSource(uri="https://b.example", title=""),
    )


def test_extract_sources_without_candidates():
    assert extract_sources(SimpleNamespace(candidates=None)) == ()


def test_extract_images_keeps_inline_data_only():
    response = _fake_response(
        text=None,
        parts=[
            SimpleNamespace(inline_data=None, text="caption"),
            SimpleNamespace(inline_data=SimpleNamespace(data=b"\x89PNG", mime_type="image/png")),
        ],
    )
    assert extract_images(response) == (InlineDataPart(data=b"\x89PNG", mime_type="image/png"),)


def test_extract_text_tolerates_non_text_responses():
    class _ImageOnly:
        @property
        def text(self):
            raise ValueError("no text parts")

    assert extract_text(_ImageOnly()) is None


# --- Error conversion ---


def test_quota_api_error_becomes_quota_exceeded():
    error = to_provider_error(_quota_error())
    assert isinstance(error, QuotaExceededError)
    assert error.status_code == 429
    assert error.kind is ErrorKind.QUOTA_EXCEEDED


def test_other_errors_are_transport_failures():
    error = to_provider_error(ConnectionResetError("peer reset"))
    assert type(error) is ProviderError
    assert error.kind is ErrorKind.TRANSPORT
    assert error.status_code is None


# --- Adapter ---


@pytest.mark.asyncio
async def test_generate_sends_sdk_parts_and_config():
    client = _fake_client(_fake_response("answer"))
    adapter = GoogleGenAIAdapter(client=client)

    response = await adapter.generate(
        model_name="fast-model",
        parts=(InlineDataPart(data=b"img", mime_type="image/jpeg"), TextPart("What is this?")),
        config=GenerationConfig(tools=(Tool.GOOGLE_SEARCH,)),
    )

    (request,) = client.aio.models.requests
    assert request["model"] == "fast-model"
    image, text = request["contents"]
    assert image.inline_data.data == b"img"
    assert text.text == "What is this?"
    assert isinstance(request["config"], types.GenerateContentConfig)
    assert response.text == "answer"
    assert response.model_name == "fast-model"


@pytest.mark.asyncio
async def test_generate_converts_sdk_errors():
    adapter = GoogleGenAIAdapter(client=_fake_client(_quota_error()))
    with pytest.raises(QuotaExceededError) as exc_info:
        await adapter.generate(model_name="smart-model", parts=(TextPart("x"),), config=GenerationConfig())
    assert isinstance(exc_info.value.__cause__, genai_errors.APIError)


@pytest.mark.asyncio
async def test_unrelated_exceptions_propagate_unchanged():
    adapter = GoogleGenAIAdapter(client=_fake_client(KeyError("bug")))
    with pytest.raises(KeyError):
        await adapter.generate(model_name="m", parts=(TextPart("x"),), config=GenerationConfig())


@pytest.mark.asyncio
async def test_session_sends_through_sdk_chat():
    client = _fake_client(chat_outcome=_fake_response("Hi there"))
    adapter = GoogleGenAIAdapter(client=client)

    session = await adapter.create_session(
        model_name="fast-model", config=GenerationConfig(system_instruction="Tutor")
    )
    reply = await session.send((TextPart("hello"),))

    (created,) = client.aio.chats.created
    assert created["model"] == "fast-model"
    assert created["config"].system_instruction == "Tutor"
    (message,) = client.aio.chats.chat.messages
    assert message[0].text == "hello"
    assert reply.text == "Hi there"
    assert reply.model_name == "fast-model"


@pytest.mark.asyncio
async def test_session_converts_transport_errors():
    adapter = GoogleGenAIAdapter(client=_fake_client(chat_outcome=TimeoutError("slow")))
    session = await adapter.create_session(model_name="m", config=GenerationConfig())
    with pytest.raises(ProviderError) as exc_info:
        await session.send((TextPart("x"),))
    assert exc_info.value.kind is ErrorKind.TRANSPORT
