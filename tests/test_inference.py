"""InferenceClient backend tests — SDKs are patched where each backend imports them."""
import asyncio
import base64
import json

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from quiz2json.errors import (
    ConversionCancelledError,
    EmptyResponseError,
    MissingCredentialError,
    TransportError,
)
from quiz2json.inference.client import InferenceClient
from quiz2json.models import EncodedImage
from quiz2json.prompt import PROMPT_SPEC

IMAGE = EncodedImage(data=base64.b64encode(b"fake-image-bytes").decode(), mime_type="image/png")
QUESTION_JSON = '{"questions":[{"id":"q1","statement":"Qual cor?","options":[{"id":"A","text":"Azul"}]}]}'


class FakeClient(InferenceClient):
    """Test double that records transport calls."""

    def __init__(self, api_key, reply=QUESTION_JSON, delay=0.0, timeout=None):
        super().__init__(api_key, "fake-model", timeout=timeout)
        self.calls = 0
        self.reply = reply
        self.delay = delay
        self.cancelled = False

    async def _request(self, image, prompt):
        self.calls += 1
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return self.reply


# ── shared InferenceClient behavior ───────────────────────────────────────────


@pytest.mark.parametrize("api_key", [None, ""])
async def test_missing_credential_fails_before_transport(api_key):
    client = FakeClient(api_key)

    with pytest.raises(MissingCredentialError):
        await client.infer(IMAGE, PROMPT_SPEC)

    assert client.calls == 0


async def test_infer_returns_raw_text_unverified():
    client = FakeClient("key", reply="{not even json")

    assert await client.infer(IMAGE, PROMPT_SPEC) == "{not even json"


@pytest.mark.parametrize("reply", [None, "", "   \n"])
async def test_empty_reply_raises(reply):
    client = FakeClient("key", reply=reply)

    with pytest.raises(EmptyResponseError):
        await client.infer(IMAGE, PROMPT_SPEC)


async def test_timeout_raises_transport_error_and_abandons_request():
    client = FakeClient("key", delay=5, timeout=0.01)

    with pytest.raises(TransportError, match="timed out"):
        await client.infer(IMAGE, PROMPT_SPEC)

    assert client.cancelled


async def test_cancel_event_abandons_request():
    client = FakeClient("key", delay=5)
    cancel = asyncio.Event()

    async def cancel_soon():
        await asyncio.sleep(0.01)
        cancel.set()

    canceller = asyncio.create_task(cancel_soon())
    with pytest.raises(ConversionCancelledError):
        await client.infer(IMAGE, PROMPT_SPEC, cancel=cancel)
    await canceller

    assert client.cancelled


async def test_unset_cancel_event_does_not_interfere():
    client = FakeClient("key")

    assert await client.infer(IMAGE, PROMPT_SPEC, cancel=asyncio.Event()) == QUESTION_JSON


async def test_caller_cancellation_cancels_request():
    client = FakeClient("key", delay=5)
    task = asyncio.create_task(client.infer(IMAGE, PROMPT_SPEC, cancel=asyncio.Event()))
    await asyncio.sleep(0.01)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert client.cancelled


# ── GeminiInferenceClient ─────────────────────────────────────────────────────


def gemini_mock(response=None, error=None):
    sdk = MagicMock()
    sdk.aio.models.generate_content = AsyncMock(return_value=response, side_effect=error)
    return sdk


async def test_gemini_sends_image_prompt_and_schema():
    from quiz2json.inference.gemini import GeminiInferenceClient

    sdk = gemini_mock(MagicMock(text=QUESTION_JSON))
    with patch("quiz2json.inference.gemini.genai.Client", return_value=sdk) as mock_cls:
        result = await GeminiInferenceClient("g-key", "gemini-2.5-flash").infer(IMAGE, PROMPT_SPEC)

    assert result == QUESTION_JSON
    mock_cls.assert_called_once_with(api_key="g-key")
    kwargs = sdk.aio.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-2.5-flash"
    image_part, text = kwargs["contents"]
    assert image_part.inline_data.data == b"fake-image-bytes"
    assert image_part.inline_data.mime_type == "image/png"
    assert text == PROMPT_SPEC.instruction_text
    assert kwargs["config"].response_mime_type == "application/json"


async def test_gemini_missing_key_never_builds_sdk_client():
    from quiz2json.inference.gemini import GeminiInferenceClient

    with patch("quiz2json.inference.gemini.genai.Client") as mock_cls:
        with pytest.raises(MissingCredentialError, match="GEMINI_API_KEY"):
            await GeminiInferenceClient(None, "gemini-2.5-flash").infer(IMAGE, PROMPT_SPEC)

    mock_cls.assert_not_called()


async def test_gemini_network_error_becomes_transport_error():
    from quiz2json.inference.gemini import GeminiInferenceClient

    sdk = gemini_mock(error=httpx.ConnectError("connection refused"))
    with patch("quiz2json.inference.gemini.genai.Client", return_value=sdk):
        with pytest.raises(TransportError) as info:
            await GeminiInferenceClient("g-key", "m").infer(IMAGE, PROMPT_SPEC)

    assert isinstance(info.value.__cause__, httpx.ConnectError)


async def test_gemini_empty_text_raises():
    from quiz2json.inference.gemini import GeminiInferenceClient

    sdk = gemini_mock(MagicMock(text=None))
    with patch("quiz2json.inference.gemini.genai.Client", return_value=sdk):
        with pytest.raises(EmptyResponseError):
            await GeminiInferenceClient("g-key", "m").infer(IMAGE, PROMPT_SPEC)


# ── OpenAIInferenceClient ─────────────────────────────────────────────────────


def openai_response(content):
    choice = MagicMock()
    choice.message.content = content
    response = MagicMock()
    response.choices = [choice]
    return response


async def test_openai_sends_data_url_and_strict_schema():
    from quiz2json.inference.openai import OpenAIInferenceClient

    with patch("quiz2json.inference.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(return_value=openai_response(QUESTION_JSON))
        mock_cls.return_value = mock_openai

        result = await OpenAIInferenceClient("sk", "gpt-4o").infer(IMAGE, PROMPT_SPEC)

    assert result == QUESTION_JSON
    kwargs = mock_openai.chat.completions.create.call_args.kwargs
    content = kwargs["messages"][0]["content"]
    image_blocks = [b for b in content if b["type"] == "image_url"]
    assert image_blocks[0]["image_url"]["url"] == f"data:image/png;base64,{IMAGE.data}"
    fmt = kwargs["response_format"]
    assert fmt["type"] == "json_schema"
    assert fmt["json_schema"]["strict"] is True
    assert fmt["json_schema"]["schema"]["type"] == "object"


async def test_openai_api_error_becomes_transport_error():
    from openai import APIConnectionError
    from quiz2json.inference.openai import OpenAIInferenceClient

    error = APIConnectionError(request=httpx.Request("POST", "https://api.openai.com"))
    with patch("quiz2json.inference.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(side_effect=error)
        mock_cls.return_value = mock_openai

        with pytest.raises(TransportError):
            await OpenAIInferenceClient("sk", "gpt-4o").infer(IMAGE, PROMPT_SPEC)


async def test_openai_no_choices_is_empty():
    from quiz2json.inference.openai import OpenAIInferenceClient

    response = MagicMock()
    response.choices = []
    with patch("quiz2json.inference.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(return_value=response)
        mock_cls.return_value = mock_openai

        with pytest.raises(EmptyResponseError):
            await OpenAIInferenceClient("sk", "gpt-4o").infer(IMAGE, PROMPT_SPEC)


# ── ClaudeInferenceClient ─────────────────────────────────────────────────────


def tool_block(payload, name="record_questions"):
    block = MagicMock()
    block.type = "tool_use"
    block.name = name
    block.input = payload
    return block


async def test_claude_forces_tool_and_returns_its_input_as_json():
    from quiz2json.inference.claude import ClaudeInferenceClient

    payload = json.loads(QUESTION_JSON)
    message = MagicMock()
    message.content = [tool_block(payload)]
    with patch("quiz2json.inference.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(return_value=message)
        mock_cls.return_value = mock_anthropic

        result = await ClaudeInferenceClient("sk-ant", "claude-x").infer(IMAGE, PROMPT_SPEC)

    assert json.loads(result) == payload
    kwargs = mock_anthropic.messages.create.call_args.kwargs
    assert kwargs["tool_choice"] == {"type": "tool", "name": "record_questions"}
    assert kwargs["tools"][0]["input_schema"]["type"] == "object"
    content = kwargs["messages"][0]["content"]
    image_blocks = [b for b in content if b["type"] == "image"]
    assert image_blocks[0]["source"]["media_type"] == "image/png"
    assert image_blocks[0]["source"]["data"] == IMAGE.data


async def test_claude_without_tool_use_is_empty():
    from quiz2json.inference.claude import ClaudeInferenceClient

    text_block = MagicMock()
    text_block.type = "text"
    message = MagicMock()
    message.content = [text_block]
    with patch("quiz2json.inference.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(return_value=message)
        mock_cls.return_value = mock_anthropic

        with pytest.raises(EmptyResponseError):
            await ClaudeInferenceClient("sk-ant", "claude-x").infer(IMAGE, PROMPT_SPEC)


async def test_claude_api_error_becomes_transport_error():
    from anthropic import AnthropicError
    from quiz2json.inference.claude import ClaudeInferenceClient

    with patch("quiz2json.inference.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(side_effect=AnthropicError("API down"))
        mock_cls.return_value = mock_anthropic

        with pytest.raises(TransportError):
            await ClaudeInferenceClient("sk-ant", "claude-x").infer(IMAGE, PROMPT_SPEC)


# ── factory ───────────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "provider, module, cls_name",
    [
        ("gemini", "quiz2json.inference.gemini", "GeminiInferenceClient"),
        ("openai", "quiz2json.inference.openai", "OpenAIInferenceClient"),
        ("claude", "quiz2json.inference.claude", "ClaudeInferenceClient"),
    ],
)
def test_factory_picks_backend(provider, module, cls_name):
    import importlib
    from quiz2json.config import Credential
    from quiz2json.inference.factory import make_inference_client

    config = MagicMock(request_timeout=30.0)
    client = make_inference_client(config, Credential(provider=provider, api_key="k", model="m"))

    assert type(client) is getattr(importlib.import_module(module), cls_name)
    assert client.model == "m"
