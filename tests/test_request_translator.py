"""Tests for OpenAI -> Gemini request translation."""

import asyncio
import base64

import httpx
import pytest

from gembridge.core.constants import SAFETY_SETTINGS
from gembridge.core.exceptions import (
    MalformedMediaReference,
    UnknownContentPartType,
    UnsupportedResponseFormat,
)
from gembridge.translation import MediaResolver, RequestTranslator, build_generation_config
from gembridge.types import ChatMessage, ChatRequest, ContentPart


def _translator(transport: httpx.MockTransport | None = None) -> RequestTranslator:
    return RequestTranslator(SAFETY_SETTINGS, MediaResolver(transport=transport))


class TestMessagePartitioning:
    """Tests for role mapping and system instruction extraction."""

    @pytest.mark.asyncio
    async def test_simple_user_message(self):
        """Test the minimal request maps to one user turn without system_instruction."""
        result = await _translator().translate(
            {"messages": [{"role": "user", "content": "hi"}], "stream": False}
        )
        assert result["contents"] == [{"role": "user", "parts": [{"text": "hi"}]}]
        assert "system_instruction" not in result

    @pytest.mark.asyncio
    async def test_roles_renamed_in_order(self):
        """Test assistant becomes model and every other role becomes user."""
        messages = [
            {"role": "user", "content": "one"},
            {"role": "assistant", "content": "two"},
            {"role": "tool", "content": "three"},
            {"role": "user", "content": "four"},
        ]
        result = await _translator().translate({"messages": messages})
        assert [c["role"] for c in result["contents"]] == ["user", "model", "user", "user"]
        assert [c["parts"][0]["text"] for c in result["contents"]] == ["one", "two", "three", "four"]

    @pytest.mark.asyncio
    async def test_system_message_becomes_instruction(self):
        """Test the system message is removed from contents."""
        result = await _translator().translate({
            "messages": [
                {"role": "system", "content": "be brief"},
                {"role": "user", "content": "hello"},
            ]
        })
        assert result["system_instruction"] == {"parts": [{"text": "be brief"}]}
        assert result["contents"] == [{"role": "user", "parts": [{"text": "hello"}]}]

    @pytest.mark.asyncio
    async def test_last_system_message_wins(self):
        """Test that with several system messages the last one is used."""
        result = await _translator().translate({
            "messages": [
                {"role": "system", "content": "first"},
                {"role": "user", "content": "hello"},
                {"role": "system", "content": "second"},
            ]
        })
        assert result["system_instruction"] == {"parts": [{"text": "second"}]}
        assert len(result["contents"]) == 1

    @pytest.mark.asyncio
    async def test_system_only_request_gets_placeholder_turn(self):
        """Test a system-only request yields exactly one placeholder turn."""
        result = await _translator().translate(
            {"messages": [{"role": "system", "content": "you are a poet"}]}
        )
        assert result["system_instruction"] == {"parts": [{"text": "you are a poet"}]}
        assert result["contents"] == [{"role": "model", "parts": [{"text": " "}]}]

    @pytest.mark.asyncio
    async def test_no_messages(self):
        """Test a request without messages gives empty contents."""
        result = await _translator().translate({})
        assert result["contents"] == []
        assert "system_instruction" not in result


class TestContentParts:
    """Tests for multi-part content conversion."""

    @pytest.mark.asyncio
    async def test_text_and_audio_parts(self):
        """Test text passthrough and audio inline data."""
        content = [
            {"type": "text", "text": "listen"},
            {"type": "input_audio", "input_audio": {"data": "UklGRg==", "format": "wav"}},
        ]
        result = await _translator().translate({"messages": [{"role": "user", "content": content}]})
        assert result["contents"][0]["parts"] == [
            {"text": "listen"},
            {"inlineData": {"mimeType": "audio/wav", "data": "UklGRg=="}},
        ]

    @pytest.mark.asyncio
    async def test_image_only_message_gets_empty_text_part(self):
        """Test image-only turns get a trailing empty text part."""
        content = [{"type": "image_url", "image_url": {"url": "data:image/png;base64,iVBORw0KGgo="}}]
        result = await _translator().translate({"messages": [{"role": "user", "content": content}]})
        assert result["contents"][0]["parts"] == [
            {"inlineData": {"mimeType": "image/png", "data": "iVBORw0KGgo="}},
            {"text": ""},
        ]

    @pytest.mark.asyncio
    async def test_mixed_image_and_text_has_no_extra_part(self):
        """Test no empty text part is added when text accompanies the image."""
        content = [
            {"type": "text", "text": "what is this?"},
            {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,/9j/4AAQ"}},
        ]
        result = await _translator().translate({"messages": [{"role": "user", "content": content}]})
        assert len(result["contents"][0]["parts"]) == 2

    @pytest.mark.asyncio
    async def test_unknown_part_type_fails(self):
        """Test an unknown content part tag is rejected."""
        content = [{"type": "video_url", "video_url": {"url": "x"}}]
        with pytest.raises(UnknownContentPartType) as exc_info:
            await _translator().translate({"messages": [{"role": "user", "content": content}]})
        assert exc_info.value.status == 400
        assert "video_url" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_remote_images_keep_message_order(self):
        """Test concurrently fetched images land in their original positions."""
        payloads = {"/a.png": b"first-image", "/b.gif": b"second-image"}

        def handler(request: httpx.Request) -> httpx.Response:
            mime = "image/png" if request.url.path.endswith(".png") else "image/gif"
            return httpx.Response(200, content=payloads[request.url.path], headers={"content-type": mime})

        content = [
            {"type": "image_url", "image_url": {"url": "https://img.test/a.png"}},
            {"type": "text", "text": "between"},
            {"type": "image_url", "image_url": {"url": "https://img.test/b.gif"}},
        ]
        translator = _translator(httpx.MockTransport(handler))
        result = await translator.translate({"messages": [{"role": "user", "content": content}]})
        parts = result["contents"][0]["parts"]
        assert parts[0]["inlineData"] == {
            "mimeType": "image/png",
            "data": base64.b64encode(b"first-image").decode(),
        }
        assert parts[1] == {"text": "between"}
        assert parts[2]["inlineData"]["mimeType"] == "image/gif"
        assert len(parts) == 3

    @pytest.mark.asyncio
    async def test_failed_part_cancels_pending_fetches(self):
        """Test an invalid part stops image fetches still in flight."""
        finished = []

        async def slow_handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.5)
            finished.append(str(request.url))
            return httpx.Response(200, content=b"img", headers={"content-type": "image/png"})

        content = [
            {"type": "image_url", "image_url": {"url": "https://img.test/slow.png"}},
            {"type": "video", "video": {}},
        ]
        translator = _translator(httpx.MockTransport(slow_handler))
        with pytest.raises(UnknownContentPartType):
            await translator.translate({"messages": [{"role": "user", "content": content}]})

        await asyncio.sleep(0.8)
        assert finished == []

    @pytest.mark.asyncio
    async def test_failed_message_cancels_other_messages(self):
        """Test a bad part in one message stops fetches for the other messages."""
        finished = []

        async def slow_handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.5)
            finished.append(str(request.url))
            return httpx.Response(200, content=b"img", headers={"content-type": "image/png"})

        messages = [
            {"role": "user", "content": [{"type": "image_url", "image_url": {"url": "https://img.test/a.png"}}]},
            {"role": "user", "content": [{"type": "image_url", "image_url": {"url": "ftp://img.test/b.png"}}]},
        ]
        translator = _translator(httpx.MockTransport(slow_handler))
        with pytest.raises(MalformedMediaReference):
            await translator.translate({"messages": messages})

        await asyncio.sleep(0.8)
        assert finished == []


class TestGenerationConfig:
    """Tests for sampling option and response_format mapping."""

    def test_maps_sampling_fields(self):
        """Test the fixed field table."""
        config = build_generation_config({
            "stop": ["END"],
            "n": 2,
            "max_tokens": 100,
            "temperature": 0.5,
            "top_p": 0.9,
            "top_k": 40,
            "frequency_penalty": 0.1,
            "presence_penalty": 0.2,
        })
        assert config == {
            "stopSequences": ["END"],
            "candidateCount": 2,
            "maxOutputTokens": 100,
            "temperature": 0.5,
            "topP": 0.9,
            "topK": 40,
            "frequencyPenalty": 0.1,
            "presencePenalty": 0.2,
        }

    def test_drops_unknown_and_null_fields(self):
        """Test unknown fields and None values are dropped silently."""
        config = build_generation_config({"model": "x", "seed": 1, "temperature": None, "user": "u"})
        assert config == {}

    def test_max_completion_tokens(self):
        """Test max_completion_tokens maps to maxOutputTokens."""
        assert build_generation_config({"max_completion_tokens": 64}) == {"maxOutputTokens": 64}

    def test_json_schema_with_enum(self):
        """Test an enum schema maps to text/x.enum."""
        config = build_generation_config({
            "response_format": {"type": "json_schema", "json_schema": {"schema": {"enum": ["a", "b"]}}}
        })
        assert config == {"responseMimeType": "text/x.enum", "responseSchema": {"enum": ["a", "b"]}}

    def test_json_schema_without_enum(self):
        """Test a plain schema maps to application/json with the schema attached."""
        schema = {"type": "object", "properties": {"x": {"type": "string"}}}
        config = build_generation_config(
            {"response_format": {"type": "json_schema", "json_schema": {"schema": schema}}}
        )
        assert config == {"responseMimeType": "application/json", "responseSchema": schema}

    def test_json_object(self):
        """Test json_object maps to application/json without a schema."""
        config = build_generation_config({"response_format": {"type": "json_object"}})
        assert config == {"responseMimeType": "application/json"}

    def test_text(self):
        """Test text maps to text/plain."""
        config = build_generation_config({"response_format": {"type": "text"}})
        assert config == {"responseMimeType": "text/plain"}

    def test_unsupported_format(self):
        """Test an unknown response_format.type raises a 400 error."""
        with pytest.raises(UnsupportedResponseFormat) as exc_info:
            build_generation_config({"response_format": {"type": "xml"}})
        assert exc_info.value.status == 400


class TestRequestEnvelope:
    """Tests for the fields attached to every provider request."""

    @pytest.mark.asyncio
    async def test_safety_settings_attached(self):
        """Test every harm category is set to BLOCK_NONE."""
        result = await _translator().translate({"messages": [{"role": "user", "content": "x"}]})
        assert len(result["safetySettings"]) == 5
        assert {s["threshold"] for s in result["safetySettings"]} == {"BLOCK_NONE"}
        assert "HARM_CATEGORY_CIVIC_INTEGRITY" in {s["category"] for s in result["safetySettings"]}

    @pytest.mark.asyncio
    async def test_injected_safety_settings_are_used(self):
        """Test the translator uses the settings it was given."""
        custom = ({"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_ONLY_HIGH"},)
        translator = RequestTranslator(custom, MediaResolver())
        result = await translator.translate({"messages": [{"role": "user", "content": "x"}]})
        assert result["safetySettings"] == [dict(custom[0])]

    @pytest.mark.asyncio
    async def test_tools_pass_through(self):
        """Test tools and tool_choice are forwarded unmodified."""
        tools = [{"type": "function", "function": {"name": "get_weather", "parameters": {}}}]
        result = await _translator().translate({
            "messages": [{"role": "user", "content": "weather?"}],
            "tools": tools,
            "tool_choice": "auto",
        })
        assert result["tools"] is tools
        assert result["tool_choice"] == "auto"

    @pytest.mark.asyncio
    async def test_no_tools_key_without_tools(self):
        """Test tools are omitted when the request has none."""
        result = await _translator().translate({"messages": [{"role": "user", "content": "x"}]})
        assert "tools" not in result
        assert "tool_choice" not in result

    @pytest.mark.asyncio
    async def test_typed_request(self):
        """Test a request built from the ChatRequest types translates like plain JSON."""
        part = ContentPart(type="text", text="hello")
        request = ChatRequest(
            model="gemini-1.5-flash",
            messages=[ChatMessage(role="user", content=[part])],
            temperature=0.3,
        )
        result = await _translator().translate(request)
        assert result["contents"] == [{"role": "user", "parts": [{"text": "hello"}]}]
        assert result["generationConfig"] == {"temperature": 0.3}
