"""OpenAI Chat Completions -> Gemini generateContent request translation.

Key mappings:
- system messages (last one wins) -> system_instruction
- assistant -> model, every other role -> user
- content parts: text, image_url (via MediaResolver), input_audio
- sampling options -> generationConfig (GENERATION_FIELDS)
- response_format -> responseMimeType / responseSchema
- tools / tool_choice pass through unmodified
- the fixed safety settings are attached to every request
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Iterable, Mapping, Optional, Sequence, TypeVar

from ..core.constants import GENERATION_FIELDS, SAFETY_SETTINGS, safety_settings_payload
from ..core.exceptions import UnknownContentPartType, UnsupportedResponseFormat
from ..types.chat import ChatMessage, ChatRequest, ContentPart
from ..types.gemini import Content, GenerateContentRequest, GenerationConfig, Part
from .media import MediaResolver

logger = logging.getLogger("gembridge")

# Gemini rejects an empty contents list when only a system instruction is given.
PLACEHOLDER_TURN_TEXT = " "

T = TypeVar("T")


def _convert_role(role: Any) -> str:
    return "model" if role == "assistant" else "user"


async def _gather_or_cancel(awaitables: Iterable[Awaitable[T]]) -> list[T]:
    """Run awaitables concurrently, keeping order.

    On the first failure the unfinished ones are cancelled and awaited
    before the error propagates, so no media fetch outlives the request.
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def build_generation_config(payload: Mapping[str, Any]) -> GenerationConfig:
    """Map sampling options and response_format onto a generationConfig.

    Unknown fields and None values are dropped; when two client fields map
    to the same provider field, the one appearing later in the request wins.
    """
    config: dict[str, Any] = {}
    for key, value in payload.items():
        target = GENERATION_FIELDS.get(key)
        if target and value is not None:
            config[target] = value

    response_format = payload.get("response_format")
    if response_format:
        config.update(_convert_response_format(response_format))
    return config  # type: ignore[return-value]


def _convert_response_format(response_format: Mapping[str, Any]) -> dict[str, Any]:
    format_type = response_format.get("type")
    if format_type == "json_schema":
        json_schema = response_format.get("json_schema") or {}
        schema = json_schema.get("schema") if isinstance(json_schema, Mapping) else None
        if isinstance(schema, Mapping) and "enum" in schema:
            return {"responseMimeType": "text/x.enum", "responseSchema": schema}
        result: dict[str, Any] = {"responseMimeType": "application/json"}
        if schema is not None:
            result["responseSchema"] = schema
        return result
    if format_type == "json_object":
        return {"responseMimeType": "application/json"}
    if format_type == "text":
        return {"responseMimeType": "text/plain"}
    raise UnsupportedResponseFormat(format_type)


class RequestTranslator:
    """Builds a Gemini request from an OpenAI chat completion request.

    Args:
        safety_settings: Safety settings attached to every request.
        media_resolver: Resolver used for image_url parts.
    """

    def __init__(
        self,
        safety_settings: Sequence[Mapping[str, str]] = SAFETY_SETTINGS,
        media_resolver: Optional[MediaResolver] = None,
    ) -> None:
        self.safety_settings = tuple(safety_settings)
        self.media_resolver = media_resolver or MediaResolver()

    async def translate(self, payload: ChatRequest) -> GenerateContentRequest:
        """Translate a chat completion request body.

        Raises:
            UnsupportedResponseFormat: For an unknown response_format.type.
            UnknownContentPartType: For an unknown content part tag.
            MalformedMediaReference, UpstreamFetchError: From image resolution.
        """
        # response_format errors must surface before any media fetch
        generation_config = build_generation_config(payload)

        request: dict[str, Any] = {}
        system_instruction, contents = await self.convert_messages(payload.get("messages") or [])
        if system_instruction is not None:
            request["system_instruction"] = system_instruction
        request["contents"] = contents
        request["safetySettings"] = safety_settings_payload(self.safety_settings)
        request["generationConfig"] = generation_config

        if payload.get("tools"):
            request["tools"] = payload["tools"]
        if payload.get("tool_choice"):
            request["tool_choice"] = payload["tool_choice"]

        logger.debug(
            "Translated request: %d content turn(s), system_instruction=%s, generationConfig=%s",
            len(contents),
            system_instruction is not None,
            generation_config,
        )
        return request  # type: ignore[return-value]

    async def convert_messages(
        self, messages: Sequence[ChatMessage]
    ) -> tuple[Optional[Content], list[Content]]:
        """Split messages into (system_instruction, contents).

        All messages are converted concurrently; the result keeps the
        original order. One failing part cancels the remaining conversions.
        """
        converted = await _gather_or_cancel(
            self.convert_content(message.get("content")) for message in messages
        )

        system_instruction: Optional[Content] = None
        contents: list[Content] = []
        for message, parts in zip(messages, converted):
            if message.get("role") == "system":
                system_instruction = {"parts": parts}
            else:
                contents.append({"role": _convert_role(message.get("role")), "parts": parts})

        if system_instruction is not None and not contents:
            contents.append({"role": "model", "parts": [{"text": PLACEHOLDER_TURN_TEXT}]})
        return system_instruction, contents

    async def convert_content(self, content: str | list[ContentPart] | None) -> list[Part]:
        """Convert message content (string or list of parts) into Gemini parts."""
        if content is None:
            return [{"text": ""}]
        if not isinstance(content, list):
            return [{"text": content if isinstance(content, str) else str(content)}]

        parts = await _gather_or_cancel(self._convert_part(item) for item in content)
        if all(item.get("type") == "image_url" for item in content):
            parts.append({"text": ""})
        return parts

    async def _convert_part(self, item: ContentPart) -> Part:
        part_type = item.get("type") if isinstance(item, Mapping) else None
        if part_type == "text":
            return {"text": item.get("text") or ""}
        elif part_type == "image_url":
            image_url = item.get("image_url") or {}
            url = image_url.get("url", "") if isinstance(image_url, Mapping) else str(image_url)
            return await self.media_resolver.resolve_part(url)
        elif part_type == "input_audio":
            audio = item.get("input_audio") or {}
            return {
                "inlineData": {
                    "mimeType": f"audio/{audio.get('format')}",
                    "data": audio.get("data", ""),
                }
            }
        raise UnknownContentPartType(part_type)
