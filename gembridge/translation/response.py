"""Gemini generateContent -> OpenAI Chat Completions response translation."""

from __future__ import annotations

import json
import time
import uuid
from typing import Any, Mapping, Optional

from ..core.constants import CHOICE_DELIMITER, generate_completion_id, map_finish_reason
from ..types.chat import ChatCompletionResponse, Choice, ToolCall, Usage
from ..types.gemini import Candidate, GenerateContentResponse, UsageMetadata


def extract_text(candidate: Candidate) -> Optional[str]:
    """Join the text parts of a candidate; None when it has no text."""
    content = candidate.get("content") or {}
    texts = [
        part["text"]
        for part in content.get("parts") or []
        if isinstance(part, Mapping) and isinstance(part.get("text"), str)
    ]
    if not texts:
        return None
    return CHOICE_DELIMITER.join(texts)


def _stringify_args(args: Any) -> str:
    # Strings are the provider's own serialization and are kept verbatim
    if isinstance(args, str):
        return args
    return json.dumps(args if args is not None else {}, ensure_ascii=False)


def extract_tool_calls(candidate: Candidate) -> Optional[list[ToolCall]]:
    """Collect tool calls from a candidate.

    Sources, in order: the candidate-level ``toolCalls`` list and
    ``functionCall`` parts of the candidate content.
    """
    tool_calls: list[ToolCall] = []

    for call in candidate.get("toolCalls") or []:
        function = call.get("function") or {}
        tool_calls.append({
            "id": call.get("id"),
            "type": "function",
            "function": {
                "name": function.get("name"),
                "arguments": function.get("args"),
            },
        })

    content = candidate.get("content") or {}
    for part in content.get("parts") or []:
        if not isinstance(part, Mapping) or not part.get("functionCall"):
            continue
        function_call = part["functionCall"]
        tool_calls.append({
            "id": function_call.get("id") or f"call_{uuid.uuid4().hex[:24]}",
            "type": "function",
            "function": {
                "name": function_call.get("name"),
                "arguments": _stringify_args(function_call.get("args")),
            },
        })

    return tool_calls or None


def has_output(candidate: Candidate) -> bool:
    """Whether a candidate carries content or tool calls."""
    return bool(candidate.get("content") or candidate.get("toolCalls"))


def convert_candidate(candidate: Candidate, key: str = "message") -> Choice:
    """Map one provider candidate onto a client choice.

    Args:
        candidate: The provider candidate.
        key: "message" for full responses, "delta" for stream chunks.
    """
    message: dict[str, Any] = {
        "role": "assistant",
        "content": extract_text(candidate),
    }
    tool_calls = extract_tool_calls(candidate)
    if tool_calls is not None:
        message["tool_calls"] = tool_calls
    elif key == "message":
        message["tool_calls"] = None
    choice: dict[str, Any] = {
        "index": candidate.get("index") or 0,
        key: message,
        "logprobs": None,
        "finish_reason": map_finish_reason(candidate.get("finishReason")),
    }
    return choice  # type: ignore[return-value]


def convert_usage(usage_metadata: Optional[UsageMetadata]) -> Optional[Usage]:
    if not usage_metadata:
        return None
    return {
        "completion_tokens": usage_metadata.get("candidatesTokenCount"),
        "prompt_tokens": usage_metadata.get("promptTokenCount"),
        "total_tokens": usage_metadata.get("totalTokenCount"),
    }


class ResponseTranslator:
    """Translates complete (non-streaming) provider responses."""

    def __init__(self, model: str) -> None:
        self.model = model

    def translate(
        self,
        data: GenerateContentResponse,
        completion_id: Optional[str] = None,
    ) -> ChatCompletionResponse:
        return {
            "id": completion_id or generate_completion_id(),
            "object": "chat.completion",
            "created": int(time.time()),
            "model": self.model,
            "choices": [convert_candidate(cand) for cand in data.get("candidates") or []],
            "usage": convert_usage(data.get("usageMetadata")),
        }
