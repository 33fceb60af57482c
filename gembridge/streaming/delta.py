"""Stateful translation of Gemini stream events into OpenAI chunk frames.

Gemini stream event:
    {"candidates": [{"index": 0, "content": {"parts": [{"text": "Hel"}]}}]}
    {"candidates": [{"content": {"parts": [{"text": "lo"}]}, "finishReason": "STOP"}],
     "usageMetadata": {...}}

OpenAI chunk frames produced for that stream:
    data: {"choices":[{"index":0,"delta":{"role":"assistant","content":""},"finish_reason":null}]}
    data: {"choices":[{"index":0,"delta":{"content":"Hel"},"finish_reason":null}]}
    data: {"choices":[{"index":0,"delta":{"content":"lo"},"finish_reason":null}]}
    data: {"choices":[{"index":0,"delta":{},"finish_reason":"stop"}]}
    data: [DONE]
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Mapping

from ..core.constants import CHOICE_DELIMITER, STREAM_DONE_FRAME, map_finish_reason
from ..translation.response import convert_usage, extract_text, extract_tool_calls, has_output
from ..types.chat import ChatCompletionChunk, Choice, Delta

logger = logging.getLogger("gembridge")


class StreamDeltaTranslator:
    """Converts framed provider events into client chunk frames.

    One instance serves exactly one streamed request. It remembers, per
    candidate index, the last event seen for that candidate: the first
    sighting of an index produces the role-bearing first chunk, and
    finish() builds each candidate's terminal chunk from its last event.
    """

    def __init__(self, completion_id: str, model: str, include_usage: bool = False) -> None:
        """Initialize the translator.

        Args:
            completion_id: The id shared by every chunk (e.g. "chatcmpl-xxx")
            model: Model name reported in every chunk
            include_usage: Whether the client asked for stream usage
        """
        self.id = completion_id
        self.model = model
        self.include_usage = include_usage
        self.last: dict[int, dict[str, Any]] = {}

    def translate(self, payload: str) -> list[str]:
        """Translate one framed event payload into zero or more frames."""
        if payload.strip() == "[DONE]":
            return []

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            logger.error(f"Invalid JSON in stream event {payload[:200]!r}: {exc}")
            data = self._error_event(str(exc))
        if not isinstance(data, dict):
            logger.error(f"Unexpected stream event type {type(data).__name__}: {payload[:200]!r}")
            data = self._error_event(f"Unexpected stream event: {payload[:200]}")

        candidates = data.get("candidates") or []
        if len(candidates) != 1:
            logger.debug("Stream event with %d candidates", len(candidates))

        frames: list[str] = []
        for candidate in candidates:
            if not isinstance(candidate, Mapping):
                continue
            candidate = {**candidate, "index": candidate.get("index") or 0}
            index = candidate["index"]
            event = {**data, "candidates": [candidate]}

            if index not in self.last:
                frames.append(self._encode(self._first_choice(index), usage=None))
            self.last[index] = event

            if has_output(candidate):
                frames.append(self._encode(self._delta_choice(candidate), usage=None))
        return frames

    def finish(self) -> list[str]:
        """Terminal chunk for every candidate seen, then the [DONE] sentinel."""
        frames: list[str] = []
        for index in sorted(self.last):
            event = self.last[index]
            candidate = event["candidates"][0]
            choice: Choice = {
                "index": index,
                "delta": {},
                "logprobs": None,
                "finish_reason": map_finish_reason(candidate.get("finishReason")),
            }
            frames.append(self._encode(choice, usage=convert_usage(event.get("usageMetadata"))))
        frames.append(STREAM_DONE_FRAME)
        return frames

    def _error_event(self, message: str) -> dict[str, Any]:
        # One error candidate per known slot so every choice terminates
        width = max(self.last) + 1 if self.last else 1
        return {
            "candidates": [
                {
                    "index": index,
                    "finishReason": "error",
                    "content": {"parts": [{"text": message}]},
                }
                for index in range(width)
            ]
        }

    @staticmethod
    def _first_choice(index: int) -> Choice:
        return {
            "index": index,
            "delta": {"role": "assistant", "content": ""},
            "logprobs": None,
            "finish_reason": None,
        }

    @staticmethod
    def _delta_choice(candidate: Mapping[str, Any]) -> Choice:
        delta: Delta = {}
        text = extract_text(candidate)
        if text is not None:
            delta["content"] = text
        tool_calls = extract_tool_calls(candidate)
        if tool_calls:
            delta["tool_calls"] = [
                {**call, "index": position} for position, call in enumerate(tool_calls)
            ]
        return {
            "index": candidate["index"],
            "delta": delta,
            "logprobs": None,
            "finish_reason": None,
        }

    def _encode(self, choice: Choice, usage: Any) -> str:
        chunk: ChatCompletionChunk = {
            "id": self.id,
            "object": "chat.completion.chunk",
            "created": int(time.time()),
            "model": self.model,
            "choices": [choice],
        }
        if self.include_usage:
            chunk["usage"] = usage
        return "data: " + json.dumps(chunk, ensure_ascii=False) + CHOICE_DELIMITER
