"""Fixed mapping tables shared by the request and response translators."""

from __future__ import annotations

import secrets
import string
from types import MappingProxyType
from typing import Any, Mapping, Optional

HARM_CATEGORIES = (
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_CIVIC_INTEGRITY",
)

# Process-wide; passed into RequestTranslator, never derived from a request.
SAFETY_SETTINGS: tuple[Mapping[str, str], ...] = tuple(
    MappingProxyType({"category": category, "threshold": "BLOCK_NONE"})
    for category in HARM_CATEGORIES
)

FINISH_REASONS: Mapping[str, str] = MappingProxyType({
    "STOP": "stop",
    "MAX_TOKENS": "length",
    "SAFETY": "content_filter",
    "RECITATION": "content_filter",
})

# Client sampling option -> generationConfig field
GENERATION_FIELDS: Mapping[str, str] = MappingProxyType({
    "stop": "stopSequences",
    "n": "candidateCount",
    "max_tokens": "maxOutputTokens",
    "max_completion_tokens": "maxOutputTokens",
    "temperature": "temperature",
    "top_p": "topP",
    "top_k": "topK",
    "frequency_penalty": "frequencyPenalty",
    "presence_penalty": "presencePenalty",
})

CHOICE_DELIMITER = "\n\n"
STREAM_DONE_FRAME = "data: [DONE]" + CHOICE_DELIMITER

_ID_ALPHABET = string.ascii_letters + string.digits


def map_finish_reason(reason: Optional[str]) -> Optional[str]:
    """Map a provider finish reason; unknown values pass through unchanged."""
    if reason is None:
        return None
    return FINISH_REASONS.get(reason, reason)


def generate_completion_id() -> str:
    return "chatcmpl-" + "".join(secrets.choice(_ID_ALPHABET) for _ in range(29))


def safety_settings_payload(settings: tuple[Mapping[str, Any], ...]) -> list[dict[str, Any]]:
    """Plain JSON-serializable copy of a safety settings constant."""
    return [dict(entry) for entry in settings]
