"""Gemini SSE -> OpenAI chunk stream re-framing."""

from .delta import StreamDeltaTranslator
from .framer import StreamFramer
from .pipeline import translate_stream

__all__ = [
    "StreamDeltaTranslator",
    "StreamFramer",
    "translate_stream",
]
