"""OpenAI <-> Gemini translation helpers.

Translates OpenAI Chat Completions requests into Gemini generateContent
requests and complete Gemini responses back into chat completions.
"""

from .media import MediaResolver, ResolvedMedia, parse_data_uri
from .request import RequestTranslator, build_generation_config
from .response import ResponseTranslator, convert_candidate, convert_usage

__all__ = [
    "MediaResolver",
    "RequestTranslator",
    "ResolvedMedia",
    "ResponseTranslator",
    "build_generation_config",
    "convert_candidate",
    "convert_usage",
    "parse_data_uri",
]
