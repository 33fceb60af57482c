"""gembridge - OpenAI Chat Completions front end for the Gemini API

Accepts OpenAI-format requests, translates them to Gemini generateContent
calls and translates the answers (complete documents or SSE streams) back
into OpenAI-format responses.

This module provides:
- RequestTranslator / ResponseTranslator: request and response mapping
- StreamFramer / StreamDeltaTranslator: incremental stream re-framing
- create_app: the FastAPI application factory

Example:
    >>> from gembridge import create_app
    >>> import uvicorn
    >>> uvicorn.run(create_app(), host="127.0.0.1", port=8080)
"""

from .config_loader import BridgeSettings, load_config, load_settings
from .logging import logger, setup_logging
from .main import create_app
from .streaming import StreamDeltaTranslator, StreamFramer, translate_stream
from .translation import MediaResolver, RequestTranslator, ResponseTranslator

__all__ = [
    "BridgeSettings",
    "create_app",
    "load_config",
    "load_settings",
    "logger",
    "MediaResolver",
    "RequestTranslator",
    "ResponseTranslator",
    "setup_logging",
    "StreamDeltaTranslator",
    "StreamFramer",
    "translate_stream",
]
