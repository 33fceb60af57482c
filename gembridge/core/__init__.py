"""Core module initialization."""

from .constants import (
    FINISH_REASONS,
    GENERATION_FIELDS,
    SAFETY_SETTINGS,
    generate_completion_id,
    map_finish_reason,
)
from .exceptions import (
    BridgeError,
    ConfigurationError,
    InvalidRequestError,
    MalformedMediaReference,
    MethodNotAllowed,
    NotFound,
    UnknownContentPartType,
    UnsupportedResponseFormat,
    UpstreamFetchError,
    UpstreamRequestError,
    error_envelope,
)
from .registry import get_client, get_request_translator, set_services
from .upstream import GeminiClient, UpstreamStream, format_httpx_error

__all__ = [
    "BridgeError",
    "ConfigurationError",
    "FINISH_REASONS",
    "GENERATION_FIELDS",
    "GeminiClient",
    "InvalidRequestError",
    "MalformedMediaReference",
    "MethodNotAllowed",
    "NotFound",
    "SAFETY_SETTINGS",
    "UnknownContentPartType",
    "UnsupportedResponseFormat",
    "UpstreamFetchError",
    "UpstreamRequestError",
    "UpstreamStream",
    "error_envelope",
    "format_httpx_error",
    "generate_completion_id",
    "get_client",
    "get_request_translator",
    "map_finish_reason",
    "set_services",
]
