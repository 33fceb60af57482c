"""Type definitions for the bridge."""

from .chat import (
    ChatCompletionChunk,
    ChatCompletionResponse,
    ChatMessage,
    ChatRequest,
    Choice,
    ContentPart,
    Delta,
    FunctionCall,
    ToolCall,
    Usage,
)
from .gemini import (
    Candidate,
    Content,
    GenerateContentRequest,
    GenerateContentResponse,
    Part,
    UsageMetadata,
)

__all__ = [
    "Candidate",
    "ChatCompletionChunk",
    "ChatCompletionResponse",
    "ChatMessage",
    "ChatRequest",
    "Choice",
    "Content",
    "ContentPart",
    "Delta",
    "FunctionCall",
    "GenerateContentRequest",
    "GenerateContentResponse",
    "Part",
    "ToolCall",
    "Usage",
    "UsageMetadata",
]
