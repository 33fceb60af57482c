"""Types for the client dialect (OpenAI Chat Completions format).

These are the shapes clients send and receive. Requests arrive as plain
JSON, so the types are TypedDicts describing dicts rather than classes
that validate them.
"""

from typing import Any
from typing_extensions import TypedDict


class FunctionCall(TypedDict, total=False):
    """A function call within a tool call.

    Attributes:
        name: Name of the function to call.
        arguments: JSON string containing the arguments, forwarded exactly
            as the provider produced them.
    """
    name: str | None
    arguments: str | None


class ToolCall(TypedDict, total=False):
    """A tool call in a chat response.

    Attributes:
        id: Unique identifier for this tool call.
        type: Always "function".
        function: The function to call with its arguments.
        index: Position in the tool_calls array (streaming deltas only).
    """
    id: str
    type: str
    function: FunctionCall
    index: int


class ImageURL(TypedDict, total=False):
    url: str
    detail: str | None


class InputAudio(TypedDict, total=False):
    data: str
    format: str


class ContentPart(TypedDict, total=False):
    """A content part for multi-modal messages.

    Tagged on ``type``:
        - "text": uses ``text``
        - "image_url": uses ``image_url.url`` (HTTP(S) URL or data URI)
        - "input_audio": uses ``input_audio.data`` (base64) and ``format``
    """
    type: str
    text: str | None
    image_url: ImageURL | None
    input_audio: InputAudio | None


class ChatMessage(TypedDict, total=False):
    """A message in a chat conversation.

    Attributes:
        role: "system", "user" or "assistant" (anything else is sent as user).
        content: A string or a list of ContentPart.
        tool_calls: Tool calls made by the assistant (responses only).
    """
    role: str
    content: str | list[ContentPart] | None
    tool_calls: list[ToolCall] | None


class ResponseFormat(TypedDict, total=False):
    """Structured output constraint.

    ``type`` is "text", "json_object" or "json_schema"; the latter carries
    ``json_schema.schema``.
    """
    type: str
    json_schema: dict[str, Any] | None


class StreamOptions(TypedDict, total=False):
    include_usage: bool


class ChatRequest(TypedDict, total=False):
    """A chat completion request body."""
    model: str
    messages: list[ChatMessage]
    stream: bool
    stream_options: StreamOptions | None
    stop: str | list[str] | None
    n: int | None
    max_tokens: int | None
    max_completion_tokens: int | None
    temperature: float | None
    top_p: float | None
    top_k: int | None
    frequency_penalty: float | None
    presence_penalty: float | None
    response_format: ResponseFormat | None
    tools: list[dict[str, Any]] | None
    tool_choice: Any


class Delta(TypedDict, total=False):
    """A streamed delta of a choice.

    ``role`` is only present on the first chunk of a choice; the terminal
    chunk carries an empty delta.
    """
    role: str | None
    content: str | None
    tool_calls: list[ToolCall] | None


class Choice(TypedDict, total=False):
    """A choice in a chat completion response.

    Attributes:
        index: Index of the provider candidate this choice came from.
        delta: The incremental content for streaming responses.
        message: The complete message for non-streaming responses.
        finish_reason: "stop", "length", "content_filter", a provider value
            passed through unchanged, or None while streaming.
        logprobs: Always None.
    """
    index: int
    delta: Delta | None
    message: ChatMessage | None
    finish_reason: str | None
    logprobs: dict[str, Any] | None


class Usage(TypedDict, total=False):
    prompt_tokens: int | None
    completion_tokens: int | None
    total_tokens: int | None


class ChatCompletionChunk(TypedDict, total=False):
    """A streamed chunk of a chat completion response.

    Attributes:
        id: Completion id, shared by every chunk of one stream.
        object: "chat.completion.chunk".
        created: Unix timestamp of when the chunk was created.
        model: Model that generated the response.
        choices: Exactly one choice per chunk.
        usage: Present only when the client asked for include_usage;
            None on intermediate chunks.
    """
    id: str
    object: str
    created: int
    model: str
    choices: list[Choice]
    usage: Usage | None


class ChatCompletionResponse(TypedDict, total=False):
    """A complete (non-streaming) chat completion response."""
    id: str
    object: str
    created: int
    model: str
    choices: list[Choice]
    usage: Usage | None
