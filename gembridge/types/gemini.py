"""Types for the provider dialect (Gemini generateContent format)."""

from typing import Any
from typing_extensions import TypedDict


class InlineData(TypedDict):
    mimeType: str
    data: str


class FunctionCallPart(TypedDict, total=False):
    id: str | None
    name: str
    args: dict[str, Any] | str | None


class Part(TypedDict, total=False):
    """One part of a content turn: text, inline media or a function call."""
    text: str
    inlineData: InlineData
    functionCall: FunctionCallPart


class Content(TypedDict, total=False):
    """A content turn.

    Attributes:
        role: "user" or "model". Absent on the system instruction.
        parts: Ordered parts of the turn.
    """
    role: str
    parts: list[Part]


class SafetySetting(TypedDict):
    category: str
    threshold: str


class GenerationConfig(TypedDict, total=False):
    stopSequences: str | list[str]
    candidateCount: int
    maxOutputTokens: int
    temperature: float
    topP: float
    topK: int
    frequencyPenalty: float
    presencePenalty: float
    responseMimeType: str
    responseSchema: dict[str, Any]


class GenerateContentRequest(TypedDict, total=False):
    system_instruction: Content
    contents: list[Content]
    safetySettings: list[SafetySetting]
    generationConfig: GenerationConfig
    tools: list[dict[str, Any]]
    tool_choice: Any


class UsageMetadata(TypedDict, total=False):
    promptTokenCount: int
    candidatesTokenCount: int
    totalTokenCount: int


class Candidate(TypedDict, total=False):
    """One generated alternative.

    Attributes:
        index: Candidate index; missing means 0.
        content: Generated content (role "model").
        finishReason: Provider vocabulary ("STOP", "MAX_TOKENS", ...).
        toolCalls: Candidate-level tool calls ({id, function: {name, args}}).
    """
    index: int
    content: Content
    finishReason: str
    toolCalls: list[dict[str, Any]]


class GenerateContentResponse(TypedDict, total=False):
    """A full response document, or one event of a streamed response."""
    candidates: list[Candidate]
    usageMetadata: UsageMetadata
    promptFeedback: dict[str, Any]
