"""Pytest configuration, fixtures and helpers for testing."""

from __future__ import annotations

import json
from typing import Any, Callable, Union

import httpx
import pytest

from gembridge.config_loader import BridgeSettings

UPSTREAM_BASE = "http://gemini.test"

Responder = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


# =============================================================================
# Fake Gemini upstream
# =============================================================================


class FakeGemini:
    """Records outbound requests and answers them from registered routes.

    Routes are matched on (method, path suffix), so tests can register
    ":generateContent" or "/models" without spelling out the API version.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: list[tuple[str, str, Responder]] = []

    def route(self, method: str, path_suffix: str, responder: Responder) -> None:
        self._routes.append((method.upper(), path_suffix, responder))

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for method, suffix, responder in self._routes:
            if request.method == method and request.url.path.endswith(suffix):
                if callable(responder):
                    return responder(request)
                return responder
        return httpx.Response(404, json={"error": {"message": "no fake route"}})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


def sse_body(*events: Any, terminator: str = "\r\n\r\n") -> bytes:
    """Encode provider events the way streamGenerateContent?alt=sse does."""
    return "".join(
        f"data: {json.dumps(event)}{terminator}" for event in events
    ).encode("utf-8")


def parse_frames(raw: Union[bytes, str, list]) -> list[Any]:
    """Split client frames into parsed chunks; [DONE] stays a string."""
    if isinstance(raw, list):
        raw = "".join(f.decode("utf-8") if isinstance(f, bytes) else f for f in raw)
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    frames: list[Any] = []
    for block in raw.split("\n\n"):
        if not block:
            continue
        assert block.startswith("data: "), block
        data = block[len("data: "):]
        frames.append(data if data == "[DONE]" else json.loads(data))
    return frames


def text_event(text: str, index: int | None = 0, finish_reason: str | None = None, **extra: Any) -> dict:
    candidate: dict[str, Any] = {"content": {"role": "model", "parts": [{"text": text}]}}
    if index is not None:
        candidate["index"] = index
    if finish_reason:
        candidate["finishReason"] = finish_reason
    return {"candidates": [candidate], **extra}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings() -> BridgeSettings:
    return BridgeSettings(base_url=UPSTREAM_BASE, log_level="DEBUG")


@pytest.fixture
def fake_gemini() -> FakeGemini:
    return FakeGemini()
