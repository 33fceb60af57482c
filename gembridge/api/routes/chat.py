"""OpenAI-compatible chat completions endpoint backed by Gemini."""

from __future__ import annotations

import logging
from contextlib import aclosing
from typing import Any, Mapping

from fastapi import Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from ...auth import extract_api_key
from ...core.constants import generate_completion_id
from ...core.models import resolve_chat_model
from ...core.registry import get_client, get_request_translator
from ...core.upstream import UpstreamStream
from ...streaming import translate_stream
from ...translation import ResponseTranslator
from ..request_body import read_json_object

logger = logging.getLogger("gembridge")


def _include_usage(payload: Mapping[str, Any]) -> bool:
    stream_options = payload.get("stream_options")
    if not isinstance(stream_options, Mapping):
        return False
    return bool(stream_options.get("include_usage"))


async def chat_completions(request: Request) -> Response:
    """POST /v1/chat/completions - translate, call Gemini, translate back."""
    payload = await read_json_object(request)
    api_key = extract_api_key(request)
    client = get_client()
    settings = client.settings

    model = resolve_chat_model(
        payload.get("model"), settings.default_model, settings.model_prefixes
    )
    is_stream = bool(payload.get("stream"))
    logger.info(f"Chat completion request: model={model}, stream={is_stream}")

    body = await get_request_translator().translate(payload)
    completion_id = generate_completion_id()

    if not is_stream:
        data = await client.generate_content(model, body, api_key)
        return JSONResponse(ResponseTranslator(model).translate(data, completion_id))

    upstream = await client.stream_generate_content(model, body, api_key)
    return StreamingResponse(
        _stream_frames(upstream, completion_id, model, _include_usage(payload)),
        media_type="text/event-stream",
    )


async def _stream_frames(
    upstream: UpstreamStream,
    completion_id: str,
    model: str,
    include_usage: bool,
):
    # Client disconnect cancels this generator; the finally aborts the upstream call
    try:
        async with aclosing(
            translate_stream(
                upstream.aiter_bytes(),
                completion_id=completion_id,
                model=model,
                include_usage=include_usage,
            )
        ) as frames:
            async for frame in frames:
                yield frame
    except Exception as exc:
        logger.error(f"Stream {completion_id} aborted: {exc.__class__.__name__}: {exc}")
        raise
    finally:
        await upstream.aclose()
