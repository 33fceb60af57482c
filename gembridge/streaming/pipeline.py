"""Streaming pipeline: upstream bytes -> StreamFramer -> StreamDeltaTranslator."""

from __future__ import annotations

import logging
from typing import AsyncIterable, AsyncIterator

from .delta import StreamDeltaTranslator
from .framer import StreamFramer

logger = logging.getLogger("gembridge")


async def translate_stream(
    chunks: AsyncIterable[bytes | str],
    *,
    completion_id: str,
    model: str,
    include_usage: bool = False,
) -> AsyncIterator[bytes]:
    """Re-frame a provider SSE stream as client chunk frames.

    The upstream is only read when the consumer asks for the next frame, so
    a slow client stalls the upstream read instead of growing a queue.

    Yields:
        Encoded ``data: ...`` frames, ending with ``data: [DONE]``.
    """
    framer = StreamFramer()
    translator = StreamDeltaTranslator(completion_id, model, include_usage)

    async for chunk in chunks:
        for payload in framer.feed(chunk):
            for frame in translator.translate(payload):
                yield frame.encode("utf-8")

    for payload in framer.flush():
        for frame in translator.translate(payload):
            yield frame.encode("utf-8")
    for frame in translator.finish():
        yield frame.encode("utf-8")

    if framer.discarded_chars:
        logger.warning(
            "Stream %s finished with %d discarded chars of invalid framing",
            completion_id,
            framer.discarded_chars,
        )
