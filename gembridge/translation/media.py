"""Resolve image references into inline base64 payloads.

Two reference forms are accepted:
    - absolute http(s) URLs, fetched with httpx
    - data URIs: ``data:<mime>[;base64],<payload>``

Everything else is a MalformedMediaReference.
"""

from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote_to_bytes

import httpx

from ..core.exceptions import MalformedMediaReference, UpstreamFetchError
from ..types.gemini import Part

logger = logging.getLogger("gembridge")

DATA_URI_RE = re.compile(r"^data:(?P<mime_type>[^,]*?)(?P<base64>;base64)?,(?P<data>.*)$", re.DOTALL)

DEFAULT_FETCH_TIMEOUT = 30.0


@dataclass(frozen=True)
class ResolvedMedia:
    mime_type: str
    data: str

    def to_part(self) -> Part:
        return {"inlineData": {"mimeType": self.mime_type, "data": self.data}}


def parse_data_uri(reference: str) -> ResolvedMedia:
    """Parse a data URI into its MIME type and base64 payload.

    A payload without the ``;base64`` marker is percent-decoded and
    re-encoded as base64 so the decoded bytes match the original.
    """
    match = DATA_URI_RE.match(reference)
    if not match:
        raise MalformedMediaReference(reference)
    mime_type = match.group("mime_type")
    payload = match.group("data")
    if match.group("base64"):
        return ResolvedMedia(mime_type, payload)
    raw = unquote_to_bytes(payload)
    return ResolvedMedia(mime_type, base64.b64encode(raw).decode("ascii"))


class MediaResolver:
    """Turns a media reference into a ResolvedMedia.

    Instances hold no per-request state, so one resolver can serve
    concurrent fetches.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self._transport = transport

    async def resolve(self, reference: str) -> ResolvedMedia:
        if reference.startswith(("http://", "https://")):
            return await self._fetch(reference)
        if reference.startswith("data:"):
            return parse_data_uri(reference)
        raise MalformedMediaReference(reference)

    async def resolve_part(self, reference: str) -> Part:
        return (await self.resolve(reference)).to_part()

    async def _fetch(self, url: str) -> ResolvedMedia:
        logger.debug("Fetching media from %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport, follow_redirects=True
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            logger.warning(f"Media fetch failed for {url}: {exc.__class__.__name__}: {exc}")
            raise UpstreamFetchError(url, 502, exc.__class__.__name__) from exc

        if not response.is_success:
            logger.warning(f"Media fetch for {url} returned status {response.status_code}")
            raise UpstreamFetchError(url, response.status_code, response.reason_phrase)

        content_type = response.headers.get("content-type", "application/octet-stream")
        mime_type = content_type.split(";", 1)[0].strip()
        data = base64.b64encode(response.content).decode("ascii")
        return ResolvedMedia(mime_type, data)
