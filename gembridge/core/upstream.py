"""HTTP calls to the Gemini API."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Mapping, Optional

import httpx

from .exceptions import UpstreamRequestError

if TYPE_CHECKING:
    from ..config_loader import BridgeSettings

logger = logging.getLogger("gembridge")

SENSITIVE_HEADERS = {"x-goog-api-key", "authorization"}


def format_httpx_error(exc: httpx.HTTPError, timeout: float, url: Optional[str] = None) -> str:
    """Produce a detailed, user-facing description of an httpx error."""
    parts = [exc.__class__.__name__]
    message = str(exc).strip()
    if message:
        parts.append(message)

    try:
        request = exc.request
    except RuntimeError:
        request = None
    if request is not None:
        parts.append(f"request={request.method} {request.url}")
    elif url:
        parts.append(f"url={url}")

    if isinstance(exc, httpx.TimeoutException):
        parts.append(f"timeout={timeout}s")

    return "; ".join(parts)


def _safe_headers_for_log(headers: Mapping[str, str]) -> dict[str, str]:
    return {
        key: ("***" if key.lower() in SENSITIVE_HEADERS else value)
        for key, value in headers.items()
    }


class UpstreamStream:
    """An open streaming response; owns the httpx response and client."""

    def __init__(self, response: httpx.Response, client: httpx.AsyncClient, url: str) -> None:
        self.response = response
        self._client = client
        self.url = url
        self.closed = False

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        async for chunk in self.response.aiter_bytes():
            if chunk:
                yield chunk

    async def aclose(self) -> None:
        if self.closed:
            return
        self.closed = True
        logger.debug(f"Closing stream for {self.url}")
        await self.response.aclose()
        await self._client.aclose()


class GeminiClient:
    """Thin async client for the Gemini REST API.

    Args:
        settings: Upstream endpoint, client header and timeout.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        settings: BridgeSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self._transport = transport

    def build_url(self, path: str, query: str = "") -> str:
        url = f"{self.settings.api_base}/{path.lstrip('/')}"
        if query:
            url = f"{url}?{query}"
        return url

    def build_headers(self, api_key: Optional[str], json_body: bool = False) -> dict[str, str]:
        headers = {"x-goog-api-client": self.settings.api_client}
        key = api_key or self.settings.api_key
        if key:
            headers["x-goog-api-key"] = key
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _client(self, timeout: httpx.Timeout | float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport, follow_redirects=True)

    async def _request(
        self,
        method: str,
        path: str,
        api_key: Optional[str],
        what: str,
        body: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        url = self.build_url(path)
        headers = self.build_headers(api_key, json_body=body is not None)
        content = json.dumps(body, ensure_ascii=False).encode("utf-8") if body is not None else None
        logger.info(f"Upstream {method} {url}")
        try:
            async with self._client(self.settings.timeout_seconds) as client:
                resp = await client.request(method, url, headers=headers, content=content)
        except httpx.HTTPError as exc:
            detail = format_httpx_error(exc, self.settings.timeout_seconds, url)
            logger.error(f"Upstream request to {url} failed: {detail}")
            raise UpstreamRequestError(f"Failed to fetch {what}: {detail}") from exc

        if not resp.is_success:
            raise self._status_error(resp, what, resp.text)
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamRequestError(
                f"Failed to fetch {what}: invalid JSON from upstream", status=502
            ) from exc

    @staticmethod
    def _status_error(resp: httpx.Response, what: str, body: str) -> UpstreamRequestError:
        logger.error(
            "Gemini API error: %s %s %s", resp.status_code, resp.reason_phrase, body[:2000]
        )
        return UpstreamRequestError(
            f"Failed to fetch {what}: {resp.status_code} {resp.reason_phrase} {body}".rstrip(),
            status=resp.status_code,
        )

    async def generate_content(
        self, model: str, body: Mapping[str, Any], api_key: Optional[str]
    ) -> dict[str, Any]:
        return await self._request(
            "POST", f"models/{model}:generateContent", api_key, "completions", body
        )

    async def stream_generate_content(
        self, model: str, body: Mapping[str, Any], api_key: Optional[str]
    ) -> UpstreamStream:
        """Open a streaming generateContent call with SSE framing.

        The caller owns the returned stream and must aclose() it.
        """
        url = self.build_url(f"models/{model}:streamGenerateContent", "alt=sse")
        headers = self.build_headers(api_key, json_body=True)
        timeout = self.settings.timeout_seconds
        stream_timeout = httpx.Timeout(connect=timeout, read=None, write=timeout, pool=timeout)
        client = self._client(stream_timeout)
        try:
            request = client.build_request(
                "POST", url, headers=headers, content=json.dumps(body, ensure_ascii=False).encode("utf-8")
            )
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Request headers: %s", _safe_headers_for_log(request.headers))
            resp = await client.send(request, stream=True)
        except httpx.HTTPError as exc:
            await client.aclose()
            detail = format_httpx_error(exc, timeout, url)
            logger.error(f"Failed to send streaming request to {url}: {detail}")
            raise UpstreamRequestError(f"Failed to fetch completions: {detail}") from exc

        if not resp.is_success:
            data = await resp.aread()
            await resp.aclose()
            await client.aclose()
            raise self._status_error(resp, "completions", data.decode("utf-8", errors="replace"))

        logger.info(f"Streaming request to {url} successful, status {resp.status_code}")
        return UpstreamStream(resp, client, url)

    async def list_models(self, api_key: Optional[str]) -> list[dict[str, Any]]:
        data = await self._request("GET", "models", api_key, "models")
        return list(data.get("models") or [])

    async def batch_embed_contents(
        self, model: str, requests: list[dict[str, Any]], api_key: Optional[str]
    ) -> list[dict[str, Any]]:
        data = await self._request(
            "POST", f"{model}:batchEmbedContents", api_key, "embeddings", {"requests": requests}
        )
        return list(data.get("embeddings") or [])
