"""OpenAI-compatible embeddings endpoint."""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from ...auth import extract_api_key
from ...core.exceptions import InvalidRequestError
from ...core.models import resolve_embeddings_model
from ...core.registry import get_client
from ..request_body import read_json_object

logger = logging.getLogger("gembridge")


async def embeddings(request: Request) -> JSONResponse:
    """Embeddings endpoint - OpenAI compatible.

    POST /v1/embeddings

    Request body:
        - model: string (required); names outside the "models/" namespace
          are replaced by the default embeddings model
        - input: string or array of strings
        - dimensions: integer (optional) - output dimensionality

    Response:
        {
            "object": "list",
            "data": [{"object": "embedding", "index": 0, "embedding": [...]}],
            "model": "model-name"
        }
    """
    payload = await read_json_object(request)
    client = get_client()

    requested_model = payload.get("model")
    if not isinstance(requested_model, str):
        raise InvalidRequestError("model is not specified")

    inputs = payload.get("input")
    if not isinstance(inputs, list):
        inputs = [inputs]

    model_name, upstream_model = resolve_embeddings_model(
        requested_model, client.settings.default_embeddings_model
    )
    logger.info(f"Processing embeddings request for model {upstream_model} ({len(inputs)} input(s))")

    dimensions = payload.get("dimensions")
    requests: list[dict[str, Any]] = []
    for text in inputs:
        entry: dict[str, Any] = {"model": upstream_model, "content": {"parts": [{"text": text}]}}
        if dimensions is not None:
            entry["outputDimensionality"] = dimensions
        requests.append(entry)

    results = await client.batch_embed_contents(upstream_model, requests, extract_api_key(request))
    return JSONResponse({
        "object": "list",
        "data": [
            {"object": "embedding", "index": index, "embedding": result.get("values", [])}
            for index, result in enumerate(results)
        ],
        "model": model_name,
    })
