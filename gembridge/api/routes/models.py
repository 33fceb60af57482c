"""Models listing endpoint - OpenAI compatible."""

import logging

from fastapi import Request

from ...auth import extract_api_key
from ...core.models import strip_namespace
from ...core.registry import get_client

logger = logging.getLogger("gembridge")


async def list_models(request: Request) -> dict:
    """List upstream models in OpenAI API format.

    GET /v1/models

    Returns:
        A dictionary containing the list of available models.
    """
    logger.info("Received models list request")

    models = await get_client().list_models(extract_api_key(request))
    return {
        "object": "list",
        "data": [
            {
                "id": strip_namespace(model.get("name", "")),
                "object": "model",
                "created": 0,
                "owned_by": "",
            }
            for model in models
        ],
    }
