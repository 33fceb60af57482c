"""Request body parsing shared by the endpoints."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import Request

from ..core.exceptions import InvalidRequestError

logger = logging.getLogger("gembridge")


async def read_json_object(request: Request) -> dict[str, Any]:
    """Read the request body as a JSON object.

    Raises:
        InvalidRequestError: If the body is not valid JSON or not an object.
    """
    body = await request.body()
    try:
        payload = json.loads(body or b"{}")
    except json.JSONDecodeError as exc:
        logger.error(f"Invalid JSON payload: {exc}")
        raise InvalidRequestError("Invalid JSON payload") from exc
    if not isinstance(payload, dict):
        logger.error("Payload must be a JSON object")
        raise InvalidRequestError("Request body must be a JSON object")
    return payload
