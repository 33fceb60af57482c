"""Caller credential extraction."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request

logger = logging.getLogger("gembridge")


def extract_api_key(request: Request) -> Optional[str]:
    """Return the Gemini API key carried by ``Authorization: Bearer <key>``.

    Only the token after the first space is used; a missing header gives
    None, in which case the upstream client falls back to the configured key.
    """
    auth = request.headers.get("authorization")
    if not auth:
        return None
    _, sep, token = auth.partition(" ")
    if not sep:
        logger.debug("Authorization header without a scheme, ignoring")
        return None
    return token.strip() or None
