"""Model name resolution between client requests and Gemini."""

from __future__ import annotations

from typing import Any, Sequence

MODEL_NAMESPACE = "models/"


def resolve_chat_model(
    requested: Any,
    default_model: str,
    prefixes: Sequence[str],
) -> str:
    """Pick the Gemini model for a chat request.

    "models/<name>" is unwrapped, names with a known family prefix pass
    through, everything else (including a missing model) gets the default.
    """
    if not isinstance(requested, str):
        return default_model
    if requested.startswith(MODEL_NAMESPACE):
        return requested[len(MODEL_NAMESPACE):]
    if requested.startswith(tuple(prefixes)):
        return requested
    return default_model


def resolve_embeddings_model(requested: str, default_model: str) -> tuple[str, str]:
    """Return (reported model name, namespaced upstream model path)."""
    if requested.startswith(MODEL_NAMESPACE):
        return requested, requested
    return default_model, MODEL_NAMESPACE + default_model


def strip_namespace(name: str) -> str:
    return name.replace(MODEL_NAMESPACE, "", 1)
