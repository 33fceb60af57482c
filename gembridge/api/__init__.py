"""API module for the bridge."""

from .routes import chat_completions, embeddings, list_models

__all__ = [
    "chat_completions",
    "embeddings",
    "list_models",
]
