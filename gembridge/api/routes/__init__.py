"""API routes for the bridge."""

from .chat import chat_completions
from .embeddings import embeddings
from .models import list_models

__all__ = [
    "chat_completions",
    "embeddings",
    "list_models",
]
