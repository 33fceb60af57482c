"""Authentication module for gembridge."""

from .api_key import extract_api_key

__all__ = ["extract_api_key"]
