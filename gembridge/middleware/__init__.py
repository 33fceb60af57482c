"""Middleware modules for the bridge."""

from .errors import error_response, register_error_handlers

__all__ = [
    "error_response",
    "register_error_handlers",
]
