"""Error kinds raised by the bridge and their wire envelope."""

from typing import Any, Optional


class BridgeError(Exception):
    """Base exception for bridge errors.

    Every error kind carries the HTTP status it is reported with.
    """

    status: int = 500

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class ConfigurationError(BridgeError):
    """Raised when there's an issue with the configuration."""
    pass


class InvalidRequestError(BridgeError):
    """Raised when an incoming request body is unusable."""

    status = 400


class UnsupportedResponseFormat(BridgeError):
    """Raised for a response_format.type the provider cannot express."""

    status = 400

    def __init__(self, format_type: Any) -> None:
        super().__init__(f"Unsupported response_format.type: {format_type!r}")
        self.format_type = format_type


class UnknownContentPartType(BridgeError):
    """Raised for a message content part with an unrecognized type tag."""

    status = 400

    def __init__(self, part_type: Any) -> None:
        super().__init__(f'Unknown "content" item type: "{part_type}"')
        self.part_type = part_type


class NotFound(BridgeError):
    status = 404


class MethodNotAllowed(BridgeError):
    status = 405


class MalformedMediaReference(BridgeError):
    """Raised when a media reference is neither an HTTP(S) URL nor a data URI."""

    def __init__(self, reference: str) -> None:
        preview = reference if len(reference) <= 64 else reference[:64] + "..."
        super().__init__(f"Invalid media reference: {preview}")
        self.reference = reference


class UpstreamFetchError(BridgeError):
    """Raised when fetching a remote media reference fails."""

    def __init__(self, url: str, status: int, reason: str = "") -> None:
        detail = f"{status} {reason}".strip()
        super().__init__(f"Error fetching media: {detail} ({url})", status=status)
        self.url = url


class UpstreamRequestError(BridgeError):
    """Raised when the provider call itself fails."""

    def __init__(self, message: str, status: int = 502) -> None:
        super().__init__(message, status=status)


def error_envelope(exc: BaseException) -> tuple[int, dict[str, Any]]:
    """Convert any exception into (status, wire error envelope).

    Bridge errors keep their own status; everything else is reported as 500.
    """
    status = exc.status if isinstance(exc, BridgeError) else 500
    message = exc.message if isinstance(exc, BridgeError) else str(exc)
    return status, {
        "error": {
            "message": message,
            "type": exc.__class__.__name__,
            "status": status,
        }
    }
