"""Exception hierarchy shared by the catalog client and the preview widgets."""

from __future__ import annotations

__all__ = [
    "AssetClientError",
    "AuthenticationRequired",
    "DecodeFailure",
    "NetworkFailure",
    "NotFound",
    "ValidationFailure",
]


class AssetClientError(RuntimeError):
    """Base class for all errors raised by the asset catalog client."""

    default_message = "Unexpected catalog error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NetworkFailure(AssetClientError):
    """Raised when the catalog service cannot be reached or rejects a request."""

    default_message = "Network request failed"

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFound(NetworkFailure):
    """Raised when a token or asset id does not resolve to an asset."""

    default_message = "Asset not found"


class DecodeFailure(AssetClientError):
    """Raised when an asset payload cannot be turned into renderable geometry."""

    default_message = "Could not decode the asset payload"


class ValidationFailure(AssetClientError):
    """Raised before any request is issued when user input is incomplete."""

    default_message = "Invalid input"


class AuthenticationRequired(AssetClientError):
    """Raised when an operation needs a signed-in session."""

    default_message = "Please log in first"
