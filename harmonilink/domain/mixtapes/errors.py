"""Error taxonomy for mixtape operations.

The HTTP layer maps these onto status codes; nothing below it needs to know
about responses.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class MixtapeError(Exception):
    """Base class for failures raised by the mixtape domain."""


class ValidationError(MixtapeError):
    """Client-supplied data is missing or malformed. Never retried."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidPhotoReference(ValidationError):
    """Cover URL does not point at an asset uploaded through this service."""

    DEFAULT_MESSAGE = "Invalid photo URL. Please upload the image using the upload endpoint first."

    def __init__(self, url: Optional[str] = None, message: Optional[str] = None):
        super().__init__(message or self.DEFAULT_MESSAGE, {"photoUrl": url})
        self.url = url


class MixtapeNotFound(MixtapeError):
    """Mixtape is missing or owned by somebody else; the two are indistinguishable."""

    def __init__(self, mixtape_id: Any):
        super().__init__(f"Mixtape {mixtape_id} not found")
        self.mixtape_id = mixtape_id


class StoreFailure(MixtapeError):
    """The database rejected or lost a unit of work; it was rolled back."""

    def __init__(self, operation: str):
        super().__init__(f"Mixtape {operation} failed")
        self.operation = operation


__all__ = [
    "MixtapeError",
    "ValidationError",
    "InvalidPhotoReference",
    "MixtapeNotFound",
    "StoreFailure",
]
