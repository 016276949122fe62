"""Mixtape aggregate: link validation, persistence and use cases."""

from .asset_links import AssetLinkValidator
from .errors import (
    InvalidPhotoReference,
    MixtapeError,
    MixtapeNotFound,
    StoreFailure,
    ValidationError,
)
from .repository import MixtapeRepository
from .service import MixtapeService

__all__ = [
    "AssetLinkValidator",
    "MixtapeRepository",
    "MixtapeService",
    "MixtapeError",
    "ValidationError",
    "InvalidPhotoReference",
    "MixtapeNotFound",
    "StoreFailure",
]
