"""Cover image hosting (upload gate + Cloudinary store)."""

from .store import (
    AssetRejected,
    AssetStore,
    AssetStoreFailure,
    AssetUpload,
    CloudinaryAssetStore,
    check_upload,
)

__all__ = [
    "AssetRejected",
    "AssetStore",
    "AssetStoreFailure",
    "AssetUpload",
    "CloudinaryAssetStore",
    "check_upload",
]
