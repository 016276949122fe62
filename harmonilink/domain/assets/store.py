#!/usr/bin/env python
"""
Cover image hosting.

Uploads go through a size/type gate and then to Cloudinary through its SDK.
Only the resulting ``secure_url`` is ever handed back to clients, which is
what the mixtape link validator later insists on.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Callable, Dict, Optional

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from pydantic import BaseModel

from harmonilink.settings import AssetSettings


logger = logging.getLogger(__name__)


class AssetRejected(Exception):
    """The upload itself is unacceptable (missing, too large, wrong type)."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class AssetStoreFailure(Exception):
    """The hosting service could not be reached or refused our credentials."""


class AssetUpload(BaseModel):
    url: str
    public_id: str
    format: Optional[str] = None
    bytes: Optional[int] = None


def _human_size(num_bytes: int) -> str:
    if num_bytes % (1024 * 1024) == 0:
        return f"{num_bytes // (1024 * 1024)}MB"
    if num_bytes % 1024 == 0:
        return f"{num_bytes // 1024}KB"
    return f"{num_bytes} bytes"


def check_upload(content_type: Optional[str], data: Optional[bytes], settings: AssetSettings) -> None:
    """Raise AssetRejected unless ``data`` is a non-empty image within the size limit."""
    if not data:
        raise AssetRejected("No file uploaded")
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime not in settings.allowed_mime_types:
        raise AssetRejected("Only image files (jpeg, jpg, png, gif, webp) are allowed")
    if len(data) > settings.max_bytes:
        raise AssetRejected(f"File too large. Max size is {_human_size(settings.max_bytes)}")


class AssetStore:
    """Interface for hosting cover images."""

    def upload(self, filename: str, content_type: str, data: bytes) -> AssetUpload:  # pragma: no cover - interface
        raise NotImplementedError


class CloudinaryAssetStore(AssetStore):
    """Signed uploads through the Cloudinary SDK into the configured folder."""

    ALLOWED_FORMATS = ["jpeg", "jpg", "png", "gif", "webp"]
    TRANSFORMATION = [{"width": 1000, "height": 1000, "crop": "limit"}]

    def __init__(self, settings: AssetSettings, uploader: Optional[Callable[..., Dict[str, Any]]] = None):
        self.settings = settings
        self.uploader = uploader or cloudinary.uploader.upload

    def upload(self, filename: str, content_type: str, data: bytes) -> AssetUpload:
        check_upload(content_type, data, self.settings)
        if not self.settings.upload_enabled:
            raise AssetStoreFailure("Cloudinary credentials are not configured")

        try:
            result = self.uploader(
                io.BytesIO(data),
                filename=filename or "upload",
                resource_type="image",
                folder=self.settings.folder,
                allowed_formats=self.ALLOWED_FORMATS,
                transformation=self.TRANSFORMATION,
                cloud_name=self.settings.cloud_name,
                api_key=self.settings.api_key,
                api_secret=self.settings.api_secret,
                timeout=self.settings.upload_timeout_seconds,
                return_error=True,
            )
        except CloudinaryError as e:
            logger.error("Failed to upload %s to Cloudinary: %s", filename, e)
            raise AssetStoreFailure("Upload failed") from e

        error = result.get("error")
        if error:
            status = error.get("http_code")
            # Cloudinary answers 400 for content it refuses (corrupt image, bad format)
            if status == 400:
                raise AssetRejected(error.get("message") or "Image rejected by hosting service")
            logger.error("Cloudinary upload returned HTTP %s: %s", status, error.get("message"))
            raise AssetStoreFailure(f"Hosting service returned HTTP {status}")

        secure_url = result.get("secure_url")
        public_id = result.get("public_id")
        if not secure_url or not public_id:
            logger.error("Cloudinary upload response missing secure_url/public_id: %s", result)
            raise AssetStoreFailure("Hosting service returned an incomplete response")

        logger.info("Uploaded cover image %s (%s bytes)", public_id, result.get("bytes"))
        return AssetUpload(
            url=secure_url,
            public_id=public_id,
            format=result.get("format"),
            bytes=result.get("bytes"),
        )


__all__ = [
    "AssetRejected",
    "AssetStore",
    "AssetStoreFailure",
    "AssetUpload",
    "CloudinaryAssetStore",
    "check_upload",
]
