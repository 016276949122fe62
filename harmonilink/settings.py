#!/usr/bin/env python
"""
Typed settings for the cover-image pipeline.

Merges defaults from config.Config with the running app's configuration so
the upload gate and the link validator agree on host, folder and limits.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import Config


DEFAULT_ALLOWED_MIME_TYPES = [
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
]


class AssetSettings(BaseModel):
    """Where cover images live and what may be uploaded there."""

    model_config = ConfigDict(extra="ignore")

    host: str = "res.cloudinary.com"
    folder: str = "harmolinku_uploads"
    cloud_name: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None

    max_bytes: int = Field(default=2 * 1024 * 1024, gt=0)
    allowed_mime_types: List[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_MIME_TYPES))
    upload_timeout_seconds: int = Field(default=30, gt=0)

    @field_validator("host", mode="before")
    @classmethod
    def _normalize_host(cls, value: Any) -> str:
        cleaned = str(value or "").strip().lower()
        if not cleaned:
            raise ValueError("Asset host cannot be empty")
        return cleaned

    @field_validator("folder", mode="before")
    @classmethod
    def _normalize_folder(cls, value: Any) -> str:
        cleaned = str(value or "").strip().strip("/")
        if not cleaned:
            raise ValueError("Asset folder cannot be empty")
        return cleaned

    @field_validator("cloud_name", "api_key", "api_secret", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        stripped = str(value).strip()
        return stripped or None

    @property
    def upload_enabled(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)


def load_asset_settings(
    config: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> AssetSettings:
    """Build AssetSettings from an app config mapping (falls back to Config)."""

    def _pick(key: str) -> Any:
        if config is not None and key in config:
            return config[key]
        return getattr(Config, key, None)

    data: Dict[str, Any] = {
        "host": _pick("ASSET_HOST"),
        "folder": _pick("ASSET_FOLDER"),
        "cloud_name": _pick("CLOUDINARY_CLOUD_NAME"),
        "api_key": _pick("CLOUDINARY_API_KEY"),
        "api_secret": _pick("CLOUDINARY_API_SECRET"),
        "max_bytes": _pick("ASSET_MAX_BYTES"),
        "upload_timeout_seconds": _pick("ASSET_UPLOAD_TIMEOUT_SECONDS"),
    }
    data = {key: value for key, value in data.items() if value is not None}
    if overrides:
        data.update(overrides)
    return AssetSettings.model_validate(data)


__all__ = ["AssetSettings", "DEFAULT_ALLOWED_MIME_TYPES", "load_asset_settings"]
