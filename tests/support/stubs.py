"""Shared test doubles for the asset host."""

from typing import Any, Dict, List, Optional

from harmonilink.domain.assets import AssetRejected, AssetStoreFailure, AssetUpload, check_upload
from harmonilink.settings import AssetSettings


def hosted_cover_url(name: str = "cover.png", scheme: str = "https", cloud: str = "demo-cloud") -> str:
    return f"{scheme}://res.cloudinary.com/{cloud}/image/upload/v1700000000/harmolinku_uploads/{name}"


class UploaderStub:
    """Stands in for ``cloudinary.uploader.upload``: records calls and replays a result or error."""

    def __init__(self, result: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.result = result if result is not None else {}
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, file, **options):
        self.calls.append({"data": file.read(), **options})
        if self.error:
            raise self.error
        return self.result


class AssetStoreStub:
    """In-memory AssetStore used by route tests."""

    def __init__(self, settings: Optional[AssetSettings] = None, error: Optional[Exception] = None):
        self.settings = settings or AssetSettings(cloud_name="demo-cloud", api_key="k", api_secret="s")
        self.error = error
        self.uploads: List[Dict[str, Any]] = []

    def upload(self, filename: str, content_type: str, data: bytes) -> AssetUpload:
        check_upload(content_type, data, self.settings)
        if self.error:
            raise self.error
        self.uploads.append({"filename": filename, "content_type": content_type, "size": len(data)})
        return AssetUpload(
            url=hosted_cover_url(filename),
            public_id=f"harmolinku_uploads/{filename.rsplit('.', 1)[0]}",
        )


__all__ = [
    "AssetRejected",
    "AssetStoreFailure",
    "AssetStoreStub",
    "UploaderStub",
    "hosted_cover_url",
]
