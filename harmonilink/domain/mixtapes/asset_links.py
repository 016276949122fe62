from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlparse, urlunparse

from .errors import InvalidPhotoReference


logger = logging.getLogger(__name__)


class AssetLinkValidator:
    """Accept only cover URLs that point at our own hosted upload folder."""

    def __init__(self, host: str, folder: str, cloud_name: Optional[str] = None):
        self.host = host.strip().lower()
        self.folder = folder.strip().strip("/")
        self.cloud_name = (cloud_name or "").strip().strip("/") or None

    def validate(self, url: Optional[str]) -> Optional[str]:
        """Return the HTTPS form of ``url``, ``None`` for no cover, or raise."""
        if url is None:
            return None
        if not isinstance(url, str):
            raise InvalidPhotoReference(repr(url))
        candidate = url.strip()
        if not candidate:
            return None

        try:
            parsed = urlparse(candidate)
            port = parsed.port
        except ValueError:
            raise InvalidPhotoReference(candidate) from None

        if parsed.scheme.lower() not in ("http", "https"):
            raise InvalidPhotoReference(candidate)
        # The asset host serves on default ports only
        if port is not None:
            logger.info("Rejected cover URL with explicit port %s", port)
            raise InvalidPhotoReference(candidate)
        if (parsed.hostname or "") != self.host or parsed.username or parsed.password:
            logger.info("Rejected cover URL on untrusted host %r", parsed.hostname)
            raise InvalidPhotoReference(candidate)

        # Folder must be whole path segments, not a substring of a file name
        if f"/{self.folder}/" not in parsed.path:
            logger.info("Rejected cover URL outside upload folder: %s", parsed.path)
            raise InvalidPhotoReference(candidate)
        if self.cloud_name and not parsed.path.startswith(f"/{self.cloud_name}/"):
            raise InvalidPhotoReference(candidate)

        if parsed.scheme.lower() == "https":
            return candidate
        return urlunparse(parsed._replace(scheme="https"))


__all__ = ["AssetLinkValidator"]
