#!/usr/bin/env python
"""
Pydantic models for mixtape request payloads and service results.

Field names follow the public JSON contract (``photoUrl``, ``preview_url``),
so clients written against the original API keep working.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class SongPayload(BaseModel):
    """One song as submitted by the client; stored verbatim, never looked up."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    artist: str = Field(min_length=1, max_length=255)
    preview_url: Optional[str] = Field(default=None, max_length=500)
    artwork_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("preview_url", "artwork_url", mode="before")
    @classmethod
    def _optional_urls(cls, value: Any) -> Any:
        return _blank_to_none(value)


class MixtapePayload(BaseModel):
    """Body of a create or update request."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")
    songs: List[SongPayload] = Field(min_length=1)

    @field_validator("description", "photo_url", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        return _blank_to_none(value)


class SavedMixtape(BaseModel):
    """Outcome of a create or update: the row id and the cover actually stored."""

    id: int
    cover: Optional[str] = None


__all__ = ["SongPayload", "MixtapePayload", "SavedMixtape"]
