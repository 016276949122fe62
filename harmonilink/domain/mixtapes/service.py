from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PayloadValidationError

from harmonilink.database.db_manager import Mixtape, SongEntry
from harmonilink.models.dto import MixtapePayload, SavedMixtape
from harmonilink.observability.metrics import record_mixtape_operation

from .asset_links import AssetLinkValidator
from .errors import MixtapeError, MixtapeNotFound, ValidationError
from .repository import MixtapeRepository


logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Mixtape name and at least one song are required."
INVALID_SONG_MESSAGE = "Each song needs a name and an artist."
INVALID_FIELDS_MESSAGE = "Invalid value for: {fields}."


def _parse_payload(payload: Any) -> MixtapePayload:
    """Validate the request body before anything reaches the database."""
    if not isinstance(payload, dict):
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)

    songs = payload.get("songs")
    name = payload.get("name")
    if not isinstance(name, str) or not name.strip() or not isinstance(songs, list) or not songs:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)

    try:
        return MixtapePayload.model_validate(payload)
    except PayloadValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        fields = {".".join(str(part) for part in err["loc"]): err["msg"] for err in errors}
        raise ValidationError(_message_for(fields), fields) from None


def _message_for(fields: Dict[str, str]) -> str:
    top_level = sorted({key.split(".", 1)[0] for key in fields})
    if "songs" in top_level:
        return INVALID_SONG_MESSAGE
    if "name" in top_level:
        return REQUIRED_FIELDS_MESSAGE
    return INVALID_FIELDS_MESSAGE.format(fields=", ".join(top_level))


def _format_song(song: SongEntry) -> Dict[str, Any]:
    return {
        "name": song.song_name,
        "artist": song.artist_name,
        "preview_url": song.preview_url,
        # Legacy clients read the preview from ``url``
        "url": song.preview_url,
        "artwork_url": song.artwork_url,
    }


def _format_mixtape(mixtape: Mixtape, songs: List[SongEntry]) -> Dict[str, Any]:
    return {
        "id": mixtape.id,
        "name": mixtape.name,
        "description": mixtape.description,
        "cover": mixtape.photo_url,
        "source": mixtape.source,
        "artwork_url": mixtape.artwork_url,
        "songs": [_format_song(song) for song in songs],
    }


class MixtapeService:
    """Owner-scoped mixtape use cases on top of the repository."""

    def __init__(
        self,
        repository: MixtapeRepository,
        link_validator: AssetLinkValidator,
        *,
        default_source: str = "sidebar",
    ):
        self.repository = repository
        self.link_validator = link_validator
        self.default_source = default_source

    def create_mixtape(self, owner_id: int, payload: Any) -> SavedMixtape:
        try:
            data = _parse_payload(payload)
            cover = self.link_validator.validate(data.photo_url)
            mixtape_id = self.repository.create(
                owner_id,
                data.name,
                data.description,
                cover,
                self.default_source,
                data.songs,
            )
        except MixtapeError as exc:
            record_mixtape_operation("create", exc)
            raise
        record_mixtape_operation("create")
        return SavedMixtape(id=mixtape_id, cover=cover)

    def list_mixtapes(self, owner_id: int) -> List[Dict[str, Any]]:
        try:
            rows = self.repository.list_for_owner(owner_id)
        except MixtapeError as exc:
            record_mixtape_operation("list", exc)
            raise
        record_mixtape_operation("list")
        return [_format_mixtape(mixtape, songs) for mixtape, songs in rows]

    def update_mixtape(self, owner_id: int, mixtape_id: int, payload: Any) -> SavedMixtape:
        try:
            data = _parse_payload(payload)
            # None keeps the stored cover; replace reads it inside its own transaction
            cover = self.repository.replace(
                mixtape_id,
                owner_id,
                data.name,
                data.description,
                self.link_validator.validate(data.photo_url),
                data.songs,
            )
        except MixtapeError as exc:
            record_mixtape_operation("update", exc)
            raise
        record_mixtape_operation("update")
        return SavedMixtape(id=mixtape_id, cover=cover)

    def delete_mixtape(self, owner_id: int, mixtape_id: int) -> None:
        try:
            deleted = self.repository.delete(mixtape_id, owner_id)
            if not deleted:
                logger.info("Delete of mixtape %s by user %s matched nothing", mixtape_id, owner_id)
                raise MixtapeNotFound(mixtape_id)
        except MixtapeError as exc:
            record_mixtape_operation("delete", exc)
            raise
        record_mixtape_operation("delete")


__all__ = ["MixtapeService", "REQUIRED_FIELDS_MESSAGE", "INVALID_SONG_MESSAGE", "INVALID_FIELDS_MESSAGE"]
