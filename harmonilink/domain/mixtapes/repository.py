from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Protocol, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from harmonilink.database.db_manager import Mixtape, SongEntry

from .errors import MixtapeNotFound, StoreFailure


logger = logging.getLogger(__name__)


class SongLike(Protocol):
    name: str
    artist: str
    preview_url: Optional[str]
    artwork_url: Optional[str]


MixtapeWithSongs = Tuple[Mixtape, List[SongEntry]]

# Largest id the store can hold (signed 64-bit INTEGER)
MAX_STORE_ID = 2 ** 63 - 1


def _storable_id(value: int) -> bool:
    return 0 < value <= MAX_STORE_ID


class MixtapeRepository:
    """Persistence protocol for a mixtape and its ordered song rows.

    Every public operation is one unit of work: it commits when it returns
    and rolls back entirely when it raises. Database errors surface as
    ``StoreFailure``; nothing is retried here.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[Session]:
        session = self.session
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Mixtape %s rolled back: %s", operation, exc, exc_info=True)
            raise StoreFailure(operation) from exc
        except Exception:
            session.rollback()
            raise

    def _owned_query(self, mixtape_id: int, owner_id: int):
        return self.session.query(Mixtape).filter(
            Mixtape.id == mixtape_id,
            Mixtape.user_id == owner_id,
        )

    def _insert_songs(self, mixtape_id: int, songs: Iterable[SongLike]) -> int:
        count = 0
        for position, song in enumerate(songs):
            self.session.add(
                SongEntry(
                    mixtape_id=mixtape_id,
                    position=position,
                    song_name=song.name,
                    artist_name=song.artist,
                    preview_url=song.preview_url,
                    artwork_url=song.artwork_url,
                )
            )
            count += 1
        return count

    def create(
        self,
        owner_id: int,
        name: str,
        description: Optional[str],
        cover_url: Optional[str],
        source: str,
        songs: Iterable[SongLike],
    ) -> int:
        with self._atomic("create") as session:
            mixtape = Mixtape(
                user_id=owner_id,
                name=name,
                description=description,
                photo_url=cover_url,
                source=source,
            )
            session.add(mixtape)
            session.flush()  # assigns the id the song rows point at
            mixtape_id = mixtape.id
            inserted = self._insert_songs(mixtape_id, songs)
        logger.info("Created mixtape %s for user %s with %d songs", mixtape_id, owner_id, inserted)
        return mixtape_id

    def list_for_owner(self, owner_id: int) -> List[MixtapeWithSongs]:
        """Owner's mixtapes newest first, each with its songs in submitted order."""
        try:
            mixtapes = (
                self.session.query(Mixtape)
                .filter(Mixtape.user_id == owner_id)
                .order_by(Mixtape.id.desc())
                .all()
            )
            if not mixtapes:
                return []
            songs = (
                self.session.query(SongEntry)
                .filter(SongEntry.mixtape_id.in_([m.id for m in mixtapes]))
                .order_by(SongEntry.mixtape_id, SongEntry.position, SongEntry.id)
                .all()
            )
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Mixtape list failed for user %s: %s", owner_id, exc, exc_info=True)
            raise StoreFailure("list") from exc

        by_mixtape: Dict[int, List[SongEntry]] = {}
        for song in songs:
            by_mixtape.setdefault(song.mixtape_id, []).append(song)
        return [(mixtape, by_mixtape.get(mixtape.id, [])) for mixtape in mixtapes]

    def replace(
        self,
        mixtape_id: int,
        owner_id: int,
        name: str,
        description: Optional[str],
        cover_url: Optional[str],
        songs: Iterable[SongLike],
    ) -> Optional[str]:
        """Overwrite the mutable fields and the whole song list in one transaction.

        ``cover_url`` of ``None`` keeps the stored cover. Returns the cover in
        effect after the update.
        """
        if not _storable_id(mixtape_id):
            raise MixtapeNotFound(mixtape_id)
        with self._atomic("update") as session:
            mixtape = self._owned_query(mixtape_id, owner_id).first()
            if mixtape is None:
                raise MixtapeNotFound(mixtape_id)

            mixtape.name = name
            mixtape.description = description
            if cover_url:
                mixtape.photo_url = cover_url
            cover_used = mixtape.photo_url

            removed = (
                session.query(SongEntry)
                .filter(SongEntry.mixtape_id == mixtape.id)
                .delete(synchronize_session=False)
            )
            inserted = self._insert_songs(mixtape.id, songs)
        logger.info(
            "Replaced mixtape %s for user %s: %d songs removed, %d inserted",
            mixtape_id, owner_id, removed, inserted,
        )
        return cover_used

    def delete(self, mixtape_id: int, owner_id: int) -> int:
        """Delete an owned mixtape and its songs; 0 when not owned by ``owner_id``."""
        if not _storable_id(mixtape_id):
            return 0
        deleted = 0
        with self._atomic("delete") as session:
            # Ownership first so a guessed id never touches someone else's songs
            if self._owned_query(mixtape_id, owner_id).with_entities(Mixtape.id).first() is not None:
                session.query(SongEntry).filter(
                    SongEntry.mixtape_id == mixtape_id
                ).delete(synchronize_session=False)
                deleted = self._owned_query(mixtape_id, owner_id).delete(synchronize_session=False)
        if deleted:
            logger.info("Deleted mixtape %s for user %s", mixtape_id, owner_id)
        return deleted


__all__ = ["MAX_STORE_ID", "MixtapeRepository", "MixtapeWithSongs", "SongLike"]
