from types import SimpleNamespace

import pytest

from harmonilink.database.db_manager import Mixtape, SongEntry
from harmonilink.domain.mixtapes import MixtapeNotFound, MixtapeRepository, StoreFailure
from harmonilink.domain.mixtapes.repository import MAX_STORE_ID


def _song(name, artist="Artist", preview=None, artwork=None):
    return SimpleNamespace(name=name, artist=artist, preview_url=preview, artwork_url=artwork)


@pytest.fixture
def repository(db_session):
    return MixtapeRepository(db_session)


@pytest.fixture
def owner(factories, db_session):
    user = factories.UserFactory()
    db_session.commit()
    return user.id


@pytest.fixture
def stranger(factories, db_session):
    user = factories.UserFactory()
    db_session.commit()
    return user.id


@pytest.mark.unit
def test_create_persists_songs_in_submitted_order(repository, owner):
    songs = [_song(name) for name in ("Zeta", "Alpha", "Mu", "Beta")]
    mixtape_id = repository.create(owner, "Road Trip", None, None, "sidebar", songs)

    [(mixtape, stored)] = repository.list_for_owner(owner)
    assert mixtape.id == mixtape_id
    assert mixtape.source == "sidebar"
    assert [s.song_name for s in stored] == ["Zeta", "Alpha", "Mu", "Beta"]
    assert [s.position for s in stored] == [0, 1, 2, 3]


@pytest.mark.unit
def test_create_is_all_or_nothing(repository, owner, db_session):
    songs = [_song("Fine"), _song(None)]  # song_name is NOT NULL

    with pytest.raises(StoreFailure) as excinfo:
        repository.create(owner, "Broken", None, None, "sidebar", songs)

    assert excinfo.value.operation == "create"
    assert db_session.query(Mixtape).count() == 0
    assert db_session.query(SongEntry).count() == 0


@pytest.mark.unit
def test_list_is_newest_first_and_scoped_to_owner(repository, owner, stranger):
    first = repository.create(owner, "First", None, None, "sidebar", [_song("a")])
    second = repository.create(owner, "Second", None, None, "sidebar", [_song("b")])
    repository.create(stranger, "Theirs", None, None, "sidebar", [_song("c")])

    listed = repository.list_for_owner(owner)
    assert [m.id for m, _ in listed] == [second, first]
    assert all(m.user_id == owner for m, _ in listed)


@pytest.mark.unit
def test_list_for_owner_without_mixtapes_is_empty(repository, owner):
    assert repository.list_for_owner(owner) == []


@pytest.mark.unit
def test_replace_swaps_the_whole_song_list(repository, owner):
    mixtape_id = repository.create(owner, "Old", "old desc", None, "sidebar", [_song("a"), _song("b"), _song("c")])

    cover = repository.replace(mixtape_id, owner, "New", "new desc", None, [_song("z")])

    [(mixtape, songs)] = repository.list_for_owner(owner)
    assert cover is None
    assert mixtape.name == "New"
    assert mixtape.description == "new desc"
    assert [s.song_name for s in songs] == ["z"]


@pytest.mark.unit
def test_replace_without_cover_keeps_existing_one(repository, owner):
    mixtape_id = repository.create(owner, "Old", None, "https://cdn/keep.png", "sidebar", [_song("a")])

    cover = repository.replace(mixtape_id, owner, "Old", None, None, [_song("b")])

    assert cover == "https://cdn/keep.png"
    [(mixtape, _)] = repository.list_for_owner(owner)
    assert mixtape.photo_url == "https://cdn/keep.png"


@pytest.mark.unit
def test_replace_never_changes_owner_or_source(repository, owner):
    mixtape_id = repository.create(owner, "Old", None, None, "import", [_song("a")])
    repository.replace(mixtape_id, owner, "New", None, None, [_song("b")])

    [(mixtape, _)] = repository.list_for_owner(owner)
    assert mixtape.user_id == owner
    assert mixtape.source == "import"


@pytest.mark.unit
def test_replace_rolls_back_when_an_insert_fails(repository, owner):
    mixtape_id = repository.create(owner, "Keep", "desc", None, "sidebar", [_song("a"), _song("b")])

    with pytest.raises(StoreFailure):
        repository.replace(mixtape_id, owner, "Changed", None, None, [_song("ok"), _song(None)])

    [(mixtape, songs)] = repository.list_for_owner(owner)
    assert mixtape.name == "Keep"
    assert [s.song_name for s in songs] == ["a", "b"]


@pytest.mark.unit
def test_replace_of_foreign_mixtape_is_not_found_and_untouched(repository, owner, stranger):
    mixtape_id = repository.create(owner, "Mine", None, None, "sidebar", [_song("a")])

    with pytest.raises(MixtapeNotFound):
        repository.replace(mixtape_id, stranger, "Hijacked", None, None, [_song("x")])

    [(mixtape, songs)] = repository.list_for_owner(owner)
    assert mixtape.name == "Mine"
    assert [s.song_name for s in songs] == ["a"]


@pytest.mark.unit
def test_delete_removes_mixtape_and_songs(repository, owner, db_session):
    mixtape_id = repository.create(owner, "Gone", None, None, "sidebar", [_song("a"), _song("b")])

    assert repository.delete(mixtape_id, owner) == 1
    assert repository.list_for_owner(owner) == []
    assert db_session.query(SongEntry).filter_by(mixtape_id=mixtape_id).count() == 0


@pytest.mark.unit
def test_delete_by_non_owner_touches_nothing(repository, owner, stranger, db_session):
    mixtape_id = repository.create(owner, "Mine", None, None, "sidebar", [_song("a"), _song("b")])

    assert repository.delete(mixtape_id, stranger) == 0
    assert db_session.query(SongEntry).filter_by(mixtape_id=mixtape_id).count() == 2
    assert [m.id for m, _ in repository.list_for_owner(owner)] == [mixtape_id]


@pytest.mark.unit
def test_delete_of_missing_id_returns_zero(repository, owner):
    assert repository.delete(424242, owner) == 0


@pytest.mark.unit
def test_factory_built_songs_list_in_position_order(repository, factories, db_session):
    mixtape = factories.MixtapeFactory()
    factories.SongEntryFactory(mixtape=mixtape, position=2, song_name="third")
    factories.SongEntryFactory(mixtape=mixtape, position=0, song_name="first")
    factories.SongEntryFactory(mixtape=mixtape, position=1, song_name="second")
    db_session.commit()

    [(listed, songs)] = repository.list_for_owner(mixtape.user_id)
    assert listed.id == mixtape.id
    assert [s.song_name for s in songs] == ["first", "second", "third"]


@pytest.mark.unit
@pytest.mark.parametrize("mixtape_id", [0, -1, MAX_STORE_ID + 1, 10 ** 23])
def test_ids_outside_store_range_are_not_found(repository, owner, mixtape_id):
    repository.create(owner, "Mine", None, None, "sidebar", [_song("a")])

    with pytest.raises(MixtapeNotFound):
        repository.replace(mixtape_id, owner, "New", None, None, [_song("b")])
    assert repository.delete(mixtape_id, owner) == 0

    [(mixtape, songs)] = repository.list_for_owner(owner)
    assert mixtape.name == "Mine"
    assert [s.song_name for s in songs] == ["a"]
