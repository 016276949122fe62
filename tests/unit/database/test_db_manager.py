import os

import pytest
from flask import Flask
from sqlalchemy.exc import IntegrityError


@pytest.mark.unit
def test_initialize_database_creates_sqlite_directory(tmp_path):
    target_dir = tmp_path / "nested" / "dbdir"
    db_file = target_dir / "test.db"
    uri = f"sqlite:///{db_file}".replace("\\", "/")

    from harmonilink.database.db_manager import Mixtape, db, initialize_database

    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.instance_path = str(tmp_path / "instance")

    initialize_database(app)

    assert target_dir.exists()
    with app.app_context():
        assert db.session.query(Mixtape).count() == 0
        db.engine.dispose()


@pytest.mark.unit
def test_initialize_database_in_memory_only_creates_instance_dir(tmp_path, monkeypatch):
    from harmonilink.database.db_manager import initialize_database

    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    instance_dir = tmp_path / "instance"
    app.instance_path = str(instance_dir)

    calls = []
    real_makedirs = os.makedirs

    def tracing_makedirs(path, *args, **kwargs):
        calls.append(os.path.abspath(path))
        return real_makedirs(path, *args, **kwargs)

    monkeypatch.setattr(os, "makedirs", tracing_makedirs)

    initialize_database(app)

    assert instance_dir.exists()
    assert calls == [os.path.abspath(str(instance_dir))]


@pytest.mark.unit
def test_user_email_is_unique_and_password_is_hashed(db_session, factories):
    from harmonilink.database.db_manager import User

    user = User(email="dup@example.com")
    user.set_password("password123")
    db_session.add(user)
    db_session.commit()

    assert user.password_hash != "password123"
    assert user.check_password("password123")
    assert not user.check_password("nope")
    assert user.to_dict()["email"] == "dup@example.com"
    assert user.get_id() == str(user.id)

    db_session.add(User(email="dup@example.com", password_hash="x"))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


@pytest.mark.unit
def test_song_entries_load_in_position_order(db_session, factories):
    mixtape = factories.MixtapeFactory()
    for position, title in [(2, "third"), (0, "first"), (1, "second")]:
        factories.SongEntryFactory(mixtape=mixtape, position=position, song_name=title)
    db_session.commit()
    db_session.expire_all()

    assert [song.song_name for song in mixtape.songs] == ["first", "second", "third"]
    assert mixtape.source == "sidebar"
    assert mixtape.owner.mixtapes == [mixtape]


@pytest.mark.unit
def test_song_without_artist_is_rejected(db_session, factories):
    mixtape = factories.MixtapeFactory()
    db_session.flush()

    with pytest.raises(IntegrityError):
        factories.SongEntryFactory(mixtape=mixtape, artist_name=None)
    db_session.rollback()
