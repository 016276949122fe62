import os
import sys

import pytest

# Ensure project root is on sys.path so 'app', 'config', and 'harmonilink' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import factories as test_factories
from tests.support import stubs as test_stubs


TEST_JWT_SECRET = "test-jwt-secret"
TEST_CLOUD_NAME = "demo-cloud"


@pytest.fixture
def app(tmp_path):
    """Fresh application bound to a per-test SQLite file."""
    import app as app_module
    from harmonilink.database.db_manager import db

    db_path = tmp_path / "test.sqlite"
    application = app_module.create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path.as_posix()}",
            "JWT_SECRET": TEST_JWT_SECRET,
            "CLOUDINARY_CLOUD_NAME": TEST_CLOUD_NAME,
            "CLOUDINARY_API_KEY": "test-api-key",
            "CLOUDINARY_API_SECRET": "test-api-secret",
            "ASSET_HOST": "res.cloudinary.com",
            "ASSET_FOLDER": "harmolinku_uploads",
        }
    )
    yield application
    with application.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def db_session(app_context):
    from harmonilink.database.db_manager import db

    test_factories.set_session(db.session)
    try:
        yield db.session
    finally:
        db.session.rollback()
        db.session.remove()
        test_factories.reset_session()


@pytest.fixture
def factories(db_session):
    yield test_factories


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Create a committed user and return its id."""
    from harmonilink.database.db_manager import User, db

    def _make(email: str, password: str = "password123") -> int:
        with app.app_context():
            user = User(email=email)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(user_id: int) -> dict:
        token = app.extensions["token_authenticator"].issue(user_id)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def cover_url():
    return test_stubs.hosted_cover_url


@pytest.fixture
def road_trip_payload():
    return {
        "name": "Road Trip",
        "songs": [
            {"name": "A", "artist": "X", "preview_url": "p1", "artwork_url": "a1"},
            {"name": "B", "artist": "Y", "preview_url": "p2", "artwork_url": "a2"},
        ],
    }
