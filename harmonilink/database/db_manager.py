# harmonilink/database/db_manager.py
from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash
import os
import logging
from datetime import datetime
from sqlalchemy import ForeignKey, Index
from sqlalchemy.engine import make_url
from sqlalchemy.orm import relationship

# Initialize the SQLAlchemy object
db = SQLAlchemy()
logger = logging.getLogger(__name__)


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    mixtapes = relationship("Mixtape", back_populates="owner", lazy=True, passive_deletes=True)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def get_id(self) -> str:
        return str(self.id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class Mixtape(db.Model):
    __tablename__ = 'mixtapes'

    id = db.Column(db.Integer, primary_key=True)
    # Owner never changes after creation; every query filters on it
    user_id = db.Column(
        db.Integer,
        ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    photo_url = db.Column(db.String(500), nullable=True)
    source = db.Column(db.String(32), nullable=False, default='sidebar')
    artwork_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    owner = relationship('User', back_populates='mixtapes')
    songs = relationship(
        'SongEntry',
        back_populates='mixtape',
        order_by='SongEntry.position',
        passive_deletes=True,
        lazy=True,
    )

    def __repr__(self):
        return f'<Mixtape {self.id}: {self.name}>'


class SongEntry(db.Model):
    __tablename__ = 'mixtape_songs'

    id = db.Column(db.Integer, primary_key=True)
    mixtape_id = db.Column(
        db.Integer,
        ForeignKey('mixtapes.id', ondelete='CASCADE'),
        nullable=False,
    )
    # Index in the submitted song list
    position = db.Column(db.Integer, nullable=False, default=0)
    song_name = db.Column(db.String(255), nullable=False)
    artist_name = db.Column(db.String(255), nullable=False)
    preview_url = db.Column(db.String(500), nullable=True)
    artwork_url = db.Column(db.String(500), nullable=True)

    mixtape = relationship('Mixtape', back_populates='songs')

    __table_args__ = (
        Index('ix_mixtape_songs_order', 'mixtape_id', 'position'),
    )

    def __repr__(self):
        return f'<SongEntry {self.position}: {self.song_name} by {self.artist_name}>'


def initialize_database(app):
    """
    Initializes the SQLAlchemy extension with the Flask app instance
    and creates all database tables if they don't already exist.
    """
    db.init_app(app)
    # Ensure the instance folder exists for SQLite database file
    instance_path = app.instance_path
    if not os.path.exists(instance_path):
        os.makedirs(instance_path)
        logger.info("Created instance folder: %s", instance_path)

    # Ensure the directory for the configured SQLite file exists
    try:
        uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if uri:
            url = make_url(uri)
            # Only handle file-based SQLite (not :memory:)
            if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
                db_dir = os.path.dirname(url.database)
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)
                    logger.info("Created SQLite DB directory: %s", db_dir)
    except Exception as e:
        # Don't block app startup on path parsing issues; log and continue
        logger.warning("Could not ensure SQLite directory exists: %s", e)

    with app.app_context():
        db.create_all()
        logger.info("Database tables created or already exist.")
