"""Persistence layer: Flask-SQLAlchemy models and bootstrap."""

from .db_manager import Mixtape, SongEntry, User, db, initialize_database

__all__ = ["db", "User", "Mixtape", "SongEntry", "initialize_database"]
