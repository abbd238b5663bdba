"""Database module."""

from catalog.db.base import Base
from catalog.db.session import commit, engine, get_db, init_db

__all__ = ["Base", "commit", "engine", "get_db", "init_db"]
