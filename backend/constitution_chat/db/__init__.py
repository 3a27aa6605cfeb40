"""Database module."""

from constitution_chat.db.database import close_database, get_db, init_database

__all__ = ["get_db", "init_database", "close_database"]
