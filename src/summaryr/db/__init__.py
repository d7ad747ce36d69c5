"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Repository functions for videos, documents, flashcards, study material and profiles
"""

from summaryr.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
