"""Repository functions for the profiles table."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

import structlog

from summaryr.db.database import get_db, utc_now

logger = structlog.get_logger(__name__)


@dataclass
class ProfileRecord:
    """User profile."""

    user_id: str
    email: str | None
    full_name: str | None
    created_at: str
    updated_at: str


def upsert_profile(
    user_id: str, email: str | None = None, full_name: str | None = None
) -> ProfileRecord:
    """Create or update the profile row for user_id.

    Fields passed as None keep their stored value.
    """
    now = utc_now()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO profiles (user_id, email, full_name, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                email = COALESCE(excluded.email, profiles.email),
                full_name = COALESCE(excluded.full_name, profiles.full_name),
                updated_at = excluded.updated_at
            """,
            (user_id, email, full_name, now, now),
        )
        row = conn.execute("SELECT * FROM profiles WHERE user_id = ?", (user_id,)).fetchone()

    logger.debug("profiles.upserted", user_id=user_id)
    return _row_to_record(row)


def get_profile(user_id: str) -> ProfileRecord | None:
    """Get a profile by user ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM profiles WHERE user_id = ?", (user_id,)
        ).fetchone()

    if row is None:
        return None
    return _row_to_record(row)


def _row_to_record(row: sqlite3.Row) -> ProfileRecord:
    return ProfileRecord(
        user_id=row["user_id"],
        email=row["email"],
        full_name=row["full_name"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
