"""SQLite database connection and schema management.

Provides connection management and schema initialization for the study platform.
"""

from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Literal

import structlog

from summaryr.config.app_config import load_app_config

logger = structlog.get_logger(__name__)

SourceKind = Literal["video", "document"]

STATUSES = ("uploading", "processing", "transcribing", "ready", "error")

# Current database location (module-level, set by init_db)
_db_path: Path | None = None


def new_id() -> str:
    """Generate a primary key for a new row."""
    return str(uuid.uuid4())


def utc_now() -> str:
    """Current UTC timestamp in ISO 8601 format."""
    return datetime.now(timezone.utc).isoformat()


def source_column(kind: SourceKind) -> str:
    """Column name referencing a study source ("video" -> "video_id").

    Raises:
        ValueError: If kind is not a known source
    """
    if kind not in ("video", "document"):
        raise ValueError(f"Unknown source kind: {kind}")
    return f"{kind}_id"


def get_db_path() -> Path:
    """Path of the active database file."""
    return _db_path or load_app_config().db_path


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to the configured db_path
    """
    global _db_path
    _db_path = db_path or load_app_config().db_path

    _db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Commits on success, rolls back on any exception.

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM videos").fetchall()
    """
    db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS profiles (
            user_id TEXT PRIMARY KEY,
            email TEXT,
            full_name TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS videos (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL,
            description TEXT,
            youtube_url TEXT,
            video_path TEXT,
            file_size INTEGER,
            duration REAL,
            status TEXT NOT NULL DEFAULT 'uploading'
                CHECK(status IN ('uploading', 'processing', 'transcribing', 'ready', 'error')),
            error_message TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS video_segments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            video_id TEXT NOT NULL REFERENCES videos(id) ON DELETE CASCADE,
            segment_index INTEGER NOT NULL,
            start_time REAL NOT NULL,
            end_time REAL NOT NULL,
            text TEXT NOT NULL,
            UNIQUE(video_id, segment_index)
        );

        CREATE TABLE IF NOT EXISTS documents (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL,
            file_type TEXT NOT NULL CHECK(file_type IN ('pdf', 'docx', 'epub')),
            file_size INTEGER,
            file_path TEXT,
            extracted_text TEXT,
            page_count INTEGER,
            language TEXT,
            status TEXT NOT NULL DEFAULT 'uploading'
                CHECK(status IN ('uploading', 'processing', 'transcribing', 'ready', 'error')),
            error_message TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS document_chunks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            document_id TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
            chunk_index INTEGER NOT NULL,
            content TEXT NOT NULL,
            page_number INTEGER,
            UNIQUE(document_id, chunk_index)
        );

        CREATE TABLE IF NOT EXISTS flashcards (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            video_id TEXT REFERENCES videos(id) ON DELETE CASCADE,
            document_id TEXT REFERENCES documents(id) ON DELETE CASCADE,
            front TEXT NOT NULL,
            back TEXT NOT NULL,
            ease_factor REAL NOT NULL DEFAULT 2.5,
            interval INTEGER NOT NULL DEFAULT 0,
            repetitions INTEGER NOT NULL DEFAULT 0,
            next_review_date TEXT,
            last_reviewed_at TEXT,
            created_at TEXT NOT NULL,
            CHECK((video_id IS NULL) != (document_id IS NULL))
        );

        CREATE TABLE IF NOT EXISTS questions (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            video_id TEXT REFERENCES videos(id) ON DELETE CASCADE,
            document_id TEXT REFERENCES documents(id) ON DELETE CASCADE,
            type TEXT NOT NULL CHECK(type IN ('mcq', 'true_false', 'short_answer', 'fill_blank')),
            question TEXT NOT NULL,
            options TEXT,
            correct_answer TEXT NOT NULL,
            explanation TEXT,
            created_at TEXT NOT NULL,
            CHECK((video_id IS NULL) != (document_id IS NULL))
        );

        CREATE TABLE IF NOT EXISTS summaries (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            video_id TEXT REFERENCES videos(id) ON DELETE CASCADE,
            document_id TEXT REFERENCES documents(id) ON DELETE CASCADE,
            content TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            UNIQUE(video_id, user_id),
            UNIQUE(document_id, user_id),
            CHECK((video_id IS NULL) != (document_id IS NULL))
        );

        CREATE TABLE IF NOT EXISTS notes (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            video_id TEXT REFERENCES videos(id) ON DELETE CASCADE,
            document_id TEXT REFERENCES documents(id) ON DELETE CASCADE,
            content TEXT NOT NULL DEFAULT '',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            UNIQUE(video_id, user_id),
            UNIQUE(document_id, user_id),
            CHECK((video_id IS NULL) != (document_id IS NULL))
        );

        CREATE TABLE IF NOT EXISTS quiz_attempts (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            video_id TEXT REFERENCES videos(id) ON DELETE CASCADE,
            document_id TEXT REFERENCES documents(id) ON DELETE CASCADE,
            score INTEGER NOT NULL,
            correct_count INTEGER NOT NULL,
            total_questions INTEGER NOT NULL,
            time_taken INTEGER,
            answers TEXT NOT NULL DEFAULT '{}',
            created_at TEXT NOT NULL,
            CHECK((video_id IS NULL) != (document_id IS NULL))
        );

        CREATE INDEX IF NOT EXISTS idx_videos_user ON videos(user_id);
        CREATE INDEX IF NOT EXISTS idx_documents_user ON documents(user_id);
        CREATE INDEX IF NOT EXISTS idx_flashcards_user_due ON flashcards(user_id, next_review_date);
        """
    )
