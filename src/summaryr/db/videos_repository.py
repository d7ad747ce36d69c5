"""Repository functions for videos and video_segments tables."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any

import structlog

from summaryr.db.database import get_db, new_id, utc_now

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = {
    "title",
    "description",
    "youtube_url",
    "video_path",
    "file_size",
    "duration",
    "status",
    "error_message",
}


@dataclass
class VideoRecord:
    """Video record from database."""

    id: str
    user_id: str
    title: str
    description: str | None
    youtube_url: str | None
    video_path: str | None
    file_size: int | None
    duration: float | None
    status: str
    error_message: str | None
    created_at: str
    updated_at: str


@dataclass
class SegmentRecord:
    """A timed transcript segment."""

    segment_index: int
    start_time: float
    end_time: float
    text: str


def create_video(
    user_id: str,
    title: str,
    status: str = "uploading",
    description: str | None = None,
    youtube_url: str | None = None,
    file_size: int | None = None,
) -> VideoRecord:
    """Insert a new video row and return it."""
    video_id = new_id()
    now = utc_now()

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO videos (
                id, user_id, title, description, youtube_url,
                file_size, status, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (video_id, user_id, title, description, youtube_url, file_size, status, now, now),
        )
        row = conn.execute("SELECT * FROM videos WHERE id = ?", (video_id,)).fetchone()

    logger.debug("videos.inserted", video_id=video_id, status=status)
    return _row_to_record(row)


def get_video(video_id: str, user_id: str | None = None) -> VideoRecord | None:
    """Get a video by ID, optionally scoped to its owner.

    Returns:
        VideoRecord if found (and owned by user_id when given), None otherwise
    """
    query = "SELECT * FROM videos WHERE id = ?"
    params: tuple[Any, ...] = (video_id,)
    if user_id is not None:
        query += " AND user_id = ?"
        params = (video_id, user_id)

    with get_db() as conn:
        row = conn.execute(query, params).fetchone()

    if row is None:
        return None
    return _row_to_record(row)


def list_videos(user_id: str) -> list[VideoRecord]:
    """List a user's videos, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM videos WHERE user_id = ? ORDER BY created_at DESC",
            (user_id,),
        ).fetchall()
    return [_row_to_record(row) for row in rows]


def update_video(video_id: str, **fields: Any) -> None:
    """Update selected columns of a video.

    Raises:
        ValueError: If an unknown column is given
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update video fields: {sorted(unknown)}")
    if not fields:
        return

    assignments = ", ".join(f"{name} = ?" for name in fields)
    params = [*fields.values(), utc_now(), video_id]

    with get_db() as conn:
        conn.execute(
            f"UPDATE videos SET {assignments}, updated_at = ? WHERE id = ?",
            params,
        )

    logger.debug("videos.updated", video_id=video_id, fields=sorted(fields))


def set_video_status(video_id: str, status: str, error_message: str | None = None) -> None:
    """Transition a video to a new status."""
    update_video(video_id, status=status, error_message=error_message)


def delete_video(video_id: str, user_id: str) -> bool:
    """Delete a video owned by user_id.

    Returns:
        True if a row was deleted
    """
    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM videos WHERE id = ? AND user_id = ?",
            (video_id, user_id),
        )
    return cursor.rowcount > 0


def replace_segments(video_id: str, segments: list[dict[str, Any]]) -> int:
    """Replace all transcript segments of a video.

    Args:
        video_id: Video ID
        segments: Dicts with text, start and end (seconds)

    Returns:
        Number of segments stored
    """
    with get_db() as conn:
        conn.execute("DELETE FROM video_segments WHERE video_id = ?", (video_id,))
        conn.executemany(
            """
            INSERT INTO video_segments (video_id, segment_index, start_time, end_time, text)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (video_id, index, float(seg["start"]), float(seg["end"]), seg["text"])
                for index, seg in enumerate(segments)
            ],
        )

    logger.debug("video_segments.replaced", video_id=video_id, count=len(segments))
    return len(segments)


def get_segments(video_id: str) -> list[SegmentRecord]:
    """Get transcript segments in order."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT segment_index, start_time, end_time, text
            FROM video_segments WHERE video_id = ?
            ORDER BY segment_index ASC
            """,
            (video_id,),
        ).fetchall()

    return [
        SegmentRecord(
            segment_index=row["segment_index"],
            start_time=row["start_time"],
            end_time=row["end_time"],
            text=row["text"],
        )
        for row in rows
    ]


def _row_to_record(row: sqlite3.Row) -> VideoRecord:
    return VideoRecord(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        description=row["description"],
        youtube_url=row["youtube_url"],
        video_path=row["video_path"],
        file_size=row["file_size"],
        duration=row["duration"],
        status=row["status"],
        error_message=row["error_message"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
