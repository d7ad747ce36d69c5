"""Repository functions for the flashcards table."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

import structlog

from summaryr.db.database import SourceKind, get_db, new_id, source_column, utc_now

logger = structlog.get_logger(__name__)


@dataclass
class FlashcardRecord:
    """Flashcard with its spaced-repetition state."""

    id: str
    user_id: str
    video_id: str | None
    document_id: str | None
    front: str
    back: str
    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: str | None
    last_reviewed_at: str | None
    created_at: str


def replace_flashcards(
    kind: SourceKind,
    source_id: str,
    user_id: str,
    cards: list[tuple[str, str]],
) -> list[FlashcardRecord]:
    """Replace a user's flashcards for one video or document.

    Args:
        kind: "video" or "document"
        source_id: ID of the video or document
        user_id: Owner
        cards: (front, back) pairs

    Returns:
        The stored flashcards in insertion order
    """
    column = source_column(kind)
    now = utc_now()
    ids = [new_id() for _ in cards]

    with get_db() as conn:
        conn.execute(
            f"DELETE FROM flashcards WHERE {column} = ? AND user_id = ?",
            (source_id, user_id),
        )
        conn.executemany(
            f"""
            INSERT INTO flashcards (id, user_id, {column}, front, back, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                (card_id, user_id, source_id, front, back, now)
                for card_id, (front, back) in zip(ids, cards)
            ],
        )

    logger.debug("flashcards.replaced", kind=kind, source_id=source_id, count=len(cards))
    return list_flashcards(kind, source_id, user_id)


def list_flashcards(kind: SourceKind, source_id: str, user_id: str) -> list[FlashcardRecord]:
    """List a user's flashcards for one video or document, oldest first."""
    column = source_column(kind)
    with get_db() as conn:
        rows = conn.execute(
            f"""
            SELECT * FROM flashcards WHERE {column} = ? AND user_id = ?
            ORDER BY created_at ASC, rowid ASC
            """,
            (source_id, user_id),
        ).fetchall()
    return [_row_to_record(row) for row in rows]


def get_flashcard(card_id: str, user_id: str) -> FlashcardRecord | None:
    """Get a flashcard owned by user_id."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM flashcards WHERE id = ? AND user_id = ?",
            (card_id, user_id),
        ).fetchone()
    if row is None:
        return None
    return _row_to_record(row)


def list_due_flashcards(user_id: str, due_on: str) -> list[FlashcardRecord]:
    """List cards never reviewed or scheduled on/before due_on (YYYY-MM-DD)."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM flashcards
            WHERE user_id = ?
              AND (next_review_date IS NULL OR substr(next_review_date, 1, 10) <= ?)
            ORDER BY next_review_date IS NOT NULL, next_review_date ASC, created_at ASC
            """,
            (user_id, due_on),
        ).fetchall()
    return [_row_to_record(row) for row in rows]


def save_review(
    card_id: str,
    ease_factor: float,
    interval: int,
    repetitions: int,
    next_review_date: str,
) -> FlashcardRecord:
    """Persist the outcome of a review and return the updated card."""
    with get_db() as conn:
        conn.execute(
            """
            UPDATE flashcards
            SET ease_factor = ?, interval = ?, repetitions = ?,
                next_review_date = ?, last_reviewed_at = ?
            WHERE id = ?
            """,
            (ease_factor, interval, repetitions, next_review_date, utc_now(), card_id),
        )
        row = conn.execute("SELECT * FROM flashcards WHERE id = ?", (card_id,)).fetchone()
    logger.debug("flashcards.reviewed", card_id=card_id, interval=interval)
    return _row_to_record(row)


def _row_to_record(row: sqlite3.Row) -> FlashcardRecord:
    return FlashcardRecord(
        id=row["id"],
        user_id=row["user_id"],
        video_id=row["video_id"],
        document_id=row["document_id"],
        front=row["front"],
        back=row["back"],
        ease_factor=row["ease_factor"],
        interval=row["interval"],
        repetitions=row["repetitions"],
        next_review_date=row["next_review_date"],
        last_reviewed_at=row["last_reviewed_at"],
        created_at=row["created_at"],
    )
