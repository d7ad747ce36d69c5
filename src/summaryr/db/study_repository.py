"""Repository functions for generated study material.

Covers questions, summaries, notes and quiz_attempts. Each row belongs to a
user and to exactly one source (a video or a document).
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from typing import Any

import structlog

from summaryr.db.database import SourceKind, get_db, new_id, source_column, utc_now

logger = structlog.get_logger(__name__)


@dataclass
class QuestionRecord:
    """Quiz question from database."""

    id: str
    type: str
    question: str
    correct_answer: str
    options: list[str] | None = None
    explanation: str | None = None
    created_at: str = ""


@dataclass
class QuizAttemptRecord:
    """Recorded quiz attempt."""

    id: str
    score: int
    correct_count: int
    total_questions: int
    time_taken: int | None
    answers: dict[str, str] = field(default_factory=dict)
    created_at: str = ""


# =============================================================================
# QUESTIONS
# =============================================================================


def replace_questions(
    kind: SourceKind,
    source_id: str,
    user_id: str,
    questions: list[dict[str, Any]],
) -> list[QuestionRecord]:
    """Replace a user's questions for one source.

    Args:
        questions: Dicts with type, question, correct_answer and optional
            options / explanation

    Returns:
        The stored questions in order
    """
    column = source_column(kind)
    now = utc_now()

    with get_db() as conn:
        conn.execute(
            f"DELETE FROM questions WHERE {column} = ? AND user_id = ?",
            (source_id, user_id),
        )
        conn.executemany(
            f"""
            INSERT INTO questions (
                id, user_id, {column}, type, question, options,
                correct_answer, explanation, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    new_id(),
                    user_id,
                    source_id,
                    q["type"],
                    q["question"],
                    json.dumps(q["options"]) if q.get("options") else None,
                    q["correct_answer"],
                    q.get("explanation"),
                    now,
                )
                for q in questions
            ],
        )

    logger.debug("questions.replaced", kind=kind, source_id=source_id, count=len(questions))
    return list_questions(kind, source_id, user_id)


def list_questions(kind: SourceKind, source_id: str, user_id: str) -> list[QuestionRecord]:
    """List a user's questions for one source, in generation order."""
    column = source_column(kind)
    with get_db() as conn:
        rows = conn.execute(
            f"""
            SELECT * FROM questions WHERE {column} = ? AND user_id = ?
            ORDER BY created_at ASC, rowid ASC
            """,
            (source_id, user_id),
        ).fetchall()
    return [_row_to_question(row) for row in rows]


def _row_to_question(row: sqlite3.Row) -> QuestionRecord:
    return QuestionRecord(
        id=row["id"],
        type=row["type"],
        question=row["question"],
        correct_answer=row["correct_answer"],
        options=json.loads(row["options"]) if row["options"] else None,
        explanation=row["explanation"],
        created_at=row["created_at"],
    )


# =============================================================================
# SUMMARIES AND NOTES
# =============================================================================


def _upsert_content(
    table: str, kind: SourceKind, source_id: str, user_id: str, content: str
) -> None:
    column = source_column(kind)
    now = utc_now()
    with get_db() as conn:
        conn.execute(
            f"""
            INSERT INTO {table} (id, user_id, {column}, content, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT({column}, user_id) DO UPDATE SET
                content = excluded.content,
                updated_at = excluded.updated_at
            """,
            (new_id(), user_id, source_id, content, now, now),
        )


def _get_content(table: str, kind: SourceKind, source_id: str, user_id: str) -> str | None:
    column = source_column(kind)
    with get_db() as conn:
        row = conn.execute(
            f"SELECT content FROM {table} WHERE {column} = ? AND user_id = ?",
            (source_id, user_id),
        ).fetchone()
    return row["content"] if row else None


def upsert_summary(kind: SourceKind, source_id: str, user_id: str, content: str) -> None:
    """Store the summary, replacing any previous one for (source, user)."""
    _upsert_content("summaries", kind, source_id, user_id, content)
    logger.debug("summaries.upserted", kind=kind, source_id=source_id)


def get_summary(kind: SourceKind, source_id: str, user_id: str) -> str | None:
    """Get summary content, or None if none has been generated."""
    return _get_content("summaries", kind, source_id, user_id)


def upsert_note(kind: SourceKind, source_id: str, user_id: str, content: str) -> None:
    """Store the user's notes for a source."""
    _upsert_content("notes", kind, source_id, user_id, content)
    logger.debug("notes.upserted", kind=kind, source_id=source_id)


def get_note(kind: SourceKind, source_id: str, user_id: str) -> str | None:
    """Get the user's notes for a source."""
    return _get_content("notes", kind, source_id, user_id)


# =============================================================================
# QUIZ ATTEMPTS
# =============================================================================


def insert_quiz_attempt(
    kind: SourceKind,
    source_id: str,
    user_id: str,
    score: int,
    correct_count: int,
    total_questions: int,
    answers: dict[str, str],
    time_taken: int | None = None,
) -> QuizAttemptRecord:
    """Record a graded quiz attempt."""
    column = source_column(kind)
    attempt_id = new_id()
    now = utc_now()

    with get_db() as conn:
        conn.execute(
            f"""
            INSERT INTO quiz_attempts (
                id, user_id, {column}, score, correct_count,
                total_questions, time_taken, answers, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                attempt_id,
                user_id,
                source_id,
                score,
                correct_count,
                total_questions,
                time_taken,
                json.dumps(answers, ensure_ascii=False),
                now,
            ),
        )

    logger.debug("quiz_attempts.inserted", attempt_id=attempt_id, score=score)

    return QuizAttemptRecord(
        id=attempt_id,
        score=score,
        correct_count=correct_count,
        total_questions=total_questions,
        time_taken=time_taken,
        answers=answers,
        created_at=now,
    )


def list_quiz_attempts(kind: SourceKind, source_id: str, user_id: str) -> list[QuizAttemptRecord]:
    """List a user's attempts for a source, newest first."""
    column = source_column(kind)
    with get_db() as conn:
        rows = conn.execute(
            f"""
            SELECT * FROM quiz_attempts WHERE {column} = ? AND user_id = ?
            ORDER BY created_at DESC
            """,
            (source_id, user_id),
        ).fetchall()

    return [
        QuizAttemptRecord(
            id=row["id"],
            score=row["score"],
            correct_count=row["correct_count"],
            total_questions=row["total_questions"],
            time_taken=row["time_taken"],
            answers=json.loads(row["answers"]),
            created_at=row["created_at"],
        )
        for row in rows
    ]
