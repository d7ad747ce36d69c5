"""Quiz grading and attempt recording."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import structlog

from summaryr.core.study_sources import ensure_owned
from summaryr.db.database import SourceKind
from summaryr.db.study_repository import QuestionRecord, QuizAttemptRecord, insert_quiz_attempt, list_questions

logger = structlog.get_logger(__name__)


@dataclass
class QuizResult:
    """Graded answers for one attempt."""

    score: int
    correct_count: int
    total_questions: int
    correct_ids: list[str] = field(default_factory=list)


def _normalize(answer: str | None) -> str:
    return (answer or "").strip().lower()


def is_correct(answer: str | None, correct_answer: str) -> bool:
    """Trimmed, case-insensitive comparison. Missing answers are wrong."""
    if answer is None:
        return False
    return _normalize(answer) == _normalize(correct_answer)


def grade_quiz(questions: list[QuestionRecord], answers: dict[str, str]) -> QuizResult:
    """Grade answers keyed by question ID.

    Score is the rounded percentage of correct answers (0 for an empty quiz).
    """
    correct_ids = [q.id for q in questions if is_correct(answers.get(q.id), q.correct_answer)]
    total = len(questions)
    score = int(math.floor(100 * len(correct_ids) / total + 0.5)) if total else 0

    return QuizResult(
        score=score,
        correct_count=len(correct_ids),
        total_questions=total,
        correct_ids=correct_ids,
    )


def submit_quiz_attempt(
    kind: SourceKind,
    source_id: str,
    user_id: str,
    answers: dict[str, str],
    time_taken: int | None = None,
) -> tuple[QuizAttemptRecord, QuizResult]:
    """Grade answers against the stored questions and record the attempt.

    Raises:
        NotFoundError: If the source does not belong to the user
        ValueError: If no questions exist for the source
    """
    ensure_owned(kind, source_id, user_id)

    questions = list_questions(kind, source_id, user_id)
    if not questions:
        raise ValueError("No questions found for this source")

    result = grade_quiz(questions, answers)
    attempt = insert_quiz_attempt(
        kind,
        source_id,
        user_id,
        score=result.score,
        correct_count=result.correct_count,
        total_questions=result.total_questions,
        answers=answers,
        time_taken=time_taken,
    )

    logger.info(
        "quiz_attempt_recorded",
        kind=kind,
        source_id=source_id,
        score=result.score,
        correct=result.correct_count,
        total=result.total_questions,
    )
    return attempt, result
