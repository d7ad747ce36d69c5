"""Spaced repetition scheduling for flashcards.

Simplified SM-2: each review is graded on a four-point scale and moves the
card's ease factor, interval (days) and repetition count.

Quality scale:
- 0 Again, 1 Hard: the card is relearned (repetitions reset, due tomorrow)
- 2 Good, 3 Easy: the interval grows 1 -> 6 -> interval * ease factor
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta

import structlog

from summaryr.db.flashcards_repository import (
    FlashcardRecord,
    get_flashcard,
    list_due_flashcards,
    save_review,
)

logger = structlog.get_logger(__name__)

MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5
QUALITY_LABELS = {0: "again", 1: "hard", 2: "good", 3: "easy"}


@dataclass
class SRSUpdate:
    """New scheduling state after a review."""

    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: date


class FlashcardNotFoundError(Exception):
    """Raised when a flashcard does not exist for the user."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Flashcard not found: {card_id}")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def update_flashcard_srs(
    ease_factor: float,
    interval: int,
    repetitions: int,
    quality: int,
    today: date | None = None,
) -> SRSUpdate:
    """Compute the next scheduling state of a card.

    Args:
        ease_factor: Current ease factor
        interval: Current interval in days
        repetitions: Consecutive successful reviews so far
        quality: 0 (Again), 1 (Hard), 2 (Good) or 3 (Easy)
        today: Review date (defaults to date.today())

    Returns:
        SRSUpdate with the new ease factor, interval, repetitions and due date

    Raises:
        ValueError: If quality is outside 0..3
    """
    if quality not in QUALITY_LABELS:
        raise ValueError(f"quality must be 0-3, got {quality}")

    if today is None:
        today = date.today()

    new_ease = ease_factor
    new_interval = interval
    new_repetitions = repetitions

    if quality < 2:
        new_repetitions = 0
        new_interval = 1
    else:
        distance = 3 - quality
        new_ease = max(
            MIN_EASE_FACTOR,
            ease_factor + (0.1 - distance * (0.08 + distance * 0.02)),
        )

        if new_repetitions == 0:
            new_interval = 1
        elif new_repetitions == 1:
            new_interval = 6
        else:
            new_interval = _round_half_up(new_interval * new_ease)

        new_repetitions += 1

    return SRSUpdate(
        ease_factor=new_ease,
        interval=new_interval,
        repetitions=new_repetitions,
        next_review_date=today + timedelta(days=new_interval),
    )


def review_flashcard(
    card_id: str,
    user_id: str,
    quality: int,
    today: date | None = None,
) -> FlashcardRecord:
    """Apply a review to a stored flashcard and persist the new schedule.

    Raises:
        FlashcardNotFoundError: If the card does not belong to the user
        ValueError: If quality is outside 0..3
    """
    card = get_flashcard(card_id, user_id)
    if card is None:
        raise FlashcardNotFoundError(card_id)

    update = update_flashcard_srs(
        card.ease_factor,
        card.interval,
        card.repetitions,
        quality,
        today=today,
    )
    reviewed = save_review(
        card_id,
        ease_factor=update.ease_factor,
        interval=update.interval,
        repetitions=update.repetitions,
        next_review_date=update.next_review_date.isoformat(),
    )

    logger.info(
        "flashcard_reviewed",
        card_id=card_id,
        quality=QUALITY_LABELS[quality],
        interval=update.interval,
        next_review=update.next_review_date.isoformat(),
    )

    return reviewed


def get_due_flashcards(user_id: str, today: date | None = None) -> list[FlashcardRecord]:
    """Cards due for review on or before today (new cards included)."""
    if today is None:
        today = date.today()
    return list_due_flashcards(user_id, today.isoformat())
