"""Tests for spaced repetition scheduling."""

from datetime import date

import pytest

from summaryr.core.srs import (
    FlashcardNotFoundError,
    _round_half_up,
    get_due_flashcards,
    review_flashcard,
    update_flashcard_srs,
)
from summaryr.db.flashcards_repository import get_flashcard, replace_flashcards

TODAY = date(2025, 3, 10)


class TestUpdateFlashcardSRS:
    """Tests for update_flashcard_srs."""

    def test_first_good_review(self):
        """A new card graded Good is due tomorrow with unchanged ease."""
        update = update_flashcard_srs(2.5, 0, 0, quality=2, today=TODAY)

        assert update.ease_factor == pytest.approx(2.5)
        assert update.interval == 1
        assert update.repetitions == 1
        assert update.next_review_date == date(2025, 3, 11)

    def test_easy_raises_ease(self):
        update = update_flashcard_srs(2.5, 0, 0, quality=3, today=TODAY)

        assert update.ease_factor == pytest.approx(2.6)
        assert update.interval == 1

    def test_second_success_interval_six(self):
        update = update_flashcard_srs(2.5, 1, 1, quality=2, today=TODAY)

        assert update.interval == 6
        assert update.repetitions == 2
        assert update.next_review_date == date(2025, 3, 16)

    def test_later_success_multiplies_interval(self):
        """From the third success on, interval grows by the ease factor."""
        update = update_flashcard_srs(2.5, 6, 2, quality=2, today=TODAY)

        assert update.interval == 15
        assert update.repetitions == 3

    @pytest.mark.parametrize("quality", [0, 1])
    def test_failure_resets(self, quality):
        """Again and Hard reset repetitions and keep the ease factor."""
        update = update_flashcard_srs(2.2, 15, 4, quality=quality, today=TODAY)

        assert update.repetitions == 0
        assert update.interval == 1
        assert update.ease_factor == 2.2
        assert update.next_review_date == date(2025, 3, 11)

    def test_ease_floor(self):
        update = update_flashcard_srs(1.0, 0, 0, quality=2, today=TODAY)
        assert update.ease_factor == 1.3

    @pytest.mark.parametrize("quality", [-1, 4, 5])
    def test_invalid_quality(self, quality):
        with pytest.raises(ValueError):
            update_flashcard_srs(2.5, 0, 0, quality=quality, today=TODAY)

    def test_half_rounds_up(self):
        assert _round_half_up(2.5) == 3
        assert _round_half_up(3.5) == 4
        assert _round_half_up(2.49) == 2


class TestReviewFlashcard:
    """Tests for persisted reviews."""

    @pytest.fixture
    def card_id(self, ready_video, user_id):
        video = ready_video()
        cards = replace_flashcards("video", video.id, user_id, [("Q1", "A1"), ("Q2", "A2")])
        return cards[0].id

    def test_review_persists_schedule(self, card_id, user_id):
        card = review_flashcard(card_id, user_id, quality=2, today=TODAY)

        assert card.repetitions == 1
        assert card.interval == 1
        assert card.next_review_date == "2025-03-11"
        assert card.last_reviewed_at is not None

        stored = get_flashcard(card_id, user_id)
        assert stored is not None
        assert stored.repetitions == 1

    def test_review_other_users_card(self, card_id):
        with pytest.raises(FlashcardNotFoundError):
            review_flashcard(card_id, "someone-else", quality=2, today=TODAY)

    def test_due_cards(self, card_id, user_id):
        """New cards are due; reviewed cards are due from their review date."""
        assert len(get_due_flashcards(user_id, today=TODAY)) == 2

        review_flashcard(card_id, user_id, quality=2, today=TODAY)

        due_today = get_due_flashcards(user_id, today=TODAY)
        assert [c.id for c in due_today if c.id == card_id] == []
        assert len(due_today) == 1

        due_tomorrow = get_due_flashcards(user_id, today=date(2025, 3, 11))
        assert card_id in [c.id for c in due_tomorrow]
