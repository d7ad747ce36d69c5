"""Tests for quiz grading and attempts."""

import pytest

from summaryr.core.quiz import grade_quiz, is_correct, submit_quiz_attempt
from summaryr.core.study_sources import NotFoundError
from summaryr.db.study_repository import QuestionRecord, list_quiz_attempts, replace_questions


def question(qid: str, answer: str) -> QuestionRecord:
    return QuestionRecord(id=qid, type="short_answer", question=f"Question {qid}?", correct_answer=answer)


class TestGrading:
    def test_case_and_whitespace_insensitive(self):
        assert is_correct("  oxygen ", "Oxygen")
        assert not is_correct("Carbon", "Oxygen")
        assert not is_correct(None, "Oxygen")

    def test_rounded_percentage(self):
        questions = [question("a", "1"), question("b", "2"), question("c", "3")]

        result = grade_quiz(questions, {"a": "1", "b": "2", "c": "x"})

        assert result.correct_count == 2
        assert result.total_questions == 3
        assert result.score == 67
        assert result.correct_ids == ["a", "b"]

    def test_half_rounds_up(self):
        questions = [question(str(i), "ok") for i in range(8)]
        answers = {"0": "ok", "1": "ok", "2": "ok"}

        assert grade_quiz(questions, answers).score == 38

    def test_unanswered_questions_are_wrong(self):
        result = grade_quiz([question("a", "1"), question("b", "2")], {"a": "1"})
        assert result.score == 50

    def test_empty_quiz(self):
        assert grade_quiz([], {}).score == 0


class TestSubmitQuizAttempt:
    @pytest.fixture
    def video_with_questions(self, ready_video, user_id):
        video = ready_video()
        stored = replace_questions(
            "video",
            video.id,
            user_id,
            [
                {"type": "true_false", "question": "Plants need light.", "correct_answer": "True"},
                {"type": "short_answer", "question": "Gas released?", "correct_answer": "Oxygen"},
            ],
        )
        return video, stored

    def test_records_attempt(self, video_with_questions, user_id):
        video, stored = video_with_questions
        answers = {stored[0].id: "true", stored[1].id: "nitrogen"}

        attempt, result = submit_quiz_attempt("video", video.id, user_id, answers, time_taken=42)

        assert result.score == 50
        assert result.correct_ids == [stored[0].id]
        assert attempt.time_taken == 42

        attempts = list_quiz_attempts("video", video.id, user_id)
        assert len(attempts) == 1
        assert attempts[0].answers == answers

    def test_no_questions(self, ready_video, user_id):
        video = ready_video()

        with pytest.raises(ValueError):
            submit_quiz_attempt("video", video.id, user_id, {})

    def test_other_users_source(self, video_with_questions):
        video, _ = video_with_questions

        with pytest.raises(NotFoundError):
            submit_quiz_attempt("video", video.id, "intruder", {})
