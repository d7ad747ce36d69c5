"""Tests for flashcard, question and summary generation and text analysis."""

import pytest

from summaryr.core.flashcard_generator import generate_flashcards, generate_flashcards_for_source
from summaryr.core.generation import GenerationError, extract_items, split_text
from summaryr.core.question_generator import build_prompts, generate_questions, generate_questions_for_source
from summaryr.core.study_sources import NotFoundError, NotReadyError, load_study_source
from summaryr.core.summary_generator import (
    DOCUMENT_SUMMARY_MAX_TOKENS,
    TRUNCATION_MARKER,
    VIDEO_SUMMARY_MAX_TOKENS,
    generate_summary_for_source,
    truncate_for_summary,
)
from summaryr.core.text_analyzer import ANALYZE_MAX_TOKENS, analyze_text
from summaryr.db.documents_repository import create_document
from summaryr.db.flashcards_repository import list_flashcards
from summaryr.db.study_repository import get_summary, list_questions
from summaryr.db.videos_repository import create_video
from summaryr.llm.client import LLMResponseError


def cards(n: int, prefix: str = "Q") -> dict:
    return {"flashcards": [{"front": f"{prefix}{i}", "back": f"A{i}"} for i in range(n)]}


QUESTIONS = {
    "questions": [
        {
            "type": "mcq",
            "question": "Where does photosynthesis happen?",
            "options": ["Chloroplast", "Nucleus", "Ribosome", "Vacuole"],
            "correct_answer": "Chloroplast",
            "explanation": "Chloroplasts hold chlorophyll.",
        },
        {"type": "true_false", "question": "Plants need light.", "correct_answer": True},
        {"type": "short_answer", "question": "Name the gas released.", "correct_answer": "Oxygen", "options": ["x"]},
        {"type": "fill_blank", "question": "Light energy becomes ___ energy.", "correct_answer": "chemical"},
        {"type": "essay", "question": "Discuss.", "correct_answer": "..."},
        {"type": "mcq", "question": "Only one option?", "options": ["A"], "correct_answer": "A"},
        {"type": "short_answer", "question": "", "correct_answer": "x"},
    ]
}


class TestGenerationHelpers:
    def test_split_text(self):
        assert split_text("abcdefg", 3) == ["abc", "def", "g"]

    def test_extract_items_variants(self):
        assert extract_items([1, 2], "flashcards") == [1, 2]
        assert extract_items({"flashcards": [1]}, "flashcards") == [1]
        assert extract_items({"cards": [3]}, "flashcards") == [3]
        assert extract_items({"a": [1], "b": [2]}, "flashcards") == []
        assert extract_items("nope", "flashcards") == []


class TestStudySources:
    def test_video_texts(self, ready_video, user_id):
        video = ready_video(["Part one.", "Part two."])
        source = load_study_source("video", video.id, user_id)

        assert source.texts == ["Part one.", "Part two."]
        assert source.full_text == "Part one. Part two."

    def test_video_not_ready(self, user_id):
        video = create_video(user_id=user_id, title="Pending", status="transcribing")

        with pytest.raises(NotReadyError):
            load_study_source("video", video.id, user_id)

    def test_other_users_document(self, ready_document):
        document = ready_document()

        with pytest.raises(NotFoundError):
            load_study_source("document", document.id, "intruder")

    def test_document_not_ready(self, user_id):
        document = create_document(user_id=user_id, title="a.pdf", file_type="pdf", status="processing")

        with pytest.raises(NotReadyError):
            load_study_source("document", document.id, user_id)

    def test_document_language(self, ready_document, user_id):
        document = ready_document(language="fr")
        assert load_study_source("document", document.id, user_id).language == "fr"


class TestFlashcards:
    def test_parse_drops_incomplete_cards(self, mock_llm_client):
        mock_llm_client.simple_json.return_value = {
            "flashcards": [
                {"front": "What is ATP?", "back": "Energy currency"},
                {"front": "No back"},
                {"front": "  ", "back": "No front"},
                "not a card",
            ]
        }

        result = generate_flashcards(["text"], mock_llm_client)

        assert [(c.front, c.back) for c in result] == [("What is ATP?", "Energy currency")]

    def test_llm_error(self, mock_llm_client):
        mock_llm_client.simple_json.side_effect = LLMResponseError("bad json")

        with pytest.raises(GenerationError):
            generate_flashcards(["text"], mock_llm_client)

    def test_video_single_request(self, ready_video, user_id, mock_llm_client):
        video = ready_video()
        mock_llm_client.simple_json.return_value = cards(3)

        stored = generate_flashcards_for_source("video", video.id, user_id, client=mock_llm_client)

        assert len(stored) == 3
        assert mock_llm_client.simple_json.call_count == 1
        assert "Photosynthesis converts light" in mock_llm_client.simple_json.call_args.kwargs["user_message"]

    def test_regenerating_replaces_set(self, ready_video, user_id, mock_llm_client):
        video = ready_video()
        mock_llm_client.simple_json.return_value = cards(3, prefix="Old")
        generate_flashcards_for_source("video", video.id, user_id, client=mock_llm_client)

        mock_llm_client.simple_json.return_value = cards(2, prefix="New")
        generate_flashcards_for_source("video", video.id, user_id, client=mock_llm_client)

        fronts = [c.front for c in list_flashcards("video", video.id, user_id)]
        assert fronts == ["New0", "New1"]

    def test_document_chunks_capped(self, ready_document, user_id, mock_llm_client):
        document = ready_document(text="x" * 35000)
        mock_llm_client.simple_json.return_value = cards(30)

        stored = generate_flashcards_for_source("document", document.id, user_id, client=mock_llm_client)

        assert len(stored) == 50
        assert mock_llm_client.simple_json.call_count == 2

    def test_nothing_generated(self, ready_video, user_id, mock_llm_client):
        video = ready_video()
        mock_llm_client.simple_json.return_value = {"flashcards": []}

        with pytest.raises(GenerationError):
            generate_flashcards_for_source("video", video.id, user_id, client=mock_llm_client)

    def test_no_client_configured(self, ready_video, user_id):
        video = ready_video()

        with pytest.raises(GenerationError):
            generate_flashcards_for_source("video", video.id, user_id)


class TestQuestions:
    def test_parses_and_filters(self, mock_llm_client):
        mock_llm_client.simple_json.return_value = QUESTIONS

        questions = generate_questions(["text"], mock_llm_client, count=5)

        assert [q.type for q in questions] == ["mcq", "true_false", "short_answer", "fill_blank"]
        assert questions[0].options == ["Chloroplast", "Nucleus", "Ribosome", "Vacuole"]
        assert questions[1].correct_answer == "True"
        assert questions[2].options is None

    def test_prompt_mentions_count_and_mix(self):
        system, user = build_prompts("Some content", 12, "en")

        assert "Create 12 diverse educational questions" in user
        assert "Multiple Choice Questions (MCQ): 40%" in user
        assert "Some content" in user
        assert "IMPORTANT" not in user
        assert "{language_rule}" not in system

    def test_prompt_for_other_language(self):
        system, user = build_prompts("Inhoud", 5, "nl")

        assert "(language code: nl)" in system
        assert "IMPORTANT: Respond in the same language as the transcript (language code: nl)" in user

    def test_document_language_reaches_prompt(self, ready_document, user_id, mock_llm_client):
        document = ready_document(language="de")
        mock_llm_client.simple_json.return_value = QUESTIONS

        generate_questions_for_source("document", document.id, user_id, count=3, client=mock_llm_client)

        assert "(language code: de)" in mock_llm_client.simple_json.call_args.kwargs["user_message"]

    def test_capped_at_count_and_stored(self, ready_video, user_id, mock_llm_client):
        video = ready_video()
        mock_llm_client.simple_json.return_value = QUESTIONS

        stored = generate_questions_for_source("video", video.id, user_id, count=2, client=mock_llm_client)

        assert len(stored) == 2
        assert stored[0].options == ["Chloroplast", "Nucleus", "Ribosome", "Vacuole"]
        assert len(list_questions("video", video.id, user_id)) == 2

    def test_default_count(self, ready_video, user_id, mock_llm_client):
        video = ready_video()
        mock_llm_client.simple_json.return_value = QUESTIONS

        generate_questions_for_source("video", video.id, user_id, client=mock_llm_client)

        assert "Create 20 diverse" in mock_llm_client.simple_json.call_args.kwargs["user_message"]

    def test_invalid_count(self, ready_video, user_id, mock_llm_client):
        video = ready_video()

        with pytest.raises(ValueError):
            generate_questions_for_source("video", video.id, user_id, count=0, client=mock_llm_client)


class TestSummary:
    def test_truncation(self):
        assert truncate_for_summary("short", 10) == "short"
        assert truncate_for_summary("abcdefghij", 4) == "abcd" + TRUNCATION_MARKER

    def test_video_summary_stored(self, ready_video, user_id, mock_llm_client):
        video = ready_video()
        mock_llm_client.simple_chat.return_value = "  ## Key points\n- Light to energy  "

        content = generate_summary_for_source("video", video.id, user_id, client=mock_llm_client)

        assert content == "## Key points\n- Light to energy"
        assert get_summary("video", video.id, user_id) == content
        assert mock_llm_client.simple_chat.call_args.kwargs["max_tokens"] == VIDEO_SUMMARY_MAX_TOKENS

    def test_document_summary_truncates(self, ready_document, user_id, mock_llm_client):
        document = ready_document(text="y" * 100050)
        mock_llm_client.simple_chat.return_value = "Summary"

        generate_summary_for_source("document", document.id, user_id, client=mock_llm_client)

        kwargs = mock_llm_client.simple_chat.call_args.kwargs
        assert kwargs["max_tokens"] == DOCUMENT_SUMMARY_MAX_TOKENS
        assert kwargs["user_message"].endswith(TRUNCATION_MARKER)

    def test_regenerate_replaces(self, ready_video, user_id, mock_llm_client):
        video = ready_video()
        mock_llm_client.simple_chat.return_value = "First"
        generate_summary_for_source("video", video.id, user_id, client=mock_llm_client)
        mock_llm_client.simple_chat.return_value = "Second"
        generate_summary_for_source("video", video.id, user_id, client=mock_llm_client)

        assert get_summary("video", video.id, user_id) == "Second"

    def test_empty_summary(self, ready_video, user_id, mock_llm_client):
        video = ready_video()
        mock_llm_client.simple_chat.return_value = "   "

        with pytest.raises(GenerationError):
            generate_summary_for_source("video", video.id, user_id, client=mock_llm_client)


class TestAnalyzeText:
    def test_explain(self, mock_llm_client):
        mock_llm_client.simple_chat.return_value = "It means plants make food from light."

        result = analyze_text("Photosynthesis is a process.", "explain", mock_llm_client)

        assert result == "It means plants make food from light."
        kwargs = mock_llm_client.simple_chat.call_args.kwargs
        assert kwargs["max_tokens"] == ANALYZE_MAX_TOKENS
        assert kwargs["user_message"].startswith("Explain the following text")

    def test_short_text(self, mock_llm_client):
        with pytest.raises(ValueError):
            analyze_text("   tiny   ", "summarize", mock_llm_client)

    def test_invalid_action(self, mock_llm_client):
        with pytest.raises(ValueError):
            analyze_text("Photosynthesis is a process.", "translate", mock_llm_client)

    def test_model_failure(self, mock_llm_client):
        mock_llm_client.simple_chat.side_effect = LLMResponseError("boom")

        with pytest.raises(GenerationError):
            analyze_text("Photosynthesis is a process.", "summarize", mock_llm_client)
