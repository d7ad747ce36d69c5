"""Tests for language detection."""

from summaryr.core.language import detect_language, get_language_name
from summaryr.llm.client import LLMConnectionError

SPANISH_TEXT = (
    "La fotosíntesis es el proceso mediante el cual las plantas verdes transforman "
    "la energía de la luz en energía química. Este proceso ocurre en los cloroplastos "
    "y produce oxígeno como subproducto, lo que resulta esencial para la vida en la Tierra."
)


class TestDetectLanguage:
    def test_short_text_defaults_to_english(self, mock_llm_client):
        assert detect_language("hola", mock_llm_client) == "en"
        mock_llm_client.simple_chat.assert_not_called()

    def test_uses_model_answer(self, mock_llm_client):
        mock_llm_client.simple_chat.return_value = "nl"
        assert detect_language("Dit is een Nederlandse tekst over biologie.", mock_llm_client) == "nl"

    def test_normalizes_quoted_answer(self, mock_llm_client):
        mock_llm_client.simple_chat.return_value = ' "DE". '
        assert detect_language("Das ist ein deutscher Text über Biologie.", mock_llm_client) == "de"

    def test_invalid_answer_defaults_to_english(self, mock_llm_client):
        mock_llm_client.simple_chat.return_value = "The language is Dutch"
        assert detect_language("Dit is een Nederlandse tekst over biologie.", mock_llm_client) == "en"

    def test_sample_is_limited(self, mock_llm_client):
        detect_language("a" * 5000, mock_llm_client)

        user_message = mock_llm_client.simple_chat.call_args.kwargs["user_message"]
        assert user_message.endswith("a" * 1000)
        assert "a" * 1001 not in user_message

    def test_falls_back_to_langdetect(self, mock_llm_client):
        mock_llm_client.simple_chat.side_effect = LLMConnectionError("offline")
        assert detect_language(SPANISH_TEXT, mock_llm_client) == "es"

    def test_offline_without_client(self):
        assert detect_language(SPANISH_TEXT) == "es"


class TestLanguageName:
    def test_known(self):
        assert get_language_name("nl") == "Dutch"

    def test_unknown(self):
        assert get_language_name("xx") == "XX"
