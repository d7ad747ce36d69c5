"""Content language detection.

The chat model is asked for an ISO 639-1 code. When the API call fails the
statistical detector from langdetect is used, and English is the final default.
"""

from __future__ import annotations

import re

import structlog
from langdetect import DetectorFactory, LangDetectException, detect

from summaryr.llm.client import LLMClient, LLMError

# Make langdetect deterministic
DetectorFactory.seed = 0

logger = structlog.get_logger(__name__)

DEFAULT_LANGUAGE = "en"
SAMPLE_CHARS = 1000
MIN_SAMPLE_CHARS = 10
LANGUAGE_CODE = re.compile(r"^[a-z]{2,3}$")

SYSTEM_PROMPT_LANGUAGE = (
    "You are a language detection assistant. Identify the primary language of the "
    "given text and respond with only the ISO 639-1 language code (e.g., \"en\" for "
    "English, \"nl\" for Dutch, \"de\" for German, \"fr\" for French, \"es\" for "
    "Spanish). If the language is unclear or mixed, respond with the most dominant "
    "language code."
)

LANGUAGE_NAMES = {
    "en": "English",
    "nl": "Dutch",
    "de": "German",
    "fr": "French",
    "es": "Spanish",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "ja": "Japanese",
    "zh": "Chinese",
    "ko": "Korean",
    "ar": "Arabic",
    "hi": "Hindi",
    "sv": "Swedish",
    "da": "Danish",
    "no": "Norwegian",
    "fi": "Finnish",
    "pl": "Polish",
    "tr": "Turkish",
    "cs": "Czech",
    "hu": "Hungarian",
    "ro": "Romanian",
    "el": "Greek",
    "he": "Hebrew",
    "th": "Thai",
    "vi": "Vietnamese",
}


def _detect_offline(sample: str) -> str:
    try:
        code = detect(sample).split("-")[0].lower()
    except LangDetectException:
        return DEFAULT_LANGUAGE
    return code if LANGUAGE_CODE.match(code) else DEFAULT_LANGUAGE


def detect_language(text: str, client: LLMClient | None = None) -> str:
    """Detect the primary language of text.

    Args:
        text: Any amount of text; only the first 1000 characters are used
        client: Chat client; without one only the offline detector runs

    Returns:
        ISO 639-1 code (2-3 lowercase letters), "en" when undetermined
    """
    sample = text[:SAMPLE_CHARS].strip()
    if len(sample) < MIN_SAMPLE_CHARS:
        return DEFAULT_LANGUAGE

    if client is None:
        return _detect_offline(sample)

    try:
        answer = client.simple_chat(
            system_prompt=SYSTEM_PROMPT_LANGUAGE,
            user_message=(
                "What is the language of this text? Respond with only the "
                f"ISO 639-1 language code:\n\n{sample}"
            ),
            temperature=0.1,
            max_tokens=10,
        )
    except LLMError as e:
        logger.warning("language_detection_llm_failed", error=str(e))
        return _detect_offline(sample)

    code = answer.strip().strip("\"'.").lower()
    if LANGUAGE_CODE.match(code):
        return code

    logger.warning("language_detection_invalid_code", answer=answer[:20])
    return DEFAULT_LANGUAGE


def get_language_name(code: str) -> str:
    """Display name for an ISO 639-1 code (upper-cased code if unknown)."""
    return LANGUAGE_NAMES.get(code, code.upper())
