"""Summarize or explain a passage selected by the user."""

from __future__ import annotations

from typing import Literal

import structlog

from summaryr.core.generation import GenerationError, resolve_client
from summaryr.llm.client import LLMClient, LLMError

logger = structlog.get_logger(__name__)

AnalyzeAction = Literal["summarize", "explain"]

MIN_TEXT_CHARS = 10
ANALYZE_MAX_TOKENS = 500

PROMPTS: dict[str, tuple[str, str]] = {
    "summarize": (
        "You are a helpful assistant that creates concise summaries of educational "
        "content. Focus on key points and main ideas.",
        "Summarize the following text in a clear and concise way:\n\n{text}",
    ),
    "explain": (
        "You are a helpful educational assistant that explains concepts clearly and "
        "in detail. Break down complex ideas into simpler terms.",
        "Explain the following text in detail, making it easy to understand:\n\n{text}",
    ),
}


def analyze_text(text: str, action: str, client: LLMClient | None = None) -> str:
    """Run a summarize or explain action on a text selection.

    Raises:
        ValueError: If the action is unknown or the text is too short
        GenerationError: If the model fails or returns nothing
    """
    if action not in PROMPTS:
        raise ValueError(f"Invalid action: {action}")

    text = text.strip()
    if len(text) < MIN_TEXT_CHARS:
        raise ValueError(f"Text must be at least {MIN_TEXT_CHARS} characters")

    system, user_template = PROMPTS[action]
    client = resolve_client(client)

    try:
        result = client.simple_chat(
            system_prompt=system,
            user_message=user_template.format(text=text),
            temperature=0.7,
            max_tokens=ANALYZE_MAX_TOKENS,
        )
    except LLMError as e:
        logger.error("analyze_text_failed", action=action, error=str(e))
        raise GenerationError(f"Failed to analyze text: {e}") from e

    result = result.strip()
    if not result:
        raise GenerationError("Failed to generate response")

    logger.info("text_analyzed", action=action, chars=len(text))
    return result
