"""Summaries of video transcripts and documents."""

from __future__ import annotations

import structlog

from summaryr.config.app_config import load_app_config
from summaryr.core.generation import GenerationError, resolve_client
from summaryr.core.study_sources import StudySource, load_study_source
from summaryr.db.database import SourceKind
from summaryr.db.study_repository import upsert_summary
from summaryr.llm.client import LLMClient, LLMError

logger = structlog.get_logger(__name__)

SYSTEM_PROMPT_VIDEO_SUMMARY = (
    "You are a helpful assistant that creates concise, well-structured summaries of "
    "educational video content. Focus on key concepts, main points, and important details."
)

USER_PROMPT_VIDEO_SUMMARY = (
    "Create a comprehensive summary of this video transcript:\n\n{content}\n\n"
    "Format the summary with clear sections and bullet points where appropriate."
)

SYSTEM_PROMPT_DOCUMENT_SUMMARY = (
    "You are a helpful assistant that creates comprehensive summaries of documents. "
    "Create a well-structured summary with key points, main ideas, and important details."
)

USER_PROMPT_DOCUMENT_SUMMARY = (
    "Please create a comprehensive summary of the following document:\n\n{content}"
)

VIDEO_SUMMARY_MAX_TOKENS = 1000
DOCUMENT_SUMMARY_MAX_TOKENS = 2000
TRUNCATION_MARKER = "\n\n[Content truncated...]"


def truncate_for_summary(text: str, max_chars: int) -> str:
    """Cut text at max_chars, marking the cut."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


def summarize_source(source: StudySource, client: LLMClient) -> str:
    """Ask the model for a summary of a loaded source.

    Raises:
        GenerationError: If the model fails or returns nothing
    """
    if source.kind == "video":
        system = SYSTEM_PROMPT_VIDEO_SUMMARY
        user = USER_PROMPT_VIDEO_SUMMARY.format(content=source.full_text)
        max_tokens = VIDEO_SUMMARY_MAX_TOKENS
    else:
        max_chars = load_app_config().processing.max_summary_chars
        system = SYSTEM_PROMPT_DOCUMENT_SUMMARY
        user = USER_PROMPT_DOCUMENT_SUMMARY.format(
            content=truncate_for_summary(source.full_text, max_chars)
        )
        max_tokens = DOCUMENT_SUMMARY_MAX_TOKENS

    try:
        content = client.simple_chat(
            system_prompt=system,
            user_message=user,
            temperature=0.7,
            max_tokens=max_tokens,
        )
    except LLMError as e:
        logger.error("summary_generation_failed", kind=source.kind, error=str(e))
        raise GenerationError(f"Summary generation failed: {e}") from e

    content = content.strip()
    if not content:
        raise GenerationError("Failed to generate summary")
    return content


def generate_summary_for_source(
    kind: SourceKind,
    source_id: str,
    user_id: str,
    client: LLMClient | None = None,
) -> str:
    """Generate a summary and store it, replacing any earlier one.

    Raises:
        NotFoundError, NotReadyError: If the source cannot be used
        GenerationError: If generation fails
    """
    source = load_study_source(kind, source_id, user_id)
    content = summarize_source(source, resolve_client(client))
    upsert_summary(kind, source_id, user_id, content)

    logger.info("summary_generated", kind=kind, source_id=source_id, chars=len(content))
    return content
