"""Flashcard generation from transcripts and document text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from summaryr.config.app_config import load_app_config
from summaryr.core.generation import GenerationError, extract_items, resolve_client, split_text
from summaryr.core.study_sources import load_study_source
from summaryr.db.database import SourceKind
from summaryr.db.flashcards_repository import FlashcardRecord, replace_flashcards
from summaryr.llm.client import LLMClient, LLMError

logger = structlog.get_logger(__name__)

SYSTEM_PROMPT_FLASHCARDS = (
    "You are an educational assistant that creates high-quality flashcards from "
    'transcripts. Always return a valid JSON object with a "flashcards" array.'
)

USER_PROMPT_FLASHCARDS = """Create educational flashcards from the following transcript.
Generate 15-25 high-quality flashcards that cover key concepts, definitions, facts, and important information.

For each flashcard:
- Front: A clear question or prompt
- Back: A concise, accurate answer

Format your response as a JSON object with a "flashcards" array of objects with "front" and "back" properties.
Example:
{{"flashcards": [
  {{"front": "What is X?", "back": "X is..."}},
  {{"front": "Define Y", "back": "Y is..."}}
]}}

Transcript:
{content}

Return ONLY the JSON, no additional text."""


@dataclass
class Flashcard:
    front: str
    back: str


def _parse_flashcards(raw: Any) -> list[Flashcard]:
    cards = []
    for item in extract_items(raw, "flashcards"):
        if not isinstance(item, dict):
            continue
        front = str(item.get("front") or "").strip()
        back = str(item.get("back") or "").strip()
        if front and back:
            cards.append(Flashcard(front=front, back=back))
    return cards


def generate_flashcards(texts: list[str], client: LLMClient) -> list[Flashcard]:
    """Ask the model for flashcards covering the given texts.

    Raises:
        GenerationError: If the model call fails or returns invalid JSON
    """
    content = "\n\n".join(texts)

    try:
        raw = client.simple_json(
            system_prompt=SYSTEM_PROMPT_FLASHCARDS,
            user_message=USER_PROMPT_FLASHCARDS.format(content=content),
            temperature=0.7,
        )
    except LLMError as e:
        logger.error("flashcard_generation_failed", error=str(e))
        raise GenerationError(f"Flashcard generation failed: {e}") from e

    cards = _parse_flashcards(raw)
    logger.info("flashcards_generated", count=len(cards), chars=len(content))
    return cards


def generate_flashcards_for_source(
    kind: SourceKind,
    source_id: str,
    user_id: str,
    client: LLMClient | None = None,
) -> list[FlashcardRecord]:
    """Generate and store a fresh flashcard set for a video or document.

    Video transcripts go to the model in one request. Document text is sent
    in fixed-size chunks and the combined set is capped.

    Raises:
        NotFoundError, NotReadyError: If the source cannot be used
        GenerationError: If generation fails
    """
    source = load_study_source(kind, source_id, user_id)
    client = resolve_client(client)

    if kind == "video":
        cards = generate_flashcards(source.texts, client)
    else:
        settings = load_app_config().processing
        cards = []
        for chunk in split_text(source.full_text, settings.generation_chunk_size):
            cards.extend(generate_flashcards([chunk], client))
            if len(cards) >= settings.max_document_flashcards:
                break
        cards = cards[: settings.max_document_flashcards]

    if not cards:
        raise GenerationError("No flashcards were generated")

    return replace_flashcards(
        kind, source_id, user_id, [(card.front, card.back) for card in cards]
    )
