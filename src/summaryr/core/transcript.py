"""Transcript text helpers.

Turns Whisper responses, caption tracks and plain text into timed segments.
"""

from __future__ import annotations

import re
from typing import Any

SENTENCE_BOUNDARY = re.compile(r"[.!?]+\s+")
SENTENCE_END = re.compile(r"[.!?]+")

# Spoken pace used when only text is available
WORDS_PER_SECOND = 2.5
SECONDS_PER_SENTENCE = 3
DEFAULT_RECORDING_SECONDS = 60


def segment_transcript(transcript: str, max_chunk_size: int = 2000) -> list[str]:
    """Pack sentences into chunks of at most max_chunk_size characters.

    A single sentence longer than the limit becomes its own chunk.
    """
    sentences = SENTENCE_BOUNDARY.split(transcript)
    chunks: list[str] = []
    current = ""

    for sentence in sentences:
        if len(current + sentence) > max_chunk_size and current:
            chunks.append(current.strip())
            current = sentence
        else:
            current += (". " if current else "") + sentence

    if current:
        chunks.append(current.strip())

    return chunks


def parse_whisper_verbose_response(response: dict[str, Any]) -> list[dict[str, Any]]:
    """Extract timed segments from a Whisper verbose_json response.

    Falls back to one segment spanning the whole duration when the response
    has text but no segments.
    """
    segments = response.get("segments")
    if isinstance(segments, list) and segments:
        return [
            {
                "text": seg.get("text") or "",
                "start": seg.get("start") or 0,
                "end": seg.get("end") or 0,
            }
            for seg in segments
        ]

    if response.get("text"):
        return [
            {
                "text": response["text"],
                "start": 0,
                "end": response.get("duration") or 0,
            }
        ]

    return []


def estimate_segments_from_text(transcript: str) -> list[dict[str, Any]]:
    """Estimate sentence timings for a transcript without timestamps."""
    sentences = [s for s in SENTENCE_BOUNDARY.split(transcript) if s.strip()]
    segments = []
    current_time = 0.0

    for sentence in sentences:
        duration = len(sentence.split()) / WORDS_PER_SECOND
        segments.append(
            {
                "text": sentence.strip(),
                "start": current_time,
                "end": current_time + duration,
            }
        )
        current_time += duration

    return segments


def split_into_timed_segments(
    transcript: str, duration: float | None = None
) -> tuple[list[dict[str, Any]], float]:
    """Spread the sentences of a live-recording transcript over its duration.

    Args:
        transcript: Accumulated transcript text
        duration: Known recording length in seconds (estimated when missing)

    Returns:
        (segments, duration used)
    """
    sentences = [s.strip() for s in SENTENCE_END.split(transcript) if s.strip()]
    total = duration or len(sentences) * SECONDS_PER_SENTENCE

    segments = [
        {
            "text": sentence,
            "start": (index * total) / len(sentences),
            "end": ((index + 1) * total) / len(sentences),
        }
        for index, sentence in enumerate(sentences)
    ]

    if not segments:
        total = total or DEFAULT_RECORDING_SECONDS
        segments = [{"text": transcript, "start": 0, "end": total}]

    return segments, total

