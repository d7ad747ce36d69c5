"""Audio and video transcription.

Three entry points:
- transcribe_chunk: one chunk of a live recording, sent to Whisper as text
- finalize_recording: turns the accumulated live transcript into timed segments
- transcribe_video: uploaded media via Whisper, YouTube links via captions
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog
from youtube_transcript_api import YouTubeTranscriptApi

from summaryr.config.app_config import load_app_config
from summaryr.core.audio_format import MP3, WAV, WEBM, AudioFormat, sniff_audio_format
from summaryr.core.file_store import read_file
from summaryr.core.study_sources import NotFoundError
from summaryr.core.transcript import parse_whisper_verbose_response, split_into_timed_segments
from summaryr.db.videos_repository import (
    create_video,
    get_video,
    replace_segments,
    set_video_status,
    update_video,
)
from summaryr.llm.client import LLMClient, LLMError, get_llm_client

logger = structlog.get_logger(__name__)

# Whisper upload limit
WHISPER_MAX_BYTES = 25 * 1024 * 1024

MODE_NAMES = {
    "interview": "Interview",
    "meeting": "Meeting",
    "lecture": "Lecture",
    "podcast": "Podcast",
    "quick-notes": "Quick Notes",
    "general": "General",
}

MODE_PROMPTS = {
    "interview": "This is an interview conversation between two people. Transcribe clearly with proper punctuation.",
    "meeting": "This is a meeting with multiple speakers. Transcribe all speakers clearly.",
    "lecture": "This is an educational lecture or presentation. Transcribe with proper structure and formatting.",
    "podcast": "This is a podcast or long-form conversation. Transcribe naturally with proper punctuation.",
    "quick-notes": "This is a quick voice note. Transcribe concisely.",
    "general": "Transcribe this audio clearly.",
}

YOUTUBE_ID_PATTERN = re.compile(
    r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/v/|m\.youtube\.com/watch\?v=)"
    r"([^&\n?#]+)"
)


class TranscriptionError(Exception):
    """Raised when audio or a video cannot be transcribed."""

    pass


class InvalidChunkError(TranscriptionError):
    """Raised for a realtime chunk that carries no audio at all."""

    pass


@dataclass
class ChunkResult:
    """Outcome of one realtime chunk."""

    video_id: str | None
    transcript: str
    skipped: bool = False


@dataclass
class FinalizeResult:
    video_id: str
    segments_count: int
    duration: float


@dataclass
class VideoTranscriptionResult:
    video_id: str
    segments_count: int
    duration: float | None
    source: str  # "youtube" or "whisper"


def extract_youtube_id(url: str) -> str | None:
    """Video ID from a watch, youtu.be, embed, v/ or mobile URL."""
    match = YOUTUBE_ID_PATTERN.search(url)
    return match.group(1) if match else None


def recording_title(mode: str, source: str, now: datetime | None = None) -> str:
    """Title for a video created from a live recording."""
    now = now or datetime.now()
    mode_name = MODE_NAMES.get(mode, MODE_NAMES["general"])
    device = "Microphone" if source == "microphone" else "System"
    return f"{mode_name} - {device} Recording - {now.strftime('%Y-%m-%d %H:%M:%S')}"


def _chunk_format(audio: bytes, declared_type: str | None) -> AudioFormat | None:
    """Format to send for a realtime chunk, None when it must be skipped."""
    detected = sniff_audio_format(audio)

    # MediaRecorder webm fragments lack headers Whisper needs
    if detected == WEBM:
        return None
    if detected is None or detected.name not in ("wav", "mp3", "ogg"):
        if declared_type and "webm" in declared_type:
            return None
        return WAV
    return detected


def transcribe_chunk(
    audio: bytes,
    user_id: str,
    declared_type: str | None = None,
    mode: str = "general",
    source: str = "microphone",
    video_id: str | None = None,
    client: LLMClient | None = None,
) -> ChunkResult:
    """Transcribe one chunk of a live recording.

    Small chunks and webm fragments are skipped with an empty transcript.
    A video record in "transcribing" status is created for the first chunk.

    Args:
        audio: Chunk bytes
        user_id: Recording owner
        declared_type: Content type reported by the client
        mode: Recording mode, selects the Whisper prompt
        source: "microphone" or "system"
        video_id: Video of an ongoing recording
        client: Whisper client (configured client if None)

    Raises:
        InvalidChunkError: If the chunk is empty
        TranscriptionError: If Whisper fails
    """
    if not audio:
        raise InvalidChunkError("Audio file is empty")

    settings = load_app_config().transcription
    if len(audio) < settings.min_chunk_bytes:
        logger.debug("realtime_chunk_skipped", reason="too_small", size_bytes=len(audio))
        return ChunkResult(video_id=video_id, transcript="", skipped=True)

    audio_format = _chunk_format(audio, declared_type)
    if audio_format is None:
        logger.debug("realtime_chunk_skipped", reason="webm", size_bytes=len(audio))
        return ChunkResult(video_id=video_id, transcript="", skipped=True)

    if mode not in MODE_PROMPTS:
        mode = settings.default_mode

    if video_id is None:
        mode_name = MODE_NAMES.get(mode, MODE_NAMES["general"])
        video = create_video(
            user_id=user_id,
            title=recording_title(mode, source),
            status="transcribing",
            description=f"Real-time audio recording from {source} ({mode_name} mode)",
        )
        video_id = video.id
        logger.info("realtime_recording_started", video_id=video_id, mode=mode, source=source)

    if client is None:
        client = _whisper_client()

    try:
        response = client.transcribe(
            audio,
            filename=f"audio.{audio_format.extension}",
            mime_type=audio_format.mime_type,
            response_format="text",
            prompt=MODE_PROMPTS[mode],
        )
    except LLMError as e:
        logger.error("realtime_transcription_failed", video_id=video_id, error=str(e))
        raise TranscriptionError(str(e)) from e

    text = (response.get("text") or "").strip()
    logger.info("realtime_chunk_transcribed", video_id=video_id, chars=len(text))
    return ChunkResult(video_id=video_id, transcript=text)


def finalize_recording(video_id: str, user_id: str, transcript: str) -> FinalizeResult:
    """Store the transcript of a finished live recording as timed segments.

    Raises:
        NotFoundError: If the video does not belong to the user
    """
    video = get_video(video_id, user_id)
    if video is None:
        raise NotFoundError("video", video_id)

    segments, duration = split_into_timed_segments(transcript, video.duration)
    count = replace_segments(video_id, segments)
    update_video(video_id, status="ready", duration=duration, error_message=None)

    logger.info("realtime_recording_finalized", video_id=video_id, segments=count, duration=duration)
    return FinalizeResult(video_id=video_id, segments_count=count, duration=duration)


def fetch_youtube_captions(youtube_id: str) -> list[dict[str, Any]]:
    """Caption segments of a YouTube video.

    Each segment ends where the next one starts; the last one ends at its
    start plus its duration.
    """
    raw = YouTubeTranscriptApi().fetch(youtube_id).to_raw_data()

    segments = []
    for index, item in enumerate(raw):
        start = float(item.get("start") or 0)
        if index + 1 < len(raw):
            end = float(raw[index + 1].get("start") or start)
        else:
            end = start + float(item.get("duration") or 0)
        text = (item.get("text") or "").replace("\n", " ").strip()
        if text:
            segments.append({"text": text, "start": start, "end": end})
    return segments


def transcribe_video(video_id: str, client: LLMClient | None = None) -> VideoTranscriptionResult:
    """Transcribe a registered video and store its segments.

    Raises:
        TranscriptionError: On any failure; the video status is set to
            "error" before raising
    """
    video = get_video(video_id)
    if video is None:
        raise TranscriptionError(f"Video not found: {video_id}")

    set_video_status(video_id, "transcribing")
    logger.info("video.transcribing", video_id=video_id, youtube=bool(video.youtube_url))

    try:
        if video.youtube_url:
            segments, duration = _youtube_segments(video.youtube_url)
            source = "youtube"
        else:
            segments, duration = _whisper_segments(video.video_path, client)
            source = "whisper"

        if not segments:
            raise TranscriptionError("Transcription produced no text")

        count = replace_segments(video_id, segments)
        fields: dict[str, Any] = {"status": "ready", "error_message": None}
        if duration:
            fields["duration"] = duration
        update_video(video_id, **fields)
    except Exception as e:
        set_video_status(video_id, "error", error_message=str(e))
        logger.error("video.transcription_failed", video_id=video_id, error=str(e))
        if isinstance(e, TranscriptionError):
            raise
        raise TranscriptionError(str(e)) from e

    logger.info("video.transcribed", video_id=video_id, segments=count, source=source)
    return VideoTranscriptionResult(
        video_id=video_id, segments_count=count, duration=duration, source=source
    )


def _youtube_segments(url: str) -> tuple[list[dict[str, Any]], float | None]:
    youtube_id = extract_youtube_id(url)
    if youtube_id is None:
        raise TranscriptionError(
            "Invalid YouTube URL format. Supported formats: youtube.com/watch?v=..., "
            "youtu.be/..., youtube.com/embed/..."
        )

    segments = fetch_youtube_captions(youtube_id)
    duration = segments[-1]["end"] if segments else None
    return segments, duration


def _whisper_segments(
    video_path: str | None, client: LLMClient | None
) -> tuple[list[dict[str, Any]], float | None]:
    if not video_path or not Path(video_path).exists():
        raise TranscriptionError("Video file not found")

    audio = read_file(video_path)
    if not audio:
        raise TranscriptionError("Video file is empty")
    if len(audio) > WHISPER_MAX_BYTES:
        raise TranscriptionError("File is larger than the 25 MB Whisper limit")

    audio_format = sniff_audio_format(audio) or MP3

    if client is None:
        client = _whisper_client()

    response = client.transcribe(
        audio,
        filename=f"video.{audio_format.extension}",
        mime_type=audio_format.mime_type,
        response_format="verbose_json",
    )

    segments = parse_whisper_verbose_response(response)
    duration = response.get("duration") or (segments[-1]["end"] if segments else None)
    return segments, duration


def _whisper_client() -> LLMClient:
    try:
        return get_llm_client()
    except LLMError as e:
        raise TranscriptionError(str(e)) from e
