"""Tests for realtime chunks, recording finalization and video transcription."""

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from summaryr.core.file_store import save_upload
from summaryr.core.study_sources import NotFoundError
from summaryr.core.transcriber import (
    MODE_PROMPTS,
    InvalidChunkError,
    TranscriptionError,
    extract_youtube_id,
    fetch_youtube_captions,
    finalize_recording,
    recording_title,
    transcribe_chunk,
    transcribe_video,
)
from summaryr.db.videos_repository import create_video, get_segments, get_video, update_video
from summaryr.llm.client import LLMError

WAV_CHUNK = b"RIFF" + b"\x00" * 20000
WEBM_CHUNK = b"\x1a\x45\xdf\xa3" + b"\x00" * 20000
UNKNOWN_CHUNK = b"\x12\x34\x56\x78" + b"\x00" * 20000


class TestHelpers:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
            "https://www.youtube.com/v/dQw4w9WgXcQ",
            "https://m.youtube.com/watch?v=dQw4w9WgXcQ&t=42",
        ],
    )
    def test_extract_youtube_id(self, url):
        assert extract_youtube_id(url) == "dQw4w9WgXcQ"

    def test_extract_youtube_id_invalid(self):
        assert extract_youtube_id("https://vimeo.com/123") is None

    def test_recording_title(self):
        now = datetime(2025, 3, 10, 14, 5, 9)
        assert recording_title("lecture", "microphone", now) == "Lecture - Microphone Recording - 2025-03-10 14:05:09"
        assert recording_title("quick-notes", "system", now).startswith("Quick Notes - System Recording")


class TestTranscribeChunk:
    def test_empty_chunk_rejected(self, user_id, mock_llm_client):
        with pytest.raises(InvalidChunkError):
            transcribe_chunk(b"", user_id, client=mock_llm_client)

    def test_small_chunk_skipped(self, user_id, mock_llm_client):
        result = transcribe_chunk(b"RIFF" + b"\x00" * 100, user_id, client=mock_llm_client)

        assert result.skipped is True
        assert result.transcript == ""
        assert result.video_id is None
        mock_llm_client.transcribe.assert_not_called()

    def test_webm_chunk_skipped(self, user_id, mock_llm_client):
        result = transcribe_chunk(WEBM_CHUNK, user_id, declared_type="audio/wav", client=mock_llm_client)

        assert result.skipped is True
        mock_llm_client.transcribe.assert_not_called()

    def test_unknown_bytes_declared_webm_skipped(self, user_id, mock_llm_client):
        result = transcribe_chunk(UNKNOWN_CHUNK, user_id, declared_type="audio/webm;codecs=opus", client=mock_llm_client)

        assert result.skipped is True

    def test_unknown_bytes_sent_as_wav(self, user_id, mock_llm_client):
        transcribe_chunk(UNKNOWN_CHUNK, user_id, client=mock_llm_client)

        kwargs = mock_llm_client.transcribe.call_args.kwargs
        assert kwargs["filename"] == "audio.wav"
        assert kwargs["mime_type"] == "audio/wav"
        assert kwargs["response_format"] == "text"

    def test_first_chunk_creates_video(self, user_id, mock_llm_client):
        result = transcribe_chunk(WAV_CHUNK, user_id, mode="meeting", source="system", client=mock_llm_client)

        assert result.transcript == "Hello from the recording."
        assert result.skipped is False

        video = get_video(result.video_id, user_id)
        assert video.status == "transcribing"
        assert video.title.startswith("Meeting - System Recording - ")
        assert video.description == "Real-time audio recording from system (Meeting mode)"
        assert mock_llm_client.transcribe.call_args.kwargs["prompt"] == MODE_PROMPTS["meeting"]

    def test_next_chunk_reuses_video(self, user_id, mock_llm_client):
        first = transcribe_chunk(WAV_CHUNK, user_id, client=mock_llm_client)
        second = transcribe_chunk(WAV_CHUNK, user_id, video_id=first.video_id, client=mock_llm_client)

        assert second.video_id == first.video_id

    def test_unknown_mode_uses_general_prompt(self, user_id, mock_llm_client):
        transcribe_chunk(WAV_CHUNK, user_id, mode="karaoke", client=mock_llm_client)
        assert mock_llm_client.transcribe.call_args.kwargs["prompt"] == MODE_PROMPTS["general"]

    def test_whisper_failure(self, user_id, mock_llm_client):
        mock_llm_client.transcribe.side_effect = LLMError("rate limited")

        with pytest.raises(TranscriptionError):
            transcribe_chunk(WAV_CHUNK, user_id, client=mock_llm_client)

    def test_no_api_key(self, user_id):
        with pytest.raises(TranscriptionError):
            transcribe_chunk(WAV_CHUNK, user_id)


class TestFinalizeRecording:
    def test_creates_segments(self, user_id):
        video = create_video(user_id=user_id, title="Live", status="transcribing")

        result = finalize_recording(video.id, user_id, "First point. Second point. Third point.")

        assert result.segments_count == 3
        assert result.duration == 9

        stored = get_video(video.id)
        assert stored.status == "ready"
        assert stored.duration == 9
        assert [s.text for s in get_segments(video.id)] == ["First point", "Second point", "Third point"]

    def test_uses_known_duration(self, user_id):
        video = create_video(user_id=user_id, title="Live", status="transcribing")
        update_video(video.id, duration=20.0)

        result = finalize_recording(video.id, user_id, "One. Two.")

        assert result.duration == 20.0
        assert get_segments(video.id)[1].start_time == pytest.approx(10.0)

    def test_other_users_video(self, user_id):
        video = create_video(user_id=user_id, title="Live", status="transcribing")

        with pytest.raises(NotFoundError):
            finalize_recording(video.id, "intruder", "Text.")


def _fake_youtube_api(raw):
    api = MagicMock()
    api.return_value.fetch.return_value.to_raw_data.return_value = raw
    return api


class TestYouTube:
    RAW = [
        {"text": "Welcome to\nthe course", "start": 0.0, "duration": 4.0},
        {"text": "Today: cells", "start": 3.5, "duration": 2.0},
        {"text": "   ", "start": 5.5, "duration": 1.0},
    ]

    def test_caption_timing(self):
        with patch("summaryr.core.transcriber.YouTubeTranscriptApi", _fake_youtube_api(self.RAW)):
            segments = fetch_youtube_captions("abc123")

        assert segments == [
            {"text": "Welcome to the course", "start": 0.0, "end": 3.5},
            {"text": "Today: cells", "start": 3.5, "end": 5.5},
        ]

    def test_transcribe_youtube_video(self, user_id):
        video = create_video(
            user_id=user_id,
            title="Course",
            status="processing",
            youtube_url="https://www.youtube.com/watch?v=abc123",
        )
        api = _fake_youtube_api(self.RAW)

        with patch("summaryr.core.transcriber.YouTubeTranscriptApi", api):
            result = transcribe_video(video.id)

        api.return_value.fetch.assert_called_once_with("abc123")
        assert result.source == "youtube"
        assert result.segments_count == 2
        assert get_video(video.id).status == "ready"

    def test_captions_unavailable(self, user_id):
        video = create_video(
            user_id=user_id, title="Course", status="processing", youtube_url="https://youtu.be/abc123"
        )
        api = MagicMock()
        api.return_value.fetch.side_effect = RuntimeError("Subtitles are disabled for this video")

        with patch("summaryr.core.transcriber.YouTubeTranscriptApi", api):
            with pytest.raises(TranscriptionError):
                transcribe_video(video.id)

        stored = get_video(video.id)
        assert stored.status == "error"
        assert "Subtitles are disabled" in stored.error_message


class TestTranscribeUploadedVideo:
    def _stored_video(self, user_id, data: bytes):
        video = create_video(user_id=user_id, title="Lecture.mp3", status="processing")
        path = save_upload("videos", user_id, video.id, "mp3", data)
        update_video(video.id, video_path=str(path))
        return video

    def test_whisper_segments(self, user_id, mock_llm_client):
        video = self._stored_video(user_id, b"\xff\xfb\x90\x00" + b"\x00" * 100)
        mock_llm_client.transcribe.return_value = {
            "text": "Hello. World.",
            "duration": 4.0,
            "segments": [
                {"text": "Hello.", "start": 0.0, "end": 2.0},
                {"text": "World.", "start": 2.0, "end": 4.0},
            ],
        }

        result = transcribe_video(video.id, client=mock_llm_client)

        assert result.source == "whisper"
        assert result.segments_count == 2
        assert result.duration == 4.0
        kwargs = mock_llm_client.transcribe.call_args.kwargs
        assert kwargs["filename"] == "video.mp3"
        assert kwargs["response_format"] == "verbose_json"

        stored = get_video(video.id)
        assert stored.status == "ready"
        assert stored.duration == 4.0

    def test_missing_file(self, user_id, mock_llm_client):
        video = create_video(user_id=user_id, title="Lost", status="processing")

        with pytest.raises(TranscriptionError):
            transcribe_video(video.id, client=mock_llm_client)

        assert get_video(video.id).error_message == "Video file not found"

    def test_no_text(self, user_id, mock_llm_client):
        video = self._stored_video(user_id, b"\xff\xfb\x90\x00" + b"\x00" * 100)
        mock_llm_client.transcribe.return_value = {"text": ""}

        with pytest.raises(TranscriptionError):
            transcribe_video(video.id, client=mock_llm_client)

        assert get_video(video.id).status == "error"

    def test_unknown_video(self):
        with pytest.raises(TranscriptionError):
            transcribe_video("missing")
