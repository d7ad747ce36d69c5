"""Recording endpoints.

Clients either post a finished recording in one request, or post short
audio chunks while recording and finalize with the accumulated transcript
when the recording stops.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from summaryr.core.file_store import save_upload
from summaryr.core.transcriber import finalize_recording, transcribe_chunk, transcribe_video
from summaryr.db.videos_repository import create_video, get_segments, get_video, update_video
from summaryr.llm.client import LLMClient
from summaryr.web.deps import get_current_user, get_llm
from summaryr.web.schemas import (
    ChunkTranscriptResponse,
    FinalizeRequest,
    FinalizeResponse,
    RecordingTranscriptResponse,
)

router = APIRouter(prefix="/api/transcribe/audio", tags=["transcribe"])

DEFAULT_RECORDING_EXTENSION = "webm"


@router.post("", response_model=RecordingTranscriptResponse)
def transcribe_recording(
    audio: UploadFile = File(...),
    title: str | None = Form(default=None),
    source: str = Form(default="microphone"),
    user_id: str = Depends(get_current_user),
    llm: LLMClient | None = Depends(get_llm),
) -> RecordingTranscriptResponse:
    """Store a finished recording and transcribe it with Whisper before returning."""
    if not title or not title.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Title is required",
        )

    data = audio.file.read()
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Audio file is empty",
        )

    video = create_video(
        user_id=user_id,
        title=title.strip(),
        description=f"Audio recording from {source}",
        file_size=len(data),
        status="transcribing",
    )
    extension = Path(audio.filename or "").suffix.lstrip(".") or DEFAULT_RECORDING_EXTENSION
    path = save_upload("videos", user_id, video.id, extension, data)
    update_video(video.id, video_path=str(path))

    result = transcribe_video(video.id, client=llm)
    transcript = " ".join(segment.text for segment in get_segments(video.id))
    return RecordingTranscriptResponse(
        video_id=video.id,
        transcript=transcript,
        segments_count=result.segments_count,
    )


@router.post("/realtime", response_model=ChunkTranscriptResponse)
async def transcribe_realtime_chunk(
    audio: UploadFile = File(...),
    source: str = Form(default="microphone"),
    mode: str = Form(default="general"),
    video_id: str | None = Form(default=None),
    user_id: str = Depends(get_current_user),
    llm: LLMClient | None = Depends(get_llm),
) -> ChunkTranscriptResponse:
    """Transcribe one recording chunk.

    The first accepted chunk creates the recording's video; pass the returned
    video_id with every following chunk.
    """
    if video_id and get_video(video_id, user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Video not found",
        )

    data = await audio.read()
    result = await run_in_threadpool(
        transcribe_chunk,
        data,
        user_id,
        declared_type=audio.content_type,
        mode=mode,
        source=source,
        video_id=video_id or None,
        client=llm,
    )
    return ChunkTranscriptResponse(
        video_id=result.video_id,
        transcript=result.transcript,
        skipped=result.skipped,
    )


@router.post("/finalize", response_model=FinalizeResponse)
async def finalize_realtime_recording(
    body: FinalizeRequest,
    user_id: str = Depends(get_current_user),
) -> FinalizeResponse:
    """Store the full transcript of a finished recording as timed segments."""
    result = finalize_recording(body.video_id, user_id, body.transcript)
    return FinalizeResponse(
        video_id=result.video_id,
        segments_count=result.segments_count,
        duration=result.duration,
    )
