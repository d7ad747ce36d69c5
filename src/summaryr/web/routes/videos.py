"""Video endpoints: upload, lookup, deletion and transcription."""

from pathlib import Path

import structlog
from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Form,
    HTTPException,
    UploadFile,
    status,
)

from summaryr.core.file_store import delete_file, save_upload
from summaryr.core.transcriber import TranscriptionError, extract_youtube_id, transcribe_video
from summaryr.db.videos_repository import (
    VideoRecord,
    create_video,
    delete_video,
    get_segments,
    get_video,
    list_videos,
    update_video,
)
from summaryr.llm.client import LLMClient
from summaryr.web.deps import get_current_user, get_llm
from summaryr.web.schemas import (
    SegmentResponse,
    TranscribeResponse,
    VideoDetail,
    VideoListResponse,
    VideoRequest,
    VideoResponse,
    VideoUploadResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["videos"])

DEFAULT_VIDEO_EXTENSION = "mp4"


def run_video_transcription(video_id: str, client: LLMClient | None) -> None:
    """Background task: transcribe and leave the outcome in the video status."""
    try:
        transcribe_video(video_id, client=client)
    except TranscriptionError as e:
        logger.warning("background_transcription_failed", video_id=video_id, error=str(e))


async def _store_uploaded_video(
    file: UploadFile, user_id: str, title: str | None, description: str | None
) -> VideoRecord:
    data = await file.read()
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty",
        )
    video = create_video(
        user_id=user_id,
        title=title or file.filename or "Untitled Video",
        description=description,
        file_size=len(data),
    )
    extension = Path(file.filename or "").suffix.lstrip(".") or DEFAULT_VIDEO_EXTENSION
    path = save_upload("videos", user_id, video.id, extension, data)
    update_video(video.id, video_path=str(path))
    return video


@router.post("/upload", response_model=VideoUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_video(
    background_tasks: BackgroundTasks,
    file: UploadFile | None = File(default=None),
    youtube_url: str | None = Form(default=None),
    title: str | None = Form(default=None),
    description: str | None = Form(default=None),
    user_id: str = Depends(get_current_user),
    llm: LLMClient | None = Depends(get_llm),
) -> VideoUploadResponse:
    """Register a video from an uploaded file or a YouTube link.

    Transcription runs in the background; poll GET /api/videos/{id}.
    """
    if file is not None:
        video = await _store_uploaded_video(file, user_id, title, description)
    elif youtube_url:
        if extract_youtube_id(youtube_url) is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid YouTube URL",
            )
        video = create_video(
            user_id=user_id,
            title=title or "Untitled Video",
            description=description,
            youtube_url=youtube_url,
        )
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File or YouTube URL required",
        )

    update_video(video.id, status="processing")
    background_tasks.add_task(run_video_transcription, video.id, llm)

    logger.info("video_uploaded", video_id=video.id, youtube=file is None)
    return VideoUploadResponse(video_id=video.id, status="processing")


@router.get("/videos", response_model=VideoListResponse)
async def list_user_videos(user_id: str = Depends(get_current_user)) -> VideoListResponse:
    """List the caller's videos."""
    videos = [VideoResponse.model_validate(v) for v in list_videos(user_id)]
    return VideoListResponse(videos=videos, count=len(videos))


@router.get("/videos/{video_id}", response_model=VideoDetail)
async def get_video_detail(
    video_id: str, user_id: str = Depends(get_current_user)
) -> VideoDetail:
    """Get a video with its transcript segments."""
    video = get_video(video_id, user_id)
    if video is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Video not found",
        )

    detail = VideoDetail.model_validate(video)
    detail.segments = [SegmentResponse.model_validate(s) for s in get_segments(video_id)]
    return detail


@router.delete("/videos/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_video(video_id: str, user_id: str = Depends(get_current_user)) -> None:
    """Delete a video, its stored file and everything generated from it."""
    video = get_video(video_id, user_id)
    if video is None or not delete_video(video_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Video not found",
        )
    delete_file(video.video_path)


@router.post("/process/transcribe", response_model=TranscribeResponse)
def retry_transcription(
    body: VideoRequest,
    user_id: str = Depends(get_current_user),
    llm: LLMClient | None = Depends(get_llm),
) -> TranscribeResponse:
    """Run transcription now and wait for the result."""
    if get_video(body.video_id, user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Video not found",
        )

    result = transcribe_video(body.video_id, client=llm)
    return TranscribeResponse(
        video_id=result.video_id,
        segments_count=result.segments_count,
        source=result.source,
    )
