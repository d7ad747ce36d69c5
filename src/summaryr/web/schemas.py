"""Pydantic schemas for the Web API.

Request and response models for profiles, videos, documents, generated study
material, quizzes and notes.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for health check."""

    status: str
    version: str
    timestamp: str


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str
    message: str | None = None


# =============================================================================
# PROFILE SCHEMAS
# =============================================================================


class ProfileUpdate(BaseModel):
    email: str | None = Field(default=None, max_length=200)
    full_name: str | None = Field(default=None, max_length=200)


class ProfileResponse(BaseModel):
    user_id: str
    email: str | None
    full_name: str | None
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


# =============================================================================
# VIDEO SCHEMAS
# =============================================================================


class SegmentResponse(BaseModel):
    """A timed transcript segment."""

    segment_index: int
    start_time: float
    end_time: float
    text: str

    model_config = {"from_attributes": True}


class VideoResponse(BaseModel):
    """Video without its transcript."""

    id: str
    title: str
    description: str | None
    youtube_url: str | None
    file_size: int | None
    duration: float | None
    status: str
    error_message: str | None
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class VideoDetail(VideoResponse):
    """Video with its transcript segments."""

    segments: list[SegmentResponse] = Field(default_factory=list)


class VideoListResponse(BaseModel):
    videos: list[VideoResponse]
    count: int


class VideoUploadResponse(BaseModel):
    success: bool = True
    video_id: str
    status: str


class VideoRequest(BaseModel):
    """Body naming a video."""

    video_id: str = Field(..., min_length=1)


class TranscribeResponse(BaseModel):
    success: bool = True
    video_id: str
    segments_count: int
    source: str


class ChunkTranscriptResponse(BaseModel):
    """Result of one realtime chunk; transcript is empty for skipped chunks."""

    success: bool = True
    video_id: str | None
    transcript: str
    skipped: bool = False


class RecordingTranscriptResponse(BaseModel):
    """Transcript of a whole recording posted in one request."""

    success: bool = True
    video_id: str
    transcript: str
    segments_count: int


class FinalizeRequest(BaseModel):
    video_id: str = Field(..., min_length=1)
    transcript: str = Field(..., min_length=1)
    source: str | None = None


class FinalizeResponse(BaseModel):
    success: bool = True
    video_id: str
    segments_count: int
    duration: float


# =============================================================================
# DOCUMENT SCHEMAS
# =============================================================================


class DocumentResponse(BaseModel):
    """Document metadata."""

    id: str
    title: str
    file_type: str
    file_size: int | None
    page_count: int | None
    language: str | None
    status: str
    error_message: str | None
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class DocumentDetail(DocumentResponse):
    extracted_text: str | None = None


class DocumentListResponse(BaseModel):
    documents: list[DocumentResponse]
    count: int


class DocumentUploadResponse(BaseModel):
    success: bool = True
    document_id: str
    status: str


class DocumentRequest(BaseModel):
    """Body naming a document."""

    document_id: str = Field(..., min_length=1)


class ProcessDocumentResponse(BaseModel):
    success: bool = True
    document_id: str
    text_length: int
    chunks_count: int
    page_count: int
    language: str


# =============================================================================
# GENERATED MATERIAL SCHEMAS
# =============================================================================


class QuestionsOptions(BaseModel):
    count: int | None = Field(default=None, ge=1, le=100)


class VideoQuestionsRequest(VideoRequest, QuestionsOptions):
    pass


class DocumentQuestionsRequest(DocumentRequest, QuestionsOptions):
    pass


class FlashcardResponse(BaseModel):
    """Flashcard with its review schedule."""

    id: str
    video_id: str | None
    document_id: str | None
    front: str
    back: str
    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: str | None
    last_reviewed_at: str | None
    created_at: str

    model_config = {"from_attributes": True}


class FlashcardListResponse(BaseModel):
    flashcards: list[FlashcardResponse]
    count: int


class GenerateFlashcardsResponse(FlashcardListResponse):
    success: bool = True


class ReviewRequest(BaseModel):
    """Review grade: 0 Again, 1 Hard, 2 Good, 3 Easy."""

    quality: int = Field(..., ge=0, le=3)


class QuestionResponse(BaseModel):
    id: str
    type: str
    question: str
    options: list[str] | None
    correct_answer: str
    explanation: str | None
    created_at: str

    model_config = {"from_attributes": True}


class QuestionListResponse(BaseModel):
    questions: list[QuestionResponse]
    count: int


class GenerateQuestionsResponse(QuestionListResponse):
    success: bool = True


class SummaryResponse(BaseModel):
    content: str | None


class GenerateSummaryResponse(BaseModel):
    success: bool = True
    content: str


# =============================================================================
# QUIZ, NOTES AND ANALYSIS SCHEMAS
# =============================================================================


class SourceRef(BaseModel):
    """Exactly one of video_id and document_id."""

    video_id: str | None = None
    document_id: str | None = None


class QuizAttemptRequest(SourceRef):
    answers: dict[str, str] = Field(default_factory=dict)
    time_taken: int | None = Field(default=None, ge=0)


class QuizAttemptResponse(BaseModel):
    id: str
    score: int
    correct_count: int
    total_questions: int
    time_taken: int | None
    correct_ids: list[str]
    created_at: str


class QuizHistoryEntry(BaseModel):
    id: str
    score: int
    correct_count: int
    total_questions: int
    time_taken: int | None
    answers: dict[str, str]
    created_at: str

    model_config = {"from_attributes": True}


class QuizHistoryResponse(BaseModel):
    attempts: list[QuizHistoryEntry]
    count: int
    best_score: int | None


class NoteUpdate(SourceRef):
    content: str


class NoteResponse(BaseModel):
    content: str


class AnalyzeRequest(SourceRef):
    text: str
    action: Literal["summarize", "explain"]


class AnalyzeResponse(BaseModel):
    result: str
