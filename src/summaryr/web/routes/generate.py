"""Study material generation endpoints for videos and documents.

Each call replaces what was previously generated for the (source, user) pair.
"""

from fastapi import APIRouter, Depends

from summaryr.core.flashcard_generator import generate_flashcards_for_source
from summaryr.core.question_generator import generate_questions_for_source
from summaryr.core.summary_generator import generate_summary_for_source
from summaryr.db.database import SourceKind
from summaryr.llm.client import LLMClient
from summaryr.web.deps import get_current_user, get_llm
from summaryr.web.schemas import (
    DocumentQuestionsRequest,
    DocumentRequest,
    FlashcardResponse,
    GenerateFlashcardsResponse,
    GenerateQuestionsResponse,
    GenerateSummaryResponse,
    QuestionResponse,
    VideoQuestionsRequest,
    VideoRequest,
)

video_router = APIRouter(prefix="/api/generate", tags=["generate"])
document_router = APIRouter(prefix="/api/documents/generate", tags=["generate"])


def _flashcards(
    kind: SourceKind, source_id: str, user_id: str, llm: LLMClient | None
) -> GenerateFlashcardsResponse:
    cards = generate_flashcards_for_source(kind, source_id, user_id, client=llm)
    return GenerateFlashcardsResponse(
        flashcards=[FlashcardResponse.model_validate(c) for c in cards],
        count=len(cards),
    )


def _questions(
    kind: SourceKind,
    source_id: str,
    user_id: str,
    count: int | None,
    llm: LLMClient | None,
) -> GenerateQuestionsResponse:
    questions = generate_questions_for_source(kind, source_id, user_id, count=count, client=llm)
    return GenerateQuestionsResponse(
        questions=[QuestionResponse.model_validate(q) for q in questions],
        count=len(questions),
    )


def _summary(
    kind: SourceKind, source_id: str, user_id: str, llm: LLMClient | None
) -> GenerateSummaryResponse:
    content = generate_summary_for_source(kind, source_id, user_id, client=llm)
    return GenerateSummaryResponse(content=content)


@video_router.post("/flashcards", response_model=GenerateFlashcardsResponse)
def generate_video_flashcards(
    body: VideoRequest,
    user_id: str = Depends(get_current_user),
    llm: LLMClient | None = Depends(get_llm),
) -> GenerateFlashcardsResponse:
    """Generate flashcards from a video transcript."""
    return _flashcards("video", body.video_id, user_id, llm)


@video_router.post("/questions", response_model=GenerateQuestionsResponse)
def generate_video_questions(
    body: VideoQuestionsRequest,
    user_id: str = Depends(get_current_user),
    llm: LLMClient | None = Depends(get_llm),
) -> GenerateQuestionsResponse:
    """Generate quiz questions from a video transcript."""
    return _questions("video", body.video_id, user_id, body.count, llm)


@video_router.post("/summary", response_model=GenerateSummaryResponse)
def generate_video_summary(
    body: VideoRequest,
    user_id: str = Depends(get_current_user),
    llm: LLMClient | None = Depends(get_llm),
) -> GenerateSummaryResponse:
    """Summarize a video transcript."""
    return _summary("video", body.video_id, user_id, llm)


@document_router.post("/flashcards", response_model=GenerateFlashcardsResponse)
def generate_document_flashcards(
    body: DocumentRequest,
    user_id: str = Depends(get_current_user),
    llm: LLMClient | None = Depends(get_llm),
) -> GenerateFlashcardsResponse:
    """Generate flashcards from document text."""
    return _flashcards("document", body.document_id, user_id, llm)


@document_router.post("/questions", response_model=GenerateQuestionsResponse)
def generate_document_questions(
    body: DocumentQuestionsRequest,
    user_id: str = Depends(get_current_user),
    llm: LLMClient | None = Depends(get_llm),
) -> GenerateQuestionsResponse:
    """Generate quiz questions from document text."""
    return _questions("document", body.document_id, user_id, body.count, llm)


@document_router.post("/summary", response_model=GenerateSummaryResponse)
def generate_document_summary(
    body: DocumentRequest,
    user_id: str = Depends(get_current_user),
    llm: LLMClient | None = Depends(get_llm),
) -> GenerateSummaryResponse:
    """Summarize document text."""
    return _summary("document", body.document_id, user_id, llm)
