"""Summaries, questions, quiz attempts, notes and text analysis."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from summaryr.core.quiz import submit_quiz_attempt
from summaryr.core.study_sources import ensure_owned
from summaryr.core.text_analyzer import analyze_text
from summaryr.db.database import SourceKind
from summaryr.db.study_repository import (
    get_note,
    get_summary,
    list_questions,
    list_quiz_attempts,
    upsert_note,
)
from summaryr.llm.client import LLMClient
from summaryr.web.deps import get_current_user, get_llm, resolve_source
from summaryr.web.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    NoteResponse,
    NoteUpdate,
    QuestionListResponse,
    QuestionResponse,
    QuizAttemptRequest,
    QuizAttemptResponse,
    QuizHistoryEntry,
    QuizHistoryResponse,
    SummaryResponse,
)

router = APIRouter(prefix="/api", tags=["study"])
document_router = APIRouter(prefix="/api/documents", tags=["study"])


def _summary(kind: SourceKind, source_id: str, user_id: str) -> SummaryResponse:
    ensure_owned(kind, source_id, user_id)
    return SummaryResponse(content=get_summary(kind, source_id, user_id))


def _questions(kind: SourceKind, source_id: str, user_id: str) -> QuestionListResponse:
    ensure_owned(kind, source_id, user_id)
    questions = [
        QuestionResponse.model_validate(q) for q in list_questions(kind, source_id, user_id)
    ]
    return QuestionListResponse(questions=questions, count=len(questions))


@router.get("/summary", response_model=SummaryResponse)
async def read_video_summary(
    video_id: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user),
) -> SummaryResponse:
    """Stored summary of a video (content is null until generated)."""
    return _summary("video", video_id, user_id)


@document_router.get("/summary", response_model=SummaryResponse)
async def read_document_summary(
    document_id: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user),
) -> SummaryResponse:
    """Stored summary of a document."""
    return _summary("document", document_id, user_id)


@router.get("/questions", response_model=QuestionListResponse)
async def read_video_questions(
    video_id: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user),
) -> QuestionListResponse:
    return _questions("video", video_id, user_id)


@document_router.get("/questions", response_model=QuestionListResponse)
async def read_document_questions(
    document_id: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user),
) -> QuestionListResponse:
    return _questions("document", document_id, user_id)


@router.post(
    "/quiz/attempts",
    response_model=QuizAttemptResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_quiz_attempt(
    body: QuizAttemptRequest,
    user_id: str = Depends(get_current_user),
) -> QuizAttemptResponse:
    """Grade submitted answers and record the attempt."""
    kind, source_id = resolve_source(body.video_id, body.document_id)
    try:
        attempt, result = submit_quiz_attempt(
            kind, source_id, user_id, body.answers, time_taken=body.time_taken
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return QuizAttemptResponse(
        id=attempt.id,
        score=attempt.score,
        correct_count=attempt.correct_count,
        total_questions=attempt.total_questions,
        time_taken=attempt.time_taken,
        correct_ids=result.correct_ids,
        created_at=attempt.created_at,
    )


@router.get("/quiz/attempts", response_model=QuizHistoryResponse)
async def read_quiz_attempts(
    video_id: str | None = Query(default=None),
    document_id: str | None = Query(default=None),
    user_id: str = Depends(get_current_user),
) -> QuizHistoryResponse:
    """The caller's past attempts for a source, newest first."""
    kind, source_id = resolve_source(video_id, document_id)
    ensure_owned(kind, source_id, user_id)
    attempts = [
        QuizHistoryEntry.model_validate(a) for a in list_quiz_attempts(kind, source_id, user_id)
    ]
    return QuizHistoryResponse(
        attempts=attempts,
        count=len(attempts),
        best_score=max((a.score for a in attempts), default=None),
    )


@router.get("/notes", response_model=NoteResponse)
async def read_notes(
    video_id: str | None = Query(default=None),
    document_id: str | None = Query(default=None),
    user_id: str = Depends(get_current_user),
) -> NoteResponse:
    """The caller's notes for a source (empty when none saved)."""
    kind, source_id = resolve_source(video_id, document_id)
    ensure_owned(kind, source_id, user_id)
    return NoteResponse(content=get_note(kind, source_id, user_id) or "")


@router.put("/notes", response_model=NoteResponse)
async def save_notes(
    body: NoteUpdate,
    user_id: str = Depends(get_current_user),
) -> NoteResponse:
    """Save the caller's notes for a source."""
    kind, source_id = resolve_source(body.video_id, body.document_id)
    ensure_owned(kind, source_id, user_id)
    upsert_note(kind, source_id, user_id, body.content)
    return NoteResponse(content=body.content)


@router.post("/analyze-text", response_model=AnalyzeResponse)
def analyze_selection(
    body: AnalyzeRequest,
    user_id: str = Depends(get_current_user),
    llm: LLMClient | None = Depends(get_llm),
) -> AnalyzeResponse:
    """Summarize or explain a text selection from a transcript or document."""
    if body.video_id or body.document_id:
        kind, source_id = resolve_source(body.video_id, body.document_id)
        ensure_owned(kind, source_id, user_id)

    try:
        result = analyze_text(body.text, body.action, client=llm)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return AnalyzeResponse(result=result)
