"""Flashcard listing and spaced-repetition review endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from summaryr.core.srs import FlashcardNotFoundError, get_due_flashcards, review_flashcard
from summaryr.core.study_sources import ensure_owned
from summaryr.db.database import SourceKind
from summaryr.db.flashcards_repository import list_flashcards
from summaryr.web.deps import get_current_user
from summaryr.web.schemas import FlashcardListResponse, FlashcardResponse, ReviewRequest

router = APIRouter(prefix="/api/flashcards", tags=["flashcards"])
document_router = APIRouter(prefix="/api/documents/flashcards", tags=["flashcards"])


def _list(kind: SourceKind, source_id: str, user_id: str) -> FlashcardListResponse:
    ensure_owned(kind, source_id, user_id)
    cards = [FlashcardResponse.model_validate(c) for c in list_flashcards(kind, source_id, user_id)]
    return FlashcardListResponse(flashcards=cards, count=len(cards))


@router.get("", response_model=FlashcardListResponse)
async def list_video_flashcards(
    video_id: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user),
) -> FlashcardListResponse:
    """List flashcards of a video."""
    return _list("video", video_id, user_id)


@router.get("/due", response_model=FlashcardListResponse)
async def list_due_flashcards(user_id: str = Depends(get_current_user)) -> FlashcardListResponse:
    """Cards due for review today across all sources."""
    cards = [FlashcardResponse.model_validate(c) for c in get_due_flashcards(user_id)]
    return FlashcardListResponse(flashcards=cards, count=len(cards))


@router.post("/{card_id}/review", response_model=FlashcardResponse)
async def review(
    card_id: str,
    body: ReviewRequest,
    user_id: str = Depends(get_current_user),
) -> FlashcardResponse:
    """Record a review and reschedule the card."""
    try:
        card = review_flashcard(card_id, user_id, body.quality)
    except FlashcardNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Flashcard not found",
        )
    return FlashcardResponse.model_validate(card)


@document_router.get("", response_model=FlashcardListResponse)
async def list_document_flashcards(
    document_id: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user),
) -> FlashcardListResponse:
    """List flashcards of a document."""
    return _list("document", document_id, user_id)
