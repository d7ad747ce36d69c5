"""Request dependencies shared by the routers."""

from __future__ import annotations

import structlog
from fastapi import Header, HTTPException, status

from summaryr.db.database import SourceKind
from summaryr.llm.client import LLMClient, LLMConfigurationError, get_llm_client

logger = structlog.get_logger(__name__)

# User IDs become directory names under the uploads dir
UNSAFE_USER_ID_MARKERS = ("/", "\\", "..", "\x00")


def get_current_user(x_user_id: str | None = Header(default=None)) -> str:
    """User ID set by the authenticating gateway.

    Raises:
        HTTPException: 401 when the header is missing or blank, 400 when it
            could not be used as a storage path segment
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )

    user_id = x_user_id.strip()
    if any(marker in user_id for marker in UNSAFE_USER_ID_MARKERS):
        logger.warning("rejected_user_id", user_id=user_id[:64])
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-User-Id header",
        )
    return user_id


def get_llm() -> LLMClient | None:
    """Configured OpenAI client, or None when no API key is set.

    Core services raise their own errors when they need a client and get None.
    """
    try:
        return get_llm_client()
    except LLMConfigurationError as e:
        logger.warning("llm_client_unavailable", error=str(e))
        return None


def resolve_source(video_id: str | None, document_id: str | None) -> tuple[SourceKind, str]:
    """Pick the source named by exactly one of the two IDs.

    Raises:
        HTTPException: 400 unless exactly one ID is given
    """
    if video_id and not document_id:
        return "video", video_id
    if document_id and not video_id:
        return "document", document_id
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Provide exactly one of video_id and document_id",
    )
