"""Route handlers for the Web API."""

from summaryr.web.routes.documents import router as documents_router
from summaryr.web.routes.flashcards import document_router as document_flashcards_router
from summaryr.web.routes.flashcards import router as flashcards_router
from summaryr.web.routes.generate import document_router as document_generate_router
from summaryr.web.routes.generate import video_router as video_generate_router
from summaryr.web.routes.health import router as health_router
from summaryr.web.routes.profile import router as profile_router
from summaryr.web.routes.study import document_router as document_study_router
from summaryr.web.routes.study import router as study_router
from summaryr.web.routes.transcribe import router as transcribe_router
from summaryr.web.routes.videos import router as videos_router

__all__ = [
    "health_router",
    "profile_router",
    "videos_router",
    "transcribe_router",
    "documents_router",
    "video_generate_router",
    "document_generate_router",
    "flashcards_router",
    "document_flashcards_router",
    "study_router",
    "document_study_router",
]
