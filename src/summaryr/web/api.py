"""FastAPI application factory.

Main entry point for the summaryr Web API.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from http import HTTPStatus
from pathlib import Path
from typing import Any, AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from summaryr import __version__
from summaryr.core.document_processor import DocumentProcessingError
from summaryr.core.generation import GenerationError
from summaryr.core.study_sources import NotFoundError, NotReadyError
from summaryr.core.transcriber import InvalidChunkError, TranscriptionError
from summaryr.db.database import get_db_path, init_db
from summaryr.web.routes import (
    document_flashcards_router,
    document_generate_router,
    document_study_router,
    documents_router,
    flashcards_router,
    health_router,
    profile_router,
    study_router,
    transcribe_router,
    video_generate_router,
    videos_router,
)

logger = structlog.get_logger(__name__)

# Domain errors and the response each one maps to
DOMAIN_ERRORS: list[tuple[type[Exception], int, str]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND, "Not found"),
    (NotReadyError, status.HTTP_400_BAD_REQUEST, "Not ready"),
    (InvalidChunkError, status.HTTP_400_BAD_REQUEST, "Invalid audio chunk"),
    (TranscriptionError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Transcription failed"),
    (DocumentProcessingError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Document processing failed"),
    (GenerationError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Generation failed"),
]


def error_body(error: str, message: str | None = None) -> dict[str, Any]:
    return {"error": error, "message": message}


def _domain_error_handler(status_code: int, error: str):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.warning(
            "request_failed",
            path=request.url.path,
            status_code=status_code,
            error=str(exc),
        )
        return JSONResponse(status_code=status_code, content=error_body(error, str(exc)))

    return handler


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if isinstance(exc.detail, dict):
            body = exc.detail
        else:
            body = error_body(HTTPStatus(exc.status_code).phrase, str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in errors
        )
        return JSONResponse(
            status_code=422,
            content=error_body("Invalid request", message),
        )

    for exc_type, status_code, label in DOMAIN_ERRORS:
        app.add_exception_handler(exc_type, _domain_error_handler(status_code, label))


def create_app(db_path: Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: SQLite file to use (configured path if None)

    Returns:
        Configured FastAPI app instance
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        init_db(db_path)
        logger.info("api_startup", db_path=str(get_db_path()))
        yield

    app = FastAPI(
        title="summaryr API",
        description="Transcripts, flashcards, quizzes and summaries from videos and documents",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(profile_router)
    app.include_router(videos_router)
    app.include_router(transcribe_router)
    app.include_router(video_generate_router)
    app.include_router(flashcards_router)
    app.include_router(study_router)
    # Fixed /api/documents/... paths must be registered before /api/documents/{id}
    app.include_router(document_generate_router)
    app.include_router(document_flashcards_router)
    app.include_router(document_study_router)
    app.include_router(documents_router)

    return app


# Default app instance for uvicorn
app = create_app()
