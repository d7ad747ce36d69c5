"""Document processing pipeline.

Reads the stored upload, extracts its text, splits it into fixed-size chunks,
detects the language and marks the document ready. Any failure leaves the
document in the error status.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path

import structlog

from summaryr.config.app_config import load_app_config
from summaryr.core.document_extractor import ExtractionError, extract_text
from summaryr.core.file_store import read_file
from summaryr.core.language import detect_language
from summaryr.db.documents_repository import (
    ChunkRecord,
    get_document,
    replace_chunks,
    set_document_status,
    update_document,
)
from summaryr.llm.client import LLMClient, LLMConfigurationError, get_llm_client

logger = structlog.get_logger(__name__)


class DocumentProcessingError(Exception):
    """Raised when a document cannot be processed."""

    def __init__(self, document_id: str, message: str):
        self.document_id = document_id
        super().__init__(message)


@dataclass
class ProcessingResult:
    """Outcome of a successful processing run."""

    document_id: str
    text_length: int
    chunks_count: int
    page_count: int
    language: str


def chunk_text(
    text: str,
    chunk_size: int,
    page_count: int | None = None,
) -> list[ChunkRecord]:
    """Split text into consecutive slices of chunk_size characters.

    When page_count is given each chunk gets the page it most likely starts
    on, assuming text is spread evenly over the pages.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    pieces = [text[i : i + chunk_size] for i in range(0, len(text), chunk_size)]
    chunks = []
    for index, piece in enumerate(pieces):
        page_number = None
        if page_count:
            page_number = math.floor(index / len(pieces) * page_count) + 1
        chunks.append(ChunkRecord(chunk_index=index, content=piece, page_number=page_number))
    return chunks


def _default_client() -> LLMClient | None:
    try:
        return get_llm_client()
    except LLMConfigurationError:
        logger.warning("document_processor.no_llm_client")
        return None


def process_document(document_id: str, client: LLMClient | None = None) -> ProcessingResult:
    """Extract, chunk and analyse a stored document.

    Args:
        document_id: Document to process
        client: Chat client for language detection (configured client if None)

    Returns:
        ProcessingResult with text length, chunk count, pages and language

    Raises:
        DocumentProcessingError: On any failure; the document status is
            set to "error" before raising
    """
    document = get_document(document_id)
    if document is None:
        raise DocumentProcessingError(document_id, f"Document not found: {document_id}")

    logger.info("document.processing", document_id=document_id, file_type=document.file_type)
    set_document_status(document_id, "processing")

    try:
        result = _run_pipeline(document_id, document.file_type, document.file_path, client)
    except Exception as e:
        set_document_status(document_id, "error", error_message=str(e))
        logger.error("document.processing_failed", document_id=document_id, error=str(e))
        if isinstance(e, DocumentProcessingError):
            raise
        raise DocumentProcessingError(document_id, str(e)) from e

    logger.info(
        "document.processed",
        document_id=document_id,
        chars=result.text_length,
        chunks=result.chunks_count,
        pages=result.page_count,
        language=result.language,
    )
    return result


def _run_pipeline(
    document_id: str,
    file_type: str,
    file_path: str | None,
    client: LLMClient | None,
) -> ProcessingResult:
    settings = load_app_config().processing

    if not file_path or not Path(file_path).exists():
        raise DocumentProcessingError(document_id, "Document file not found")

    data = read_file(file_path)
    if not data:
        raise DocumentProcessingError(document_id, "Document file is empty")

    try:
        extracted = extract_text(data, file_type, words_per_page=settings.words_per_page)
    except ExtractionError as e:
        raise DocumentProcessingError(
            document_id, f"Failed to extract text from document: {e}"
        ) from e

    text = extracted.text
    if not text.strip():
        raise DocumentProcessingError(document_id, "No text could be extracted from the document")

    chunks = chunk_text(
        text,
        settings.document_chunk_size,
        page_count=extracted.page_count if file_type == "pdf" else None,
    )
    replace_chunks(document_id, chunks)

    if client is None:
        client = _default_client()
    language = detect_language(text, client)

    update_document(
        document_id,
        extracted_text=text,
        page_count=extracted.page_count,
        language=language,
        status="ready",
        error_message=None,
    )

    return ProcessingResult(
        document_id=document_id,
        text_length=len(text),
        chunks_count=len(chunks),
        page_count=extracted.page_count,
        language=language,
    )
