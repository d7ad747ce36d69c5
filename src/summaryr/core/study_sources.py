"""Loading the text of a video or document for study material generation."""

from __future__ import annotations

from dataclasses import dataclass

from summaryr.db.database import SourceKind
from summaryr.db.documents_repository import get_chunks, get_document
from summaryr.db.videos_repository import get_segments, get_video


class NotFoundError(Exception):
    """Raised when a video or document does not exist for the user."""

    def __init__(self, kind: str, source_id: str):
        self.kind = kind
        self.source_id = source_id
        super().__init__(f"{kind.capitalize()} not found: {source_id}")


class NotReadyError(Exception):
    """Raised when a source has not finished processing or has no content."""

    def __init__(self, kind: str, source_id: str, message: str | None = None):
        self.kind = kind
        self.source_id = source_id
        super().__init__(message or f"{kind.capitalize()} is not ready")


@dataclass
class StudySource:
    """Text content of a ready video or document."""

    kind: SourceKind
    source_id: str
    title: str
    texts: list[str]
    language: str = "en"

    @property
    def full_text(self) -> str:
        joiner = " " if self.kind == "video" else "\n\n"
        return joiner.join(self.texts)


def ensure_owned(kind: SourceKind, source_id: str, user_id: str) -> None:
    """Check the source exists and belongs to the user.

    Raises:
        NotFoundError: Otherwise
    """
    if kind == "video":
        found = get_video(source_id, user_id) is not None
    else:
        found = get_document(source_id, user_id) is not None
    if not found:
        raise NotFoundError(kind, source_id)


def load_study_source(kind: SourceKind, source_id: str, user_id: str) -> StudySource:
    """Load the transcript segments or document text of a ready source.

    Videos yield one text per segment. Documents yield their extracted text,
    or the stored chunks when the text column is empty.

    Raises:
        NotFoundError: If the source does not exist for the user
        NotReadyError: If it is not ready or has no text
    """
    if kind == "video":
        video = get_video(source_id, user_id)
        if video is None:
            raise NotFoundError(kind, source_id)
        if video.status != "ready":
            raise NotReadyError(kind, source_id, "Video transcription is not complete")

        texts = [seg.text for seg in get_segments(source_id) if seg.text.strip()]
        if not texts:
            raise NotReadyError(kind, source_id, "No transcript found")
        return StudySource(kind=kind, source_id=source_id, title=video.title, texts=texts)

    document = get_document(source_id, user_id)
    if document is None:
        raise NotFoundError(kind, source_id)
    if document.status != "ready":
        raise NotReadyError(kind, source_id, "Document processing is not complete")

    if document.extracted_text:
        texts = [document.extracted_text]
    else:
        texts = [chunk.content for chunk in get_chunks(source_id)]
    if not "".join(texts).strip():
        raise NotReadyError(kind, source_id, "Document has no extractable text")

    return StudySource(
        kind=kind,
        source_id=source_id,
        title=document.title,
        texts=texts,
        language=document.language or "en",
    )
