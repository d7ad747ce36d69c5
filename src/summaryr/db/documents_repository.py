"""Repository functions for documents and document_chunks tables."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any

import structlog

from summaryr.db.database import get_db, new_id, utc_now

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = {
    "title",
    "file_size",
    "file_path",
    "extracted_text",
    "page_count",
    "language",
    "status",
    "error_message",
}


@dataclass
class DocumentRecord:
    """Document record from database."""

    id: str
    user_id: str
    title: str
    file_type: str
    file_size: int | None
    file_path: str | None
    extracted_text: str | None
    page_count: int | None
    language: str | None
    status: str
    error_message: str | None
    created_at: str
    updated_at: str


@dataclass
class ChunkRecord:
    """A fixed-size slice of extracted document text."""

    chunk_index: int
    content: str
    page_number: int | None


def create_document(
    user_id: str,
    title: str,
    file_type: str,
    file_size: int | None = None,
    status: str = "uploading",
) -> DocumentRecord:
    """Insert a new document row and return it.

    Raises:
        sqlite3.IntegrityError: If file_type or status violate the schema
    """
    document_id = new_id()
    now = utc_now()

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO documents (
                id, user_id, title, file_type, file_size, status, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (document_id, user_id, title, file_type, file_size, status, now, now),
        )
        row = conn.execute("SELECT * FROM documents WHERE id = ?", (document_id,)).fetchone()

    logger.debug("documents.inserted", document_id=document_id, file_type=file_type)
    return _row_to_record(row)


def get_document(document_id: str, user_id: str | None = None) -> DocumentRecord | None:
    """Get a document by ID, optionally scoped to its owner."""
    query = "SELECT * FROM documents WHERE id = ?"
    params: tuple[Any, ...] = (document_id,)
    if user_id is not None:
        query += " AND user_id = ?"
        params = (document_id, user_id)

    with get_db() as conn:
        row = conn.execute(query, params).fetchone()

    if row is None:
        return None
    return _row_to_record(row)


def list_documents(user_id: str) -> list[DocumentRecord]:
    """List a user's documents, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM documents WHERE user_id = ? ORDER BY created_at DESC",
            (user_id,),
        ).fetchall()
    return [_row_to_record(row) for row in rows]


def update_document(document_id: str, **fields: Any) -> None:
    """Update selected columns of a document.

    Raises:
        ValueError: If an unknown column is given
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update document fields: {sorted(unknown)}")
    if not fields:
        return

    assignments = ", ".join(f"{name} = ?" for name in fields)
    params = [*fields.values(), utc_now(), document_id]

    with get_db() as conn:
        conn.execute(
            f"UPDATE documents SET {assignments}, updated_at = ? WHERE id = ?",
            params,
        )

    logger.debug("documents.updated", document_id=document_id, fields=sorted(fields))


def set_document_status(
    document_id: str, status: str, error_message: str | None = None
) -> None:
    """Transition a document to a new status."""
    update_document(document_id, status=status, error_message=error_message)


def delete_document(document_id: str, user_id: str) -> bool:
    """Delete a document owned by user_id. Returns True if a row was deleted."""
    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM documents WHERE id = ? AND user_id = ?",
            (document_id, user_id),
        )
    return cursor.rowcount > 0


def replace_chunks(document_id: str, chunks: list[ChunkRecord]) -> int:
    """Replace all text chunks of a document. Returns the number stored."""
    with get_db() as conn:
        conn.execute("DELETE FROM document_chunks WHERE document_id = ?", (document_id,))
        conn.executemany(
            """
            INSERT INTO document_chunks (document_id, chunk_index, content, page_number)
            VALUES (?, ?, ?, ?)
            """,
            [
                (document_id, chunk.chunk_index, chunk.content, chunk.page_number)
                for chunk in chunks
            ],
        )

    logger.debug("document_chunks.replaced", document_id=document_id, count=len(chunks))
    return len(chunks)


def get_chunks(document_id: str) -> list[ChunkRecord]:
    """Get document chunks in order."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT chunk_index, content, page_number
            FROM document_chunks WHERE document_id = ?
            ORDER BY chunk_index ASC
            """,
            (document_id,),
        ).fetchall()

    return [
        ChunkRecord(
            chunk_index=row["chunk_index"],
            content=row["content"],
            page_number=row["page_number"],
        )
        for row in rows
    ]


def _row_to_record(row: sqlite3.Row) -> DocumentRecord:
    return DocumentRecord(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        file_type=row["file_type"],
        file_size=row["file_size"],
        file_path=row["file_path"],
        extracted_text=row["extracted_text"],
        page_count=row["page_count"],
        language=row["language"],
        status=row["status"],
        error_message=row["error_message"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
