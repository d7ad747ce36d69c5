"""Document endpoints: upload, lookup, deletion and text extraction."""

import structlog
from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Form,
    HTTPException,
    UploadFile,
    status,
)

from summaryr.core.document_extractor import file_type_from_name
from summaryr.core.document_processor import DocumentProcessingError, process_document
from summaryr.core.file_store import delete_file, save_upload
from summaryr.db.documents_repository import (
    create_document,
    delete_document,
    get_document,
    list_documents,
    update_document,
)
from summaryr.llm.client import LLMClient
from summaryr.web.deps import get_current_user, get_llm
from summaryr.web.schemas import (
    DocumentDetail,
    DocumentListResponse,
    DocumentRequest,
    DocumentResponse,
    DocumentUploadResponse,
    ProcessDocumentResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/documents", tags=["documents"])


def run_document_processing(document_id: str, client: LLMClient | None) -> None:
    """Background task: process and leave the outcome in the document status."""
    try:
        process_document(document_id, client=client)
    except DocumentProcessingError as e:
        logger.warning("background_processing_failed", document_id=document_id, error=str(e))


@router.post("/upload", response_model=DocumentUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    title: str | None = Form(default=None),
    user_id: str = Depends(get_current_user),
    llm: LLMClient | None = Depends(get_llm),
) -> DocumentUploadResponse:
    """Store a PDF, DOCX or EPUB file and schedule text extraction."""
    file_type = file_type_from_name(file.filename or "")
    if file_type is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Only PDF, Word (.docx), and EPUB files are supported.",
        )

    data = await file.read()
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty",
        )

    document = create_document(
        user_id=user_id,
        title=title or file.filename or "Untitled Document",
        file_type=file_type,
        file_size=len(data),
    )
    path = save_upload("documents", user_id, document.id, file_type, data)
    update_document(document.id, file_path=str(path), status="processing")

    background_tasks.add_task(run_document_processing, document.id, llm)

    logger.info("document_uploaded", document_id=document.id, file_type=file_type)
    return DocumentUploadResponse(document_id=document.id, status="processing")


@router.get("", response_model=DocumentListResponse)
async def list_user_documents(user_id: str = Depends(get_current_user)) -> DocumentListResponse:
    """List the caller's documents."""
    documents = [DocumentResponse.model_validate(d) for d in list_documents(user_id)]
    return DocumentListResponse(documents=documents, count=len(documents))


@router.post("/process/extract", response_model=ProcessDocumentResponse)
def extract_document(
    body: DocumentRequest,
    user_id: str = Depends(get_current_user),
    llm: LLMClient | None = Depends(get_llm),
) -> ProcessDocumentResponse:
    """Re-run text extraction now and wait for the result."""
    if get_document(body.document_id, user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found",
        )

    result = process_document(body.document_id, client=llm)
    return ProcessDocumentResponse(
        document_id=result.document_id,
        text_length=result.text_length,
        chunks_count=result.chunks_count,
        page_count=result.page_count,
        language=result.language,
    )


@router.get("/{document_id}", response_model=DocumentDetail)
async def get_document_detail(
    document_id: str, user_id: str = Depends(get_current_user)
) -> DocumentDetail:
    """Get a document with its extracted text."""
    document = get_document(document_id, user_id)
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found",
        )
    return DocumentDetail.model_validate(document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_document(document_id: str, user_id: str = Depends(get_current_user)) -> None:
    """Delete a document, its stored file and everything generated from it."""
    document = get_document(document_id, user_id)
    if document is None or not delete_document(document_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found",
        )
    delete_file(document.file_path)
