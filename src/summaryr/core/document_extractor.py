"""Text extraction from uploaded documents.

Supports PDF (pymupdf), DOCX (python-docx) and EPUB (ebooklib + BeautifulSoup).
PDFs report their real page count; for DOCX and EPUB the page count is
estimated from the word count.
"""

from __future__ import annotations

import io
import math
import tempfile
import warnings
from dataclasses import dataclass
from pathlib import Path

import docx
import ebooklib
import fitz  # pymupdf
import structlog
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning
from ebooklib import epub

logger = structlog.get_logger(__name__)

SUPPORTED_TYPES = ("pdf", "docx", "epub")
DEFAULT_WORDS_PER_PAGE = 500


class ExtractionError(Exception):
    """Raised when a document cannot be read."""

    pass


class UnsupportedFileTypeError(ExtractionError):
    """Raised for file types other than pdf, docx and epub."""

    def __init__(self, file_type: str):
        self.file_type = file_type
        super().__init__(f"Unsupported file type: {file_type}")


@dataclass
class ExtractedText:
    """Plain text of a document with its page count."""

    text: str
    page_count: int

    @property
    def word_count(self) -> int:
        return len(self.text.split())


def estimate_page_count(text: str, words_per_page: int = DEFAULT_WORDS_PER_PAGE) -> int:
    """Pages for text without a layout, at least one."""
    return max(1, math.ceil(len(text.split()) / words_per_page))


def file_type_from_name(filename: str) -> str | None:
    """Supported file type for a file name, or None."""
    suffix = Path(filename).suffix.lower().lstrip(".")
    return suffix if suffix in SUPPORTED_TYPES else None


def extract_text(
    data: bytes,
    file_type: str,
    words_per_page: int = DEFAULT_WORDS_PER_PAGE,
) -> ExtractedText:
    """Extract plain text from document bytes.

    Args:
        data: Raw file content
        file_type: "pdf", "docx" or "epub"
        words_per_page: Page estimate for formats without pages

    Returns:
        ExtractedText with the text and page count

    Raises:
        UnsupportedFileTypeError: If file_type is not supported
        ExtractionError: If the file is encrypted or cannot be parsed
    """
    file_type = file_type.lower()

    if file_type == "pdf":
        result = _extract_pdf(data)
    elif file_type == "docx":
        text = _extract_docx(data)
        result = ExtractedText(text=text, page_count=estimate_page_count(text, words_per_page))
    elif file_type == "epub":
        text = _extract_epub(data)
        result = ExtractedText(text=text, page_count=estimate_page_count(text, words_per_page))
    else:
        raise UnsupportedFileTypeError(file_type)

    logger.info(
        "document_extractor.metrics",
        file_type=file_type,
        pages=result.page_count,
        chars=len(result.text),
        words=result.word_count,
    )
    return result


def _extract_pdf(data: bytes) -> ExtractedText:
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise ExtractionError(f"Failed to open PDF: {e}") from e

    try:
        if doc.is_encrypted:
            raise ExtractionError("PDF is encrypted")

        pages = []
        for page in doc:
            page_text = page.get_text().strip()
            if page_text:
                pages.append(page_text)

        return ExtractedText(text="\n\n".join(pages), page_count=len(doc))
    finally:
        doc.close()


def _extract_docx(data: bytes) -> str:
    try:
        document = docx.Document(io.BytesIO(data))
    except Exception as e:
        raise ExtractionError(f"Failed to open DOCX: {e}") from e

    parts = [p.text.strip() for p in document.paragraphs if p.text.strip()]

    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append(" | ".join(cells))

    return "\n".join(parts)


def _extract_epub(data: bytes) -> str:
    # ebooklib reads from a path only
    with tempfile.TemporaryDirectory() as tmp_dir:
        path = Path(tmp_dir) / "upload.epub"
        path.write_bytes(data)
        try:
            book = epub.read_epub(str(path))
        except Exception as e:
            raise ExtractionError(f"Failed to open EPUB: {e}") from e

    chapters = []
    for item in book.get_items_of_type(ebooklib.ITEM_DOCUMENT):
        if _is_navigation(item):
            continue
        text = _html_to_text(item.get_content())
        if text:
            chapters.append(text)

    return "\n\n".join(chapters)


def _is_navigation(item: epub.EpubItem) -> bool:
    """The EPUB 3 table of contents page is not body text."""
    return isinstance(item, epub.EpubNav) or "nav" in (getattr(item, "properties", None) or [])


def _html_to_text(html_content: bytes | str) -> str:
    """Convert XHTML chapter content to plain text, one line per block."""
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
        soup = BeautifulSoup(html_content, "lxml")

    for element in soup(["script", "style", "head", "meta", "link"]):
        element.decompose()

    text = soup.get_text(separator="\n")

    lines = []
    for line in text.splitlines():
        line = line.strip()
        if line:
            lines.append(line)

    return "\n".join(lines)
