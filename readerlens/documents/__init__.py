"""
Document ingestion — turn uploaded PDF/Word bytes into plain text.

Usage:
    from readerlens.documents import ingest_document, truncate_text

    document = ingest_document(data, "application/pdf", "report.pdf")
    prompt_text, truncated = truncate_text(document.text)
"""

from .exceptions import (
    DocumentError,
    DocumentParseError,
    DocumentTooLargeError,
    EmptyFileError,
    MissingFileError,
    NoTextExtractedError,
    UnsupportedDocumentTypeError,
)
from .extractor import (
    DocumentTextExtractor,
    extract_text,
    ingest_document,
    is_docx,
    is_pdf,
)
from .models import ExtractedDocument
from .text import TRUNCATION_MARKER, truncate_text


__all__ = [
    # Exceptions
    "DocumentError",
    "DocumentParseError",
    "DocumentTooLargeError",
    "EmptyFileError",
    "MissingFileError",
    "NoTextExtractedError",
    "UnsupportedDocumentTypeError",
    # Extraction
    "DocumentTextExtractor",
    "extract_text",
    "ingest_document",
    "is_docx",
    "is_pdf",
    "ExtractedDocument",
    # Text
    "TRUNCATION_MARKER",
    "truncate_text",
]
