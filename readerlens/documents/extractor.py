"""
Document text extraction for PDF and Word uploads.

PDF goes through PyMuPDF, DOCX through python-docx. Extraction works on
in-memory bytes; nothing is written to disk.
"""

import io
from typing import Optional, Tuple

import docx
import fitz  # PyMuPDF
import structlog

from .exceptions import (
    DocumentParseError,
    DocumentTooLargeError,
    EmptyFileError,
    NoTextExtractedError,
    UnsupportedDocumentTypeError,
)
from .models import ExtractedDocument

logger = structlog.get_logger("documents")

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

MAX_FILE_SIZE = 50 * 1024 * 1024  # 50 MB


def is_pdf(mime_type: Optional[str], filename: Optional[str]) -> bool:
    return mime_type == PDF_MIME or (filename or "").lower().endswith(".pdf")


def is_docx(mime_type: Optional[str], filename: Optional[str]) -> bool:
    name = (filename or "").lower()
    return mime_type == DOCX_MIME or name.endswith(".docx") or name.endswith(".doc")


class DocumentTextExtractor:
    """
    Extracts plain text from PDF and Word documents.

    Supported: .pdf, .docx (legacy .doc is accepted by type but usually fails
    to decode, which surfaces as PARSE_FAILED).
    """

    def __init__(self, max_file_size: int = MAX_FILE_SIZE):
        self.max_file_size = max_file_size

    def detect_type(self, mime_type: Optional[str], filename: Optional[str]) -> str:
        """Return "pdf" or "docx", or raise UnsupportedDocumentTypeError."""
        if is_pdf(mime_type, filename):
            return "pdf"
        if is_docx(mime_type, filename):
            return "docx"
        logger.warning("unsupported_document_type", mime_type=mime_type, filename=filename)
        raise UnsupportedDocumentTypeError("仅支持 PDF 或 Word (.docx/.doc) 文件")

    def extract(self, data: bytes, mime_type: Optional[str], filename: Optional[str]) -> str:
        """
        Extract text from document bytes.

        Returns:
            Extracted text, possibly empty.

        Raises:
            UnsupportedDocumentTypeError: not a PDF/Word document.
            DocumentParseError: the document could not be decoded.
        """
        text, _ = self._extract(data, self.detect_type(mime_type, filename), filename)
        return text

    def _extract(self, data: bytes, doc_type: str, filename: Optional[str]) -> Tuple[str, dict]:
        try:
            if doc_type == "pdf":
                return self._extract_pdf(data)
            return self._extract_docx(data)
        except Exception as e:
            logger.error("document_parse_failed", filename=filename, doc_type=doc_type, error=str(e))
            raise DocumentParseError(f"文档解析失败：{e}") from e

    def _extract_pdf(self, data: bytes) -> Tuple[str, dict]:
        with fitz.open(stream=data, filetype="pdf") as doc:
            metadata = {
                "pages": len(doc),
                "title": (doc.metadata or {}).get("title", ""),
            }
            pages = [page.get_text() for page in doc]

        return "\n".join(pages), metadata

    def _extract_docx(self, data: bytes) -> Tuple[str, dict]:
        document = docx.Document(io.BytesIO(data))

        lines = [para.text for para in document.paragraphs]

        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                if any(cells):
                    lines.append(" | ".join(cells))

        metadata = {
            "title": document.core_properties.title or "",
            "paragraphs": len(document.paragraphs),
            "tables": len(document.tables),
        }
        return "\n".join(lines), metadata

    def ingest(self, data: bytes, mime_type: Optional[str], filename: Optional[str]) -> ExtractedDocument:
        """
        Validate an upload and extract its trimmed text.

        Raises:
            EmptyFileError, DocumentTooLargeError, UnsupportedDocumentTypeError,
            DocumentParseError, NoTextExtractedError
        """
        if not data:
            raise EmptyFileError("上传文件为空")

        if len(data) > self.max_file_size:
            logger.warning(
                "document_too_large",
                filename=filename,
                size_mb=round(len(data) / (1024 * 1024), 1),
            )
            raise DocumentTooLargeError(
                f"文件过大（上限 {self.max_file_size // (1024 * 1024)} MB）"
            )

        doc_type = self.detect_type(mime_type, filename)
        text, metadata = self._extract(data, doc_type, filename)

        text = text.strip()
        if not text:
            logger.info("no_text_extracted", filename=filename, doc_type=doc_type)
            raise NoTextExtractedError("未能从文档中提取到文本，请确认文件内容有效且非扫描版图片")

        document = ExtractedDocument(
            filename=filename or "",
            doc_type=doc_type,
            text=text,
            metadata=metadata,
        )

        logger.info(
            "document_extracted",
            filename=document.filename,
            doc_type=doc_type,
            chars=document.char_count,
            words=document.word_count,
            pages=metadata.get("pages"),
            paragraphs=metadata.get("paragraphs"),
            tables=metadata.get("tables"),
        )
        return document


_default_extractor: Optional[DocumentTextExtractor] = None


def _extractor() -> DocumentTextExtractor:
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = DocumentTextExtractor()
    return _default_extractor


def extract_text(data: bytes, mime_type: Optional[str], filename: Optional[str]) -> str:
    """Shortcut for DocumentTextExtractor().extract()."""
    return _extractor().extract(data, mime_type, filename)


def ingest_document(data: bytes, mime_type: Optional[str], filename: Optional[str]) -> ExtractedDocument:
    """Shortcut for DocumentTextExtractor().ingest()."""
    return _extractor().ingest(data, mime_type, filename)
