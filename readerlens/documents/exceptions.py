"""
Input validation errors raised during document ingestion.

Each error carries the code reported to API clients.
"""


class DocumentError(ValueError):
    """Base class: a user-correctable problem with the uploaded document."""

    code = "INVALID_DOCUMENT"
    http_status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"error": self.message, "code": self.code}


class MissingFileError(DocumentError):
    code = "MISSING_FILE"


class EmptyFileError(DocumentError):
    code = "EMPTY_FILE"


class DocumentTooLargeError(DocumentError):
    code = "FILE_TOO_LARGE"
    http_status = 413


class UnsupportedDocumentTypeError(DocumentError):
    code = "UNSUPPORTED_TYPE"


class DocumentParseError(DocumentError):
    """The file looked supported but could not be decoded."""

    code = "PARSE_FAILED"
    http_status = 500


class NoTextExtractedError(DocumentError):
    """Decoding worked but produced no text (e.g. a scanned PDF)."""

    code = "NO_TEXT_EXTRACTED"
