"""
Document ingestion models.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class ExtractedDocument(BaseModel):
    """Plain text pulled out of an uploaded PDF or Word file."""

    filename: str
    doc_type: str  # pdf, docx
    text: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def char_count(self) -> int:
        return len(self.text)

    @property
    def word_count(self) -> int:
        return len(self.text.split())
