"""
Data models shared by the LLM layer, the web API and the CLI.

Field names are snake_case in Python and camelCase on the wire
(serialize with ``model_dump(by_alias=True)``).
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def new_reader_id(prefix: str, index: Optional[int] = None) -> str:
    """Fresh, caller-visible reader id."""
    suffix = uuid.uuid4().hex[:12]
    if index is None:
        return f"{prefix}-{suffix}"
    return f"{prefix}-{index}-{suffix}"


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class DocumentAnalysis(WireModel):
    """Structural analysis of a document."""

    theme: str = ""
    tone: str = ""
    target_audience: str = Field(default="", alias="targetAudience")


class SuggestedReader(WireModel):
    """A persona the document can be critiqued from."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    description: str = ""
    is_custom: bool = Field(default=False, alias="isCustom")

    @field_validator("id", "name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    @classmethod
    def custom(cls, name: str, description: str = "") -> "SuggestedReader":
        """User-defined persona with a locally generated id."""
        return cls(
            id=new_reader_id("custom"),
            name=name.strip(),
            description=(description or "").strip(),
            is_custom=True,
        )


class AnalyzeResult(WireModel):
    """Result of LLMGateway.analyze_document()."""

    analysis: DocumentAnalysis
    suggested_readers: List[SuggestedReader] = Field(
        default_factory=list, alias="suggestedReaders"
    )


class ReaderFeedbackPayload(WireModel):
    """Normalized critique returned by the model for one persona."""

    first_impression_score: int = Field(default=5, ge=1, le=10, alias="firstImpressionScore")
    first_impression_reason: str = Field(default="", alias="firstImpressionReason")
    reading_feeling: str = Field(default="", alias="readingFeeling")
    pain_points: Optional[str] = Field(default=None, alias="painPoints")
    revision_suggestions: str = Field(default="", alias="revisionSuggestions")


class ReaderFeedback(ReaderFeedbackPayload):
    """Feedback payload tagged with the reader who produced it."""

    reader_id: str = Field(alias="readerId")
    reader_name: str = Field(alias="readerName")

    @classmethod
    def from_payload(
        cls, reader: SuggestedReader, payload: ReaderFeedbackPayload
    ) -> "ReaderFeedback":
        return cls(
            reader_id=reader.id,
            reader_name=reader.name,
            **payload.model_dump(),
        )
