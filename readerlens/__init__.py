"""
readerlens — simulated-reader feedback for documents.

Upload a PDF/Word document, get a structural analysis with three suggested
reader personas, then ask the LLM to critique the document as any of them.

Exports:
- models: analysis, reader and feedback models
- llm: provider selection, clients and LLMGateway
- documents: text extraction from uploads
"""

from readerlens.models import (
    AnalyzeResult,
    DocumentAnalysis,
    ReaderFeedback,
    ReaderFeedbackPayload,
    SuggestedReader,
)
from readerlens.config.settings import LLMSettings, Provider
from readerlens.llm.gateway import LLMGateway

__version__ = "0.1.0"

__all__ = [
    # Models
    "AnalyzeResult",
    "DocumentAnalysis",
    "ReaderFeedback",
    "ReaderFeedbackPayload",
    "SuggestedReader",
    # Config
    "LLMSettings",
    "Provider",
    # Gateway
    "LLMGateway",
]
