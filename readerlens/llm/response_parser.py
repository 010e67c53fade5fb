"""
Tolerant parsing of model output.

Models are asked for bare JSON but sometimes wrap it in prose or code
fences. Parsing is two-stage: a strict ``json.loads`` of the whole text, then
one strict attempt on the span from the first "{" to the last "}". Only when
both fail is the output rejected; an incomplete but well-formed object is
normalized with defaults instead.
"""

import json
import math
from enum import Enum
from typing import Any, Dict, List, Optional

import structlog

from readerlens.llm.exceptions import MalformedModelOutputError
from readerlens.models import (
    AnalyzeResult,
    DocumentAnalysis,
    ReaderFeedbackPayload,
    SuggestedReader,
    new_reader_id,
)

logger = structlog.get_logger("llm")

MAX_SUGGESTED_READERS = 3
DEFAULT_SCORE = 5
MIN_SCORE, MAX_SCORE = 1, 10


class ResponseSchema(str, Enum):
    ANALYSIS = "analysis"
    FEEDBACK = "feedback"


_MALFORMED_MESSAGES = {
    ResponseSchema.ANALYSIS: "LLM 返回的不是有效 JSON",
    ResponseSchema.FEEDBACK: "读者反馈返回的不是有效 JSON",
}


def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def extract_json_object(raw: str, schema: ResponseSchema = ResponseSchema.ANALYSIS) -> Dict[str, Any]:
    """
    Recover one JSON object from model text.

    Raises:
        MalformedModelOutputError: no parseable object found.
    """
    data = _loads_object(raw)
    if data is not None:
        return data

    start = raw.find("{")
    end = raw.rfind("}")
    if start != -1 and end > start:
        data = _loads_object(raw[start:end + 1])
        if data is not None:
            return data

    logger.warning("malformed_model_output", schema=schema.value, preview=raw[:200])
    raise MalformedModelOutputError(_MALFORMED_MESSAGES[schema])


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _clamp_score(value: Any) -> int:
    """Round half up, clamp to 1..10; NaN and anything non-numeric becomes 5."""
    if isinstance(value, bool):
        return DEFAULT_SCORE
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return DEFAULT_SCORE
    # ints are clamped directly: arbitrarily large JSON integers do not fit a float
    if isinstance(value, int):
        return min(MAX_SCORE, max(MIN_SCORE, value))
    if not isinstance(value, float) or math.isnan(value):
        return DEFAULT_SCORE
    if math.isinf(value):
        return MAX_SCORE if value > 0 else MIN_SCORE
    return min(MAX_SCORE, max(MIN_SCORE, math.floor(value + 0.5)))


def _normalize_readers(items: Any) -> List[SuggestedReader]:
    if not isinstance(items, list):
        return []

    readers = []
    for i, item in enumerate(items[:MAX_SUGGESTED_READERS]):
        item = item if isinstance(item, dict) else {}
        name = _text(item.get("name")).strip()
        readers.append(
            SuggestedReader(
                id=new_reader_id("suggested", i),
                name=name or f"读者 {i + 1}",
                description=_text(item.get("description")),
                is_custom=False,
            )
        )
    return readers


def parse_analysis(raw: str) -> AnalyzeResult:
    """Normalize an analysis response. Fewer than 3 readers are kept as-is."""
    data = extract_json_object(raw, ResponseSchema.ANALYSIS)

    return AnalyzeResult(
        analysis=DocumentAnalysis(
            theme=_text(data.get("theme")),
            tone=_text(data.get("tone")),
            target_audience=_text(data.get("targetAudience")),
        ),
        suggested_readers=_normalize_readers(data.get("suggestedReaders")),
    )


def parse_feedback(raw: str) -> ReaderFeedbackPayload:
    """Normalize a persona feedback response.

    ``readingFeeling`` falls back to the legacy ``painPoints`` field, then "".
    """
    data = extract_json_object(raw, ResponseSchema.FEEDBACK)

    pain_points = data.get("painPoints")
    pain_points = pain_points if isinstance(pain_points, str) else None
    reading_feeling = _text(data.get("readingFeeling")).strip() or (pain_points or "").strip()

    return ReaderFeedbackPayload(
        first_impression_score=_clamp_score(data.get("firstImpressionScore")),
        first_impression_reason=_text(data.get("firstImpressionReason")),
        reading_feeling=reading_feeling,
        pain_points=pain_points,
        revision_suggestions=_text(data.get("revisionSuggestions")),
    )


def parse_response(raw: str, schema: ResponseSchema):
    """Dispatch on schema: AnalyzeResult or ReaderFeedbackPayload."""
    if schema == ResponseSchema.ANALYSIS:
        return parse_analysis(raw)
    return parse_feedback(raw)
