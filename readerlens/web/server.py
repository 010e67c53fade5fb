"""
FastAPI web server for readerlens.

Endpoints:
    GET  /health                 - Liveness probe
    GET  /api/providers          - Configured providers and current selection
    POST /api/analyze            - Upload PDF/Word → extracted text, analysis, suggested readers
    POST /api/readers/custom     - Create a user-defined reader persona
    POST /api/feedback           - Persona critique of the extracted text

Errors are returned as {"error": <message>, "code": <machine-readable code>}.
"""

import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from readerlens.logging_config import setup_logging

setup_logging("server", level=os.getenv("LOG_LEVEL", "INFO"))

import structlog

from readerlens.config.settings import LLMSettings
from readerlens.documents import DocumentError, MissingFileError, ingest_document
from readerlens.llm.exceptions import LLMError
from readerlens.llm.factory import get_available_providers
from readerlens.llm.gateway import LLMGateway
from readerlens.models import ReaderFeedback, SuggestedReader

logger = structlog.get_logger("server")

settings = LLMSettings.from_env()
gateway = LLMGateway(settings)


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

@asynccontextmanager
async def _lifespan(application: FastAPI):
    providers = get_available_providers(gateway.settings)
    if providers["selected"] is None:
        logger.warning("no_llm_provider_configured")
    else:
        logger.info(
            "llm_provider_ready",
            selected=providers["selected"],
            available=[p["id"] for p in providers["providers"] if p["available"]],
        )
    yield


app = FastAPI(title="readerlens", version="0.1.0", lifespan=_lifespan)


def _error(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "code": code})


@app.exception_handler(DocumentError)
async def _document_error_handler(request: Request, exc: DocumentError):
    return _error(exc.http_status, exc.message, exc.code)


@app.exception_handler(LLMError)
async def _llm_error_handler(request: Request, exc: LLMError):
    logger.warning("llm_error_returned", path=request.url.path, code=exc.category.value)
    return _error(exc.category.http_status, exc.message, exc.category.value)


# Fallback codes and messages for unexpected failures, by route
_UNEXPECTED_ERRORS = {
    "/api/analyze": ("ANALYSIS_FAILED", "文档分析失败"),
    "/api/feedback": ("FEEDBACK_FAILED", "获取读者反馈失败"),
}


@app.exception_handler(Exception)
async def _unexpected_error_handler(request: Request, exc: Exception):
    code, message = _UNEXPECTED_ERRORS.get(request.url.path, ("INTERNAL_ERROR", "服务器内部错误"))
    logger.error(
        "unhandled_request_error",
        path=request.url.path,
        code=code,
        error_type=type(exc).__name__,
        error=str(exc)[:200],
    )
    return _error(500, message, code)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class CustomReaderRequest(BaseModel):
    name: str = ""
    description: str = ""


class FeedbackReader(BaseModel):
    id: str
    name: str
    description: Optional[str] = ""
    is_custom: Optional[bool] = Field(default=False, alias="isCustom")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/providers")
async def providers():
    return get_available_providers(gateway.settings)


@app.post("/api/analyze")
async def analyze(file: Optional[UploadFile] = File(None)):
    """Extract text from an uploaded document and run the structural analysis."""
    if file is None or not file.filename:
        raise MissingFileError("请上传文件")

    data = await file.read()
    document = ingest_document(data, file.content_type, file.filename)

    logger.info("analyze_request", filename=document.filename, chars=document.char_count)
    result = await gateway.analyze_document(document.text)

    return {
        "filename": file.filename,
        "extractedText": document.text,
        **result.to_wire(),
    }


@app.post("/api/readers/custom")
async def create_custom_reader(body: CustomReaderRequest):
    if not body.name.strip():
        return _error(400, "请填写读者身份名称", "INVALID_READER")
    return SuggestedReader.custom(body.name, body.description).to_wire()


@app.post("/api/feedback")
async def feedback(request: Request):
    """Critique the extracted text from one reader's point of view."""
    try:
        body: Dict[str, Any] = await request.json()
    except ValueError:
        return _error(400, "请求体不是有效的 JSON", "INVALID_BODY")
    if not isinstance(body, dict):
        return _error(400, "请求体不是有效的 JSON", "INVALID_BODY")

    text = body.get("extractedText")
    text = text.strip() if isinstance(text, str) else ""
    if not text:
        return _error(400, "文档内容为空", "EMPTY_TEXT")

    try:
        reader_in = FeedbackReader.model_validate(body.get("reader"))
        reader = SuggestedReader(
            id=reader_in.id,
            name=reader_in.name,
            description=reader_in.description or "",
            is_custom=bool(reader_in.is_custom),
        )
    except ValidationError:
        return _error(400, "请选择读者身份", "INVALID_READER")

    payload = await gateway.get_reader_feedback(
        text, reader.name, reader.description, reader.is_custom,
    )
    return ReaderFeedback.from_payload(reader, payload).to_wire()
