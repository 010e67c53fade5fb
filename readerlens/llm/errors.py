"""
Provider error classification.

Maps whatever a provider call raised (httpx errors, SDK-style exception
objects, or plain dicts) onto an ErrorCategory plus a canned message. Only
common status/code fields are read, so the rules hold for any provider.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from readerlens.config.settings import ENV_KEY_NAMES
from readerlens.llm.exceptions import ErrorCategory

MAX_DETAIL_LENGTH = 200

QUOTA_MESSAGE = (
    "当前 API 配额已用尽或未开通计费。请到服务商控制台检查用量与账单"
    "（OpenAI：https://platform.openai.com/account/billing）；"
    "也可以在 .env 中设置 LLM_PROVIDER=deepseek / openai / anthropic 并填入对应的 API Key 以切换服务商。"
)
INVALID_KEY_MESSAGE = "API Key 无效或已失效，请检查 .env 中的配置。"
UNCONFIGURED_MESSAGE = (
    "未配置 LLM：请在项目根目录创建 .env，并添加 "
    f"{ENV_KEY_NAMES[0]}（推荐）、{ENV_KEY_NAMES[1]} 或 {ENV_KEY_NAMES[2]}"
)

_QUOTA_MARKERS = ("429", "quota", "exceeded your current quota")
_QUOTA_CODES = {"insufficient_quota", "rate_limit_exceeded", "rate_limit_error"}
_AUTH_CODES = {"invalid_api_key", "authentication_error"}


@dataclass(frozen=True)
class ClassifiedError:
    category: ErrorCategory
    message: str


def _field(error: Any, name: str) -> Any:
    if isinstance(error, Mapping):
        return error.get(name)
    return getattr(error, name, None)


def _status_of(error: Any) -> Optional[int]:
    for name in ("status", "status_code"):
        value = _field(error, name)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    response = _field(error, "response")
    if isinstance(response, httpx.Response):
        return response.status_code
    return None


def _provider_body(error: Any) -> Mapping:
    """Structured error body: {"error": {...}} from the HTTP response or the object itself."""
    body = _field(error, "body")
    response = _field(error, "response")
    if body is None and isinstance(response, httpx.Response):
        try:
            body = response.json()
        except ValueError:
            body = None
    if isinstance(body, Mapping):
        inner = body.get("error")
        return inner if isinstance(inner, Mapping) else body
    return {}


def _provider_message(error: Any, body: Mapping) -> str:
    for source in (body, error):
        message = _field(source, "message")
        if isinstance(message, str) and message:
            return message
    if isinstance(error, Mapping):
        return str(dict(error))
    return str(error)


def classify_error(error: Any) -> ClassifiedError:
    """
    Classify a provider failure. First match wins:

    1. 429 / quota markers / insufficient_quota → RATE_LIMIT_OR_QUOTA
    2. 401 / invalid_api_key                    → INVALID_CREDENTIAL
    3. anything else                            → PROVIDER_FAILURE with the
       provider's own message capped at 200 characters
    """
    status = _status_of(error)
    body = _provider_body(error)
    codes = {
        str(value)
        for value in (_field(error, "code"), _field(error, "type"), body.get("code"), body.get("type"))
        if value
    }
    text = str(error)

    if status == 429 or codes & _QUOTA_CODES or any(m in text for m in _QUOTA_MARKERS):
        return ClassifiedError(ErrorCategory.RATE_LIMIT_OR_QUOTA, QUOTA_MESSAGE)

    if status == 401 or codes & _AUTH_CODES:
        return ClassifiedError(ErrorCategory.INVALID_CREDENTIAL, INVALID_KEY_MESSAGE)

    detail = _provider_message(error, body)
    if len(detail) > MAX_DETAIL_LENGTH:
        detail = detail[:MAX_DETAIL_LENGTH] + "…"
    return ClassifiedError(ErrorCategory.PROVIDER_FAILURE, f"API 调用失败：{detail}")
