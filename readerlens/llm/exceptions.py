"""
Exceptions raised by the LLM layer.

Every exception carries a short machine-readable category so callers can
branch on it without parsing the (user-facing, Chinese) message.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """User-actionable failure categories."""

    RATE_LIMIT_OR_QUOTA = "RATE_LIMIT_OR_QUOTA"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    PROVIDER_FAILURE = "PROVIDER_FAILURE"
    EMPTY_MODEL_OUTPUT = "EMPTY_MODEL_OUTPUT"
    MALFORMED_MODEL_OUTPUT = "MALFORMED_MODEL_OUTPUT"
    UNCONFIGURED = "NO_LLM_CONFIG"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorCategory.RATE_LIMIT_OR_QUOTA: 429,
    ErrorCategory.INVALID_CREDENTIAL: 502,
    ErrorCategory.PROVIDER_FAILURE: 502,
    ErrorCategory.EMPTY_MODEL_OUTPUT: 502,
    ErrorCategory.MALFORMED_MODEL_OUTPUT: 502,
    ErrorCategory.UNCONFIGURED: 503,
}


class LLMError(Exception):
    """Base class for all gateway failures."""

    category: ErrorCategory = ErrorCategory.PROVIDER_FAILURE

    def __init__(self, message: str, category: Optional[ErrorCategory] = None):
        super().__init__(message)
        self.message = message
        if category is not None:
            self.category = category

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.category.value}


class LLMNotConfiguredError(LLMError):
    """No usable provider key is configured."""

    category = ErrorCategory.UNCONFIGURED


class ProviderError(LLMError):
    """Transport, auth or quota failure, already classified."""


class EmptyModelOutputError(LLMError):
    """Provider call succeeded but returned a blank body."""

    category = ErrorCategory.EMPTY_MODEL_OUTPUT


class MalformedModelOutputError(LLMError):
    """No JSON object could be recovered from the model output."""

    category = ErrorCategory.MALFORMED_MODEL_OUTPUT
