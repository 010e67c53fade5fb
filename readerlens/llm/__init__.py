"""LLM module — provider selection, clients, response parsing and the gateway."""

from readerlens.llm.exceptions import (
    ErrorCategory,
    LLMError,
    LLMNotConfiguredError,
    ProviderError,
    EmptyModelOutputError,
    MalformedModelOutputError,
)
from readerlens.llm.errors import ClassifiedError, classify_error
from readerlens.llm.openai_client import OpenAICompatibleClient
from readerlens.llm.deepseek import DeepSeekClient
from readerlens.llm.anthropic_client import AnthropicClient
from readerlens.llm.factory import (
    ProviderChoice,
    create_llm_client,
    get_available_providers,
    select_provider,
)
from readerlens.llm.response_parser import (
    ResponseSchema,
    extract_json_object,
    parse_analysis,
    parse_feedback,
    parse_response,
)
from readerlens.llm.gateway import LLMGateway

__all__ = [
    "ErrorCategory",
    "LLMError",
    "LLMNotConfiguredError",
    "ProviderError",
    "EmptyModelOutputError",
    "MalformedModelOutputError",
    "ClassifiedError",
    "classify_error",
    "OpenAICompatibleClient",
    "DeepSeekClient",
    "AnthropicClient",
    "ProviderChoice",
    "create_llm_client",
    "get_available_providers",
    "select_provider",
    "ResponseSchema",
    "extract_json_object",
    "parse_analysis",
    "parse_feedback",
    "parse_response",
    "LLMGateway",
]
