"""
LLM Client Factory — provider selection and client construction.

Supported providers:
  - deepseek:  DeepSeek API (OpenAI-compatible, own base URL) — default
  - openai:    OpenAI Chat Completions
  - anthropic: Anthropic Messages API

Usage:
    from readerlens.llm.factory import select_provider, create_llm_client

    choice = select_provider(settings.preferred_provider, settings.available_keys())
    if choice is None:
        ...  # unconfigured
    client = create_llm_client(choice, settings)
    raw = await client.complete(system_prompt, user_prompt)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

import httpx

from readerlens.config.settings import PROVIDER_REGISTRY, LLMSettings, Provider
from readerlens.llm.base import ChatCompletionProvider


@dataclass(frozen=True)
class ProviderChoice:
    """The one (provider, key) pair used for a call."""

    provider: Provider
    api_key: str = field(repr=False)

    def __post_init__(self):
        if not self.api_key:
            raise ValueError("ProviderChoice requires a non-empty api_key")


def select_provider(
    preference: Union[Provider, str, None],
    available: Mapping[Union[Provider, str], Optional[str]],
) -> Optional[ProviderChoice]:
    """
    Pick exactly one provider, or None when nothing is configured.

    Deterministic and independent of request content:
      1. deepseek, if keyed and the preference is deepseek or names neither
         openai nor anthropic;
      2. openai, if keyed and preferred, or no preference and no deepseek key;
      3. anthropic, if keyed and preferred, or no preference and no other key;
      4. a preference naming an unkeyed provider falls through to the first
         keyed provider in default order (deepseek, openai, anthropic).
    """
    if not isinstance(preference, Provider):
        preference = Provider.parse(preference)

    keys: Dict[Provider, str] = {}
    for name, key in available.items():
        provider = name if isinstance(name, Provider) else Provider.parse(name)
        if provider is not None and key and key.strip():
            keys[provider] = key.strip()

    deepseek = keys.get(Provider.DEEPSEEK)
    openai = keys.get(Provider.OPENAI)
    anthropic = keys.get(Provider.ANTHROPIC)

    if deepseek and preference not in (Provider.OPENAI, Provider.ANTHROPIC):
        return ProviderChoice(Provider.DEEPSEEK, deepseek)
    if openai and (preference == Provider.OPENAI or (preference is None and not deepseek)):
        return ProviderChoice(Provider.OPENAI, openai)
    if anthropic and (
        preference == Provider.ANTHROPIC or (preference is None and not deepseek and not openai)
    ):
        return ProviderChoice(Provider.ANTHROPIC, anthropic)

    for entry in PROVIDER_REGISTRY:
        key = keys.get(entry["id"])
        if key:
            return ProviderChoice(entry["id"], key)

    return None


def create_llm_client(
    choice: ProviderChoice,
    settings: LLMSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ChatCompletionProvider:
    """
    Build the client for a selected provider.

    Returns:
        A client with ``complete(system_prompt, user_prompt, ...) -> str``.
    """
    if choice.provider == Provider.DEEPSEEK:
        from readerlens.llm.deepseek import DeepSeekClient
        return DeepSeekClient(
            api_key=choice.api_key,
            endpoint=settings.deepseek_endpoint,
            model=settings.deepseek_model,
            timeout=settings.timeout,
            transport=transport,
        )

    elif choice.provider == Provider.OPENAI:
        from readerlens.llm.openai_client import OpenAICompatibleClient
        return OpenAICompatibleClient(
            api_key=choice.api_key,
            endpoint=settings.openai_endpoint,
            model=settings.openai_model,
            logger_name="openai",
            env_key="OPENAI_API_KEY",
            timeout=settings.timeout,
            transport=transport,
        )

    elif choice.provider == Provider.ANTHROPIC:
        from readerlens.llm.anthropic_client import AnthropicClient
        return AnthropicClient(
            api_key=choice.api_key,
            model=settings.anthropic_model,
            timeout=settings.timeout,
            transport=transport,
        )

    raise ValueError(f"Unknown LLM provider: '{choice.provider}'")


def get_available_providers(settings: LLMSettings) -> Dict[str, Any]:
    """
    Provider availability for status endpoints (never includes keys).

    Returns:
        {"providers": [{"id": "deepseek", "name": "DeepSeek", "available": true,
                        "model": "deepseek-chat"}, ...],
         "preferred": "deepseek" | None,
         "selected": "deepseek" | None}
    """
    available = settings.available_keys()
    providers = [
        {
            "id": entry["id"].value,
            "name": entry["name"],
            "available": entry["id"] in available,
            "model": settings.model_for(entry["id"]),
        }
        for entry in PROVIDER_REGISTRY
    ]
    choice = select_provider(settings.preferred_provider, available)

    return {
        "providers": providers,
        "preferred": settings.preferred_provider.value if settings.preferred_provider else None,
        "selected": choice.provider.value if choice else None,
    }
