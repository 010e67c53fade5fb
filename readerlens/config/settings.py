"""
Runtime configuration for readerlens.

Settings are read once from the environment (and .env) at process start and
passed explicitly to the gateway and the web app.

Recognised variables:
    DEEPSEEK_API_KEY / OPENAI_API_KEY / ANTHROPIC_API_KEY  - provider keys
    LLM_PROVIDER                                           - optional preference
    DEEPSEEK_MODEL / OPENAI_MODEL / ANTHROPIC_MODEL        - model overrides
    DEEPSEEK_API_ENDPOINT / OPENAI_API_ENDPOINT            - base URL overrides
    LLM_TIMEOUT                                            - transport deadline, seconds
    MAX_TEXT_LENGTH                                        - prompt text cap, characters
"""

import os
from enum import Enum
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Provider(str, Enum):
    """LLM providers the gateway can talk to."""

    DEEPSEEK = "deepseek"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Provider"]:
        """Lenient lookup: unknown or blank values mean "no preference"."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


# Registry: id → (display name, key variable). Order is the default priority.
PROVIDER_REGISTRY = [
    {"id": Provider.DEEPSEEK, "name": "DeepSeek", "env_key": "DEEPSEEK_API_KEY"},
    {"id": Provider.OPENAI, "name": "OpenAI", "env_key": "OPENAI_API_KEY"},
    {"id": Provider.ANTHROPIC, "name": "Claude", "env_key": "ANTHROPIC_API_KEY"},
]

DEFAULT_MODELS = {
    Provider.DEEPSEEK: "deepseek-chat",
    Provider.OPENAI: "gpt-4o",
    Provider.ANTHROPIC: "claude-sonnet-4-5-20250929",
}

ENV_KEY_NAMES = [entry["env_key"] for entry in PROVIDER_REGISTRY]

DEFAULT_MAX_TEXT_LENGTH = 12000


def display_name(provider: Provider) -> str:
    for entry in PROVIDER_REGISTRY:
        if entry["id"] == provider:
            return entry["name"]
    return provider.value


class LLMSettings(BaseModel):
    """Credentials and tuning knobs for the LLM layer."""

    model_config = ConfigDict(frozen=True)

    deepseek_api_key: str = Field(default="", repr=False)
    openai_api_key: str = Field(default="", repr=False)
    anthropic_api_key: str = Field(default="", repr=False)

    preferred_provider: Optional[Provider] = None

    deepseek_model: str = DEFAULT_MODELS[Provider.DEEPSEEK]
    openai_model: str = DEFAULT_MODELS[Provider.OPENAI]
    anthropic_model: str = DEFAULT_MODELS[Provider.ANTHROPIC]

    deepseek_endpoint: str = "https://api.deepseek.com/v1"
    openai_endpoint: str = "https://api.openai.com/v1"

    timeout: float = 180.0
    max_text_length: int = Field(default=DEFAULT_MAX_TEXT_LENGTH, gt=0)

    @field_validator("deepseek_api_key", "openai_api_key", "anthropic_api_key", mode="before")
    @classmethod
    def _strip_key(cls, v):
        return (v or "").strip()

    @field_validator("preferred_provider", mode="before")
    @classmethod
    def _parse_provider(cls, v):
        if v is None or isinstance(v, Provider):
            return v
        return Provider.parse(str(v))

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "LLMSettings":
        """Build settings from process environment (optionally loading .env first)."""
        if dotenv:
            load_dotenv()

        def _env(name: str, default: str) -> str:
            return os.getenv(name) or default

        return cls(
            deepseek_api_key=os.getenv("DEEPSEEK_API_KEY", ""),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            preferred_provider=os.getenv("LLM_PROVIDER"),
            deepseek_model=_env("DEEPSEEK_MODEL", DEFAULT_MODELS[Provider.DEEPSEEK]),
            openai_model=_env("OPENAI_MODEL", DEFAULT_MODELS[Provider.OPENAI]),
            anthropic_model=_env("ANTHROPIC_MODEL", DEFAULT_MODELS[Provider.ANTHROPIC]),
            deepseek_endpoint=_env("DEEPSEEK_API_ENDPOINT", "https://api.deepseek.com/v1"),
            openai_endpoint=_env("OPENAI_API_ENDPOINT", "https://api.openai.com/v1"),
            timeout=float(_env("LLM_TIMEOUT", "180")),
            max_text_length=int(_env("MAX_TEXT_LENGTH", str(DEFAULT_MAX_TEXT_LENGTH))),
        )

    def available_keys(self) -> Dict[Provider, str]:
        """Non-empty keys by provider."""
        keys = {
            Provider.DEEPSEEK: self.deepseek_api_key,
            Provider.OPENAI: self.openai_api_key,
            Provider.ANTHROPIC: self.anthropic_api_key,
        }
        return {p: k for p, k in keys.items() if k}

    def model_for(self, provider: Provider) -> str:
        return {
            Provider.DEEPSEEK: self.deepseek_model,
            Provider.OPENAI: self.openai_model,
            Provider.ANTHROPIC: self.anthropic_model,
        }[provider]
