"""
Configuration: environment settings and prompt templates.
"""

from readerlens.config.settings import (
    DEFAULT_MODELS,
    ENV_KEY_NAMES,
    PROVIDER_REGISTRY,
    LLMSettings,
    Provider,
    display_name,
)
from readerlens.config.prompt_loader import PromptLoader, get_prompt, render_prompt

__all__ = [
    # Settings
    "DEFAULT_MODELS",
    "ENV_KEY_NAMES",
    "PROVIDER_REGISTRY",
    "LLMSettings",
    "Provider",
    "display_name",
    # Prompt loader
    "PromptLoader",
    "get_prompt",
    "render_prompt",
]
