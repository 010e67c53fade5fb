"""
Tests for readerlens/config/settings.py
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from readerlens.config.settings import DEFAULT_MODELS, LLMSettings, Provider, display_name

ALL_VARS = [
    "DEEPSEEK_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY", "LLM_PROVIDER",
    "DEEPSEEK_MODEL", "OPENAI_MODEL", "ANTHROPIC_MODEL",
    "DEEPSEEK_API_ENDPOINT", "OPENAI_API_ENDPOINT", "LLM_TIMEOUT", "MAX_TEXT_LENGTH",
]


def _clean_env(**overrides):
    env = {k: v for k, v in os.environ.items() if k not in ALL_VARS}
    env.update(overrides)
    return env


class TestProviderParse:

    @pytest.mark.parametrize("value,expected", [
        ("deepseek", Provider.DEEPSEEK),
        (" OpenAI ", Provider.OPENAI),
        ("ANTHROPIC", Provider.ANTHROPIC),
        ("gemini", None),
        ("", None),
        (None, None),
    ])
    def test_parse(self, value, expected):
        assert Provider.parse(value) == expected

    def test_display_name(self):
        assert display_name(Provider.ANTHROPIC) == "Claude"


class TestLLMSettingsFromEnv:

    def test_empty_environment_is_valid(self):
        with patch.dict(os.environ, _clean_env(), clear=True):
            settings = LLMSettings.from_env(dotenv=False)

        assert settings.available_keys() == {}
        assert settings.preferred_provider is None
        assert settings.model_for(Provider.DEEPSEEK) == DEFAULT_MODELS[Provider.DEEPSEEK]
        assert settings.max_text_length == 12000

    def test_reads_keys_and_overrides(self):
        env = _clean_env(
            DEEPSEEK_API_KEY=" ds-key ",
            ANTHROPIC_API_KEY="an-key",
            LLM_PROVIDER="Anthropic",
            ANTHROPIC_MODEL="claude-custom",
            LLM_TIMEOUT="30",
            MAX_TEXT_LENGTH="5000",
        )
        with patch.dict(os.environ, env, clear=True):
            settings = LLMSettings.from_env(dotenv=False)

        assert settings.available_keys() == {
            Provider.DEEPSEEK: "ds-key",
            Provider.ANTHROPIC: "an-key",
        }
        assert settings.preferred_provider == Provider.ANTHROPIC
        assert settings.model_for(Provider.ANTHROPIC) == "claude-custom"
        assert settings.timeout == 30.0
        assert settings.max_text_length == 5000

    def test_unknown_preference_ignored(self):
        with patch.dict(os.environ, _clean_env(LLM_PROVIDER="gemini"), clear=True):
            assert LLMSettings.from_env(dotenv=False).preferred_provider is None

    def test_blank_model_override_uses_default(self):
        with patch.dict(os.environ, _clean_env(OPENAI_MODEL=""), clear=True):
            assert LLMSettings.from_env(dotenv=False).openai_model == "gpt-4o"


class TestLLMSettings:

    def test_keys_hidden_from_repr(self):
        settings = LLMSettings(openai_api_key="sk-secret")
        assert "sk-secret" not in repr(settings)
        assert "sk-secret" not in str(settings)

    def test_blank_key_not_available(self):
        assert LLMSettings(openai_api_key="   ").available_keys() == {}

    def test_frozen(self):
        settings = LLMSettings()
        with pytest.raises(ValidationError):
            settings.openai_api_key = "x"

    def test_max_text_length_positive(self):
        with pytest.raises(ValidationError):
            LLMSettings(max_text_length=0)
