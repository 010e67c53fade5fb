"""
LLM Gateway — document analysis and persona feedback.

Each operation selects a provider once, builds the prompts, makes a single
provider call and normalizes the reply. Failures are classified and raised
as LLMError subclasses; nothing is retried and no other provider is tried.

Usage:
    gateway = LLMGateway(LLMSettings.from_env())
    result = await gateway.analyze_document(text)
    payload = await gateway.get_reader_feedback(text, reader.name, reader.description)
"""

from typing import Callable, Optional

import structlog

from readerlens.config.prompt_loader import PromptLoader, get_prompt_loader
from readerlens.config.settings import LLMSettings, display_name
from readerlens.documents.text import truncate_text
from readerlens.llm.errors import UNCONFIGURED_MESSAGE, classify_error
from readerlens.llm.exceptions import (
    EmptyModelOutputError,
    LLMError,
    LLMNotConfiguredError,
    ProviderError,
)
from readerlens.llm.factory import ProviderChoice, create_llm_client, select_provider
from readerlens.llm.response_parser import parse_analysis, parse_feedback
from readerlens.models import AnalyzeResult, ReaderFeedbackPayload

logger = structlog.get_logger("llm")

ANALYSIS_PROMPT = "llm/analysis"
FEEDBACK_PROMPT = "llm/feedback"

ANALYSIS_MAX_TOKENS = 1024
FEEDBACK_MAX_TOKENS = 4096


class LLMGateway:
    """Stateless facade over the configured providers."""

    def __init__(
        self,
        settings: LLMSettings,
        client_factory: Callable = create_llm_client,
        prompts: Optional[PromptLoader] = None,
    ):
        self.settings = settings
        self._client_factory = client_factory
        self._prompts = prompts or get_prompt_loader()

    def select(self) -> ProviderChoice:
        """Provider for the next call; raises LLMNotConfiguredError if none."""
        choice = select_provider(self.settings.preferred_provider, self.settings.available_keys())
        if choice is None:
            raise LLMNotConfiguredError(UNCONFIGURED_MESSAGE)
        return choice

    async def analyze_document(self, text: str) -> AnalyzeResult:
        """
        Analyze theme, tone and audience and suggest up to three reader personas.

        Args:
            text: Extracted document text, already trimmed and non-empty.
        """
        prompt_text, truncated = truncate_text(text, self.settings.max_text_length)

        system_prompt = self._prompts.get(ANALYSIS_PROMPT, "system_prompt")
        user_prompt = self._prompts.render(ANALYSIS_PROMPT, "user_prompt_template", text=prompt_text)

        raw = await self._complete(
            "analysis", system_prompt, user_prompt,
            temperature=0.3, max_tokens=ANALYSIS_MAX_TOKENS, truncated=truncated,
        )
        result = parse_analysis(raw)

        logger.info(
            "analysis_completed",
            readers=len(result.suggested_readers),
            theme_length=len(result.analysis.theme),
        )
        return result

    async def get_reader_feedback(
        self,
        text: str,
        reader_name: str,
        reader_description: str = "",
        is_custom: bool = False,
    ) -> ReaderFeedbackPayload:
        """
        Role-play one reader and return a normalized critique.

        Custom (user-defined) readers get an extra instruction to infer the
        persona's stance from its name and description.
        """
        prompt_text, truncated = truncate_text(text, self.settings.max_text_length)

        system_prompt = self._prompts.get(FEEDBACK_PROMPT, "system_prompt")
        user_prompt = self._prompts.render(
            FEEDBACK_PROMPT, "user_prompt_template",
            text=prompt_text,
            reader_name=reader_name,
            reader_description=reader_description or "",
            is_custom=is_custom,
        )

        raw = await self._complete(
            "feedback", system_prompt, user_prompt,
            temperature=0.7, max_tokens=FEEDBACK_MAX_TOKENS, truncated=truncated,
        )
        payload = parse_feedback(raw)

        logger.info(
            "feedback_completed",
            reader=reader_name,
            is_custom=is_custom,
            score=payload.first_impression_score,
        )
        return payload

    async def _complete(
        self,
        operation: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
        truncated: bool = False,
    ) -> str:
        """One provider round trip; returns stripped, non-empty model text."""
        choice = self.select()
        client = self._client_factory(choice, self.settings)
        provider = choice.provider.value

        logger.info(
            "llm_request",
            operation=operation,
            provider=provider,
            model=client.model,
            prompt_chars=len(user_prompt),
            truncated=truncated,
        )

        try:
            raw = await client.complete(
                system_prompt, user_prompt,
                temperature=temperature, max_tokens=max_tokens,
            )
        except LLMError:
            raise
        except Exception as e:
            classified = classify_error(e)
            logger.error(
                "llm_request_failed",
                operation=operation,
                provider=provider,
                category=classified.category.value,
                error=str(e)[:200],
            )
            raise ProviderError(classified.message, classified.category) from e

        raw = (raw or "").strip()
        if not raw:
            raise EmptyModelOutputError(f"{display_name(choice.provider)} 返回为空")
        return raw
