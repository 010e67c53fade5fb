"""
DeepSeek API client.

DeepSeek exposes an OpenAI-compatible endpoint on its own base URL, so the
client is the OpenAI-compatible one with DeepSeek defaults.
"""

from typing import Optional

import httpx

from readerlens.config.settings import DEFAULT_MODELS, Provider
from readerlens.llm.openai_client import OpenAICompatibleClient

DEEPSEEK_API_ENDPOINT = "https://api.deepseek.com/v1"


class DeepSeekClient(OpenAICompatibleClient):
    """Client for the DeepSeek Chat API."""

    def __init__(
        self,
        api_key: str,
        endpoint: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 180.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            api_key=api_key,
            endpoint=endpoint or DEEPSEEK_API_ENDPOINT,
            model=model or DEFAULT_MODELS[Provider.DEEPSEEK],
            logger_name="deepseek",
            env_key="DEEPSEEK_API_KEY",
            timeout=timeout,
            transport=transport,
        )
