"""
Anthropic Claude LLM client.

Uses the Anthropic Messages API (https://api.anthropic.com/v1/messages).
The API differs from OpenAI's:
  - Auth: x-api-key + anthropic-version headers
  - The system prompt is a top-level field, not a role="system" message
  - Response: {"content": [{"type": "text", "text": "..."}]}
  - No JSON response mode; the system prompt alone enforces the schema

The client converts OpenAI-style messages internally so callers stay the same.
"""

from typing import Any, Dict, List, Optional, Tuple

import httpx
import structlog

from readerlens.config.settings import DEFAULT_MODELS, Provider
from readerlens.llm.base import build_messages

logger = structlog.get_logger("llm")

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicClient:
    """Client for the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        timeout: float = 180.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model or DEFAULT_MODELS[Provider.ANTHROPIC]
        self.timeout = timeout
        self.provider_name = "anthropic"
        self._transport = transport

        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: int = 4096,
    ) -> str:
        return await self.chat(
            build_messages(system_prompt, user_prompt),
            temperature=temperature,
            max_tokens=max_tokens,
            model=model,
        )

    async def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: int = 4096,
        json_mode: bool = False,
        model: Optional[str] = None,
    ) -> str:
        """
        Send a request to the Anthropic Messages API.

        ``json_mode`` is accepted for interface compatibility and ignored.
        """
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }

        system_text, anthropic_messages = self._convert_messages(messages)

        payload: Dict[str, Any] = {
            "model": model or self.model,
            "max_tokens": max_tokens,
            "messages": anthropic_messages,
        }

        if system_text:
            payload["system"] = system_text

        if temperature is not None:
            payload["temperature"] = temperature

        return await self._make_request(headers, payload)

    @staticmethod
    def _convert_messages(
        messages: List[Dict[str, str]],
    ) -> Tuple[str, List[Dict[str, str]]]:
        """
        OpenAI: [{"role": "system", ...}, {"role": "user", ...}]
        Anthropic: system="...", messages=[{"role": "user", ...}]
        """
        system_parts = []
        anthropic_msgs = []

        for msg in messages:
            role = msg.get("role", "user")
            content = msg.get("content", "")

            if role == "system":
                system_parts.append(content)
            elif role in ("user", "assistant"):
                anthropic_msgs.append({"role": role, "content": content})

        return "\n\n".join(system_parts), anthropic_msgs

    async def _make_request(
        self,
        headers: Dict[str, str],
        payload: Dict[str, Any],
    ) -> str:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(ANTHROPIC_API_URL, headers=headers, json=payload)
                response.raise_for_status()

                data = response.json()

                text_parts = [
                    block.get("text", "")
                    for block in data.get("content", [])
                    if block.get("type") == "text"
                ]
                content = "\n".join(text_parts)

                stop_reason = data.get("stop_reason", "unknown")

                if not content:
                    logger.warning("empty_content", provider="anthropic", stop_reason=stop_reason)
                elif stop_reason == "max_tokens":
                    logger.warning("response_truncated", provider="anthropic", content_length=len(content))

                return content

            except httpx.HTTPStatusError as e:
                logger.error(
                    "api_error",
                    provider="anthropic",
                    status=e.response.status_code,
                    detail=(e.response.text or "")[:200],
                )
                raise
            except Exception as e:
                logger.error("request_failed", provider="anthropic", error=str(e))
                raise
