"""
OpenAI-compatible LLM client.

Base client for every provider that speaks the Chat Completions API:
  - OpenAI   (https://api.openai.com/v1)
  - DeepSeek (https://api.deepseek.com/v1)

Both use Bearer auth and the same request/response shape. JSON-only output
is requested through ``response_format={"type": "json_object"}``.
"""

from typing import Any, Dict, List, Optional

import httpx
import structlog

from readerlens.llm.base import build_messages


class OpenAICompatibleClient:
    """Client for OpenAI-compatible chat completion APIs.

    A single attempt per call: HTTP errors propagate to the caller unchanged.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        model: str,
        logger_name: str = "llm",
        env_key: str = "API_KEY",
        timeout: float = 180.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.endpoint = endpoint.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.provider_name = logger_name
        self._transport = transport
        self._log = structlog.get_logger("llm").bind(provider=logger_name)

        if not self.api_key:
            raise ValueError(f"{logger_name}: API key not set (set {env_key})")

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: int = 4096,
    ) -> str:
        """System + user prompt in, raw JSON-mode text out."""
        return await self.chat(
            build_messages(system_prompt, user_prompt),
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=True,
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
        Send a request to the Chat Completions API.

        Returns:
            Message content of the first choice ("" when the model sent none).
        """
        url = f"{self.endpoint}/chat/completions"

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        payload: Dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
            "max_tokens": max_tokens,
        }

        if temperature is not None:
            payload["temperature"] = temperature

        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        return await self._make_request(url, headers, payload)

    async def _make_request(
        self,
        url: str,
        headers: Dict[str, str],
        payload: Dict[str, Any],
    ) -> str:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(url, headers=headers, json=payload)
                response.raise_for_status()

                data = response.json()

                choice = data["choices"][0]
                finish_reason = choice.get("finish_reason", "unknown")
                content = (choice.get("message") or {}).get("content") or ""

                if not content:
                    self._log.warning(
                        "empty_content",
                        finish_reason=finish_reason,
                        usage=data.get("usage", {}),
                    )
                elif finish_reason == "length":
                    self._log.warning(
                        "response_truncated",
                        content_length=len(content),
                        usage=data.get("usage", {}),
                    )

                return content

            except httpx.HTTPStatusError as e:
                detail = (e.response.text or "")[:200]
                self._log.error("api_error", status=e.response.status_code, detail=detail)
                raise
            except Exception as e:
                self._log.error("request_failed", error=str(e))
                raise
