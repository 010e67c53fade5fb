"""
Common interface of the provider clients.

Every client turns a (system prompt, user prompt) pair into the raw text the
model returned; prompt construction and parsing stay in the gateway.
"""

from typing import Dict, List, Optional, Protocol


class ChatCompletionProvider(Protocol):
    """What LLMGateway needs from a provider client."""

    model: str

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: int = 4096,
    ) -> str: ...


def build_messages(system_prompt: str, user_prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]
