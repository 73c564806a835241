"""
OpenAI-compatible LLM Provider (chat/completions endpoint).
"""

import time
from typing import Optional, List, Dict, Any

from .base import LLMProvider, LLMMessage, LLMResponse
from ..core.errors import UpstreamError


class OpenAIProvider(LLMProvider):
    """
    Provider for OpenAI and any OpenAI-compatible chat/completions API.
    """

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        default_temperature: float = 0.7,
        default_max_tokens: int = 2048,
        timeout: float = 30.0,
    ):
        super().__init__(api_key, model, base_url, default_temperature, default_max_tokens, timeout)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def chat_completion(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Send request to the Chat Completions endpoint."""
        start_time = time.time()
        payload: Dict[str, Any] = {
            "model": kwargs.get("model", self.model),
            "messages": self._format_messages(messages),
            "temperature": temperature if temperature is not None else self.default_temperature,
            "max_tokens": max_tokens or self.default_max_tokens,
        }

        data = await self._post_json(f"{self.base_url}/chat/completions", payload, payload["model"])

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError("openai response contained no choices") from e
        if not content:
            raise UpstreamError("openai response was empty")

        usage = data.get("usage", {})
        self._log_completion(data.get("model", self.model), usage, start_time)
        return LLMResponse(
            content=content,
            model=data.get("model", self.model),
            usage=usage,
            raw=data,
        )
