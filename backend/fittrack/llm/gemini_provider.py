"""
Google Gemini LLM Provider (generateContent endpoint).
"""

import time
from typing import Optional, List, Dict, Any

from .base import LLMProvider, LLMMessage, LLMResponse
from ..core.errors import UpstreamError


class GeminiProvider(LLMProvider):
    """
    Provider for the Gemini generative language API.
    System messages are sent as systemInstruction; assistant turns use role "model".
    """

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        default_temperature: float = 0.4,
        default_max_tokens: int = 2048,
        timeout: float = 30.0,
    ):
        super().__init__(api_key, model, base_url, default_temperature, default_max_tokens, timeout)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def _format_messages(self, messages: List[LLMMessage]) -> List[Dict[str, Any]]:
        return [
            {
                "role": "model" if m.role == "assistant" else "user",
                "parts": [{"text": m.content}],
            }
            for m in messages if m.role != "system"
        ]

    async def chat_completion(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Send request to the generateContent endpoint."""
        start_time = time.time()
        model = kwargs.get("model", self.model)
        payload: Dict[str, Any] = {
            "contents": self._format_messages(messages),
            "generationConfig": {
                "temperature": temperature if temperature is not None else self.default_temperature,
                "maxOutputTokens": max_tokens or self.default_max_tokens,
            },
        }
        system_text = "\n\n".join(m.content for m in messages if m.role == "system")
        if system_text:
            payload["systemInstruction"] = {"parts": [{"text": system_text}]}

        data = await self._post_json(f"{self.base_url}/models/{model}:generateContent", payload, model)

        try:
            parts = data["candidates"][0]["content"]["parts"]
            content = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError("gemini response contained no candidates") from e
        if not content:
            raise UpstreamError("gemini response was empty")

        metadata = data.get("usageMetadata", {})
        usage = {
            "prompt_tokens": metadata.get("promptTokenCount", 0),
            "completion_tokens": metadata.get("candidatesTokenCount", 0),
            "total_tokens": metadata.get("totalTokenCount", 0),
        }
        self._log_completion(model, usage, start_time)
        return LLMResponse(content=content, model=model, usage=usage, raw=data)
