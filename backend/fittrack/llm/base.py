"""
LLM Provider Base - Abstract base for all LLM API providers.
"""

import httpx
import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field

from ..core.errors import UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class LLMMessage:
    """Represents a message in a conversation."""
    role: str  # "system", "user", "assistant"
    content: str

    @staticmethod
    def text(role: str, text: str) -> "LLMMessage":
        """Create a text message."""
        return LLMMessage(role=role, content=text)


@dataclass
class LLMResponse:
    """Response from an LLM API call."""
    content: str
    model: str = ""
    usage: Dict[str, int] = field(default_factory=dict)
    raw: Optional[Dict[str, Any]] = None


class LLMProvider(ABC):
    """
    Abstract base class for LLM API providers.

    Providers surface every failure as UpstreamError; a request that
    exceeds `timeout` seconds raises UpstreamTimeoutError. No retries.
    """

    name = "base"

    def __init__(self, api_key: str, model: str, base_url: Optional[str] = None,
                 default_temperature: float = 0.7, default_max_tokens: int = 2048,
                 timeout: float = 30.0):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens
        self.timeout = timeout

    @abstractmethod
    async def chat_completion(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """
        Send a chat completion request.

        Args:
            messages: List of conversation messages
            temperature: Sampling temperature override
            max_tokens: Max tokens override
            **kwargs: Additional provider-specific parameters

        Returns:
            LLMResponse with the generated content

        Raises:
            UpstreamError: Network error, non-2xx status or unexpected payload
            UpstreamTimeoutError: The call exceeded the timeout
        """
        pass

    async def generate(self, prompt: str, **kwargs) -> str:
        """Send a single user prompt and return the raw response text."""
        response = await self.chat_completion([LLMMessage.text("user", prompt)], **kwargs)
        return response.content

    def _format_messages(self, messages: List[LLMMessage]) -> List[Dict[str, Any]]:
        """Convert LLMMessage list to API-compatible format."""
        return [{"role": m.role, "content": m.content} for m in messages]

    def _get_headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    async def _post_json(self, url: str, payload: Dict[str, Any], model: str) -> Dict[str, Any]:
        """
        POST a JSON payload and return the decoded JSON body.

        Logs duration and failures with structured extra fields.
        """
        start_time = time.time()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"LLM API call starting: provider={self.name}, model={model}")

        def _log_failure(error: Exception) -> None:
            logger.error(
                f"LLM API call failed: {error}",
                extra={"extra_fields": {
                    "provider": self.name,
                    "model": model,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                    "error": str(error),
                }}
            )

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(url, json=payload, headers=self._get_headers())
                logger.debug(f"LLM API response status: {resp.status_code}")
                resp.raise_for_status()
                data = resp.json()
        except httpx.TimeoutException as e:
            _log_failure(e)
            raise UpstreamTimeoutError(f"{self.name} request timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            _log_failure(e)
            raise UpstreamError(f"{self.name} returned HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            _log_failure(e)
            raise UpstreamError(f"{self.name} request failed: {e}") from e

        logger.debug(f"LLM API call returned in {(time.time() - start_time) * 1000:.2f}ms")
        return data

    def _log_completion(self, model: str, usage: Dict[str, Any], started_at: float) -> None:
        logger.info(
            "LLM API call completed",
            extra={"extra_fields": {
                "provider": self.name,
                "model": model,
                "prompt_tokens": usage.get("prompt_tokens", 0),
                "completion_tokens": usage.get("completion_tokens", 0),
                "total_tokens": usage.get("total_tokens", 0),
                "duration_ms": round((time.time() - started_at) * 1000, 2),
            }}
        )
