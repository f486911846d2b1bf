"""Ollama provider for locally hosted models."""

import logging
from typing import Any

import httpx

from lexbound.core.llm_connector import LLMConnector, LLMResponse, Message

logger = logging.getLogger(__name__)


class OllamaProvider(LLMConnector):
    """Ollama provider for local model inference."""

    def __init__(
        self,
        model_config: dict[str, Any],
        base_url: str = "http://localhost:11434",
        timeout: float = 120.0,
    ):
        """Initialize Ollama provider.

        Args:
            model_config: Model configuration dict
            base_url: Ollama server URL
            timeout: HTTP timeout in seconds
        """
        super().__init__(model_config)
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(timeout=timeout)

    async def generate(
        self,
        messages: list[Message],
        temperature: float = 0.2,
        max_tokens: int | None = None,
        **kwargs,
    ) -> LLMResponse:
        """Generate response using Ollama's chat endpoint.

        Args:
            messages: Conversation messages
            temperature: Sampling temperature
            max_tokens: Maximum tokens (sent as num_predict)
            **kwargs: Additional Ollama options

        Returns:
            LLMResponse with generated content
        """
        payload = {
            "model": self.model_name,
            "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
            "stream": False,
            "options": {
                "temperature": temperature,
                **kwargs,
            },
        }

        if max_tokens:
            payload["options"]["num_predict"] = max_tokens

        try:
            response = await self.client.post(f"{self.base_url}/api/chat", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Ollama HTTP error: {e.response.status_code} - {e.response.text}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"Ollama generation error: {e}")
            raise

        data = response.json()
        prompt_tokens = data.get("prompt_eval_count", 0)
        completion_tokens = data.get("eval_count", 0)

        return LLMResponse(
            content=data.get("message", {}).get("content", ""),
            token_count=prompt_tokens + completion_tokens,
            model_used=self.model_name,
            finish_reason="stop" if data.get("done", False) else "length",
            metadata={
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "eval_duration_ms": data.get("eval_duration", 0) // 1_000_000,
            },
        )

    async def check_health(self) -> bool:
        """Check that the Ollama server answers."""
        try:
            response = await self.client.get(f"{self.base_url}/api/tags")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.error(f"Ollama health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.client.aclose()
