"""OpenAI-compatible provider (OpenRouter by default)."""

from typing import List, Optional, Dict, Any
from openai import AsyncOpenAI
from lexbound.core.llm_connector import LLMConnector, Message, LLMResponse
import logging

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterProvider(LLMConnector):
    """Provider for hosted models behind an OpenAI-compatible API."""

    def __init__(self, model_config: Dict[str, Any], api_key: str):
        """Initialize OpenRouter provider.

        Args:
            model_config: Model configuration dict (model_name, optional base_url)
            api_key: API key for the endpoint
        """
        super().__init__(model_config)
        self.client = AsyncOpenAI(
            base_url=model_config.get("base_url") or OPENROUTER_BASE_URL,
            api_key=api_key,
        )

    async def generate(
        self,
        messages: List[Message],
        temperature: float = 0.2,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate response using the chat completions endpoint.

        Args:
            messages: Conversation messages
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            **kwargs: Additional OpenAI-compatible parameters

        Returns:
            LLMResponse with generated content
        """
        try:
            params = {
                "model": self.model_name,
                "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
                "temperature": temperature,
            }

            if max_tokens:
                params["max_tokens"] = max_tokens

            params.update(kwargs)

            response = await self.client.chat.completions.create(**params)

            usage = response.usage
            return LLMResponse(
                content=response.choices[0].message.content or "",
                token_count=usage.total_tokens if usage else 0,
                model_used=self.model_name,
                finish_reason=response.choices[0].finish_reason,
                metadata={
                    "prompt_tokens": usage.prompt_tokens if usage else 0,
                    "completion_tokens": usage.completion_tokens if usage else 0,
                    "model_id": response.model,
                }
            )

        except Exception as e:
            logger.error(f"OpenRouter generation error: {e}")
            raise

    async def check_health(self) -> bool:
        """Check if the API is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            await self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": "test"}],
                max_tokens=1,
            )
            return True

        except Exception as e:
            logger.error(f"OpenRouter health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.client.close()
