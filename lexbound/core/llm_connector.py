"""Text-completion collaborator abstraction.

The core only needs ``complete(prompt) -> text``. LLMConnector is the
swappable provider interface; ConnectorCompletionService adapts any provider
to the single-prompt contract used by the generation loop.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


@dataclass
class Message:
    """Chat message format."""
    role: str  # "user", "assistant", "system"
    content: str


@dataclass
class LLMResponse:
    """Standardized LLM response."""
    content: str
    token_count: int
    model_used: str
    finish_reason: str  # "stop", "length", etc.
    metadata: Dict[str, Any] = field(default_factory=dict)


class LLMConnector(ABC):
    """Abstract base class for LLM provider implementations."""

    def __init__(self, model_config: Dict[str, Any]):
        """Initialize connector with model configuration.

        Args:
            model_config: Model configuration dict with provider-specific settings
        """
        self.model_config = model_config
        self.model_name = model_config.get('model_name')
        self.provider = model_config.get('provider')
        logger.info(f"Initialized {self.provider} connector for {self.model_name}")

    @abstractmethod
    async def generate(
        self,
        messages: List[Message],
        temperature: float = 0.2,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate response from model.

        Args:
            messages: List of conversation messages
            temperature: Sampling temperature (0.0-2.0)
            max_tokens: Maximum tokens to generate
            **kwargs: Provider-specific parameters

        Returns:
            LLMResponse with generated content and metadata
        """
        pass

    @abstractmethod
    async def check_health(self) -> bool:
        """Check if model is available and responding.

        Returns:
            True if model is healthy, False otherwise
        """
        pass

    async def close(self) -> None:
        """Release provider resources."""


class CompletionService(ABC):
    """Opaque text-completion capability used by the generation loop."""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Return the model's completion for a prompt."""


class ConnectorCompletionService(CompletionService):
    """Sends the prompt as a single user message through an LLMConnector."""

    def __init__(
        self,
        connector: LLMConnector,
        temperature: float = 0.2,
        max_tokens: Optional[int] = 2000,
    ):
        self.connector = connector
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def complete(self, prompt: str) -> str:
        response = await self.connector.generate(
            messages=[Message(role="user", content=prompt)],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        logger.debug(
            f"Completion from {response.model_used}: tokens={response.token_count}, "
            f"finish={response.finish_reason}"
        )
        return response.content or ""
