"""End-to-end constrained generation for one request.

Input errors are raised before the completion service is touched. A target
node with no authorized items is a normal outcome with status
``insufficient_authority``, not an exception.
"""

import logging

from lexbound.core.context_assembler import RetrievalController
from lexbound.core.errors import MissingKnowledgeBaseError, MissingQueryError
from lexbound.core.generation_loop import DEFAULT_MAX_ATTEMPTS, GenerationLoop
from lexbound.core.instruction_compiler import DEFAULT_ASSISTANT_NAME, compile_instructions
from lexbound.core.llm_connector import CompletionService, ConnectorCompletionService, LLMConnector
from lexbound.core.validation_engine import ValidationEngine
from lexbound.lib.config import ConfigLoader, ModelSettings
from lexbound.lib.logger import log_fields
from lexbound.models.generation import GenerationRequest, GenerationResult, GenerationStatus
from lexbound.models.knowledge import AuthorizedContext

logger = logging.getLogger(__name__)


def check_request(request: GenerationRequest) -> None:
    """Raise an InputError when the query or knowledge base is missing."""
    if not request.query or not request.query.strip():
        raise MissingQueryError()
    if request.knowledge_base is None:
        raise MissingKnowledgeBaseError()


class GenerationService:
    """Runs retrieval, instruction compilation and the generation loop."""

    def __init__(
        self,
        completion_service: CompletionService,
        retrieval: RetrievalController | None = None,
        validator: ValidationEngine | None = None,
        max_iterations: int = DEFAULT_MAX_ATTEMPTS,
        timeout_seconds: float | None = None,
        assistant_name: str = DEFAULT_ASSISTANT_NAME,
    ):
        """Initialize generation service.

        Args:
            completion_service: Text-completion collaborator
            retrieval: Retrieval controller (default thresholds if omitted)
            validator: Validation engine (default thresholds if omitted)
            max_iterations: Default attempt limit when a request sets none
            timeout_seconds: Per-call completion timeout
            assistant_name: Persona name for compiled instructions
        """
        self.retrieval = retrieval or RetrievalController()
        self.validator = validator or ValidationEngine()
        self.assistant_name = assistant_name
        self.loop = GenerationLoop(
            completion_service,
            validator=self.validator,
            max_attempts=max_iterations,
            timeout_seconds=timeout_seconds,
        )

    @classmethod
    def from_config(
        cls, config: ConfigLoader, completion_service: CompletionService
    ) -> "GenerationService":
        retrieval = config.get_retrieval_settings()
        validation = config.get_validation_settings()
        generation = config.get_generation_settings()
        return cls(
            completion_service,
            retrieval=RetrievalController(node_threshold=retrieval.node_threshold),
            validator=ValidationEngine(
                rule_similarity_threshold=validation.rule_similarity_threshold
            ),
            max_iterations=generation.max_iterations,
            timeout_seconds=generation.timeout_seconds,
            assistant_name=generation.assistant_name,
        )

    def prepare(self, request: GenerationRequest) -> tuple[AuthorizedContext, str]:
        """Validate input, build the authorized context and compile instructions.

        Raises:
            InputError: For a missing query or knowledge base, an unknown
                target node, or a broken taxonomy
        """
        check_request(request)
        context = self.retrieval.build_context(
            request.query, request.knowledge_base, request.target_node_id
        )
        instructions = compile_instructions(
            context,
            request.query,
            assistant_name=self.assistant_name,
            preamble=request.system_instructions,
        )
        return context, instructions

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Answer a query under the knowledge-base constraint.

        Args:
            request: Generation request

        Returns:
            GenerationResult with the final draft and validation report

        Raises:
            InputError: For invalid input (before any completion call)
            CompletionTransportError: If the completion service fails
        """
        context, instructions = self.prepare(request)

        if context.is_empty:
            logger.warning(
                f"No authorized items under node '{context.target_node.id}', skipping generation",
                extra=log_fields(
                    generation_status=GenerationStatus.INSUFFICIENT_AUTHORITY,
                    target_node=context.target_node.id,
                ),
            )
            return GenerationResult(
                status=GenerationStatus.INSUFFICIENT_AUTHORITY,
                authorized_context=context,
            )

        result = await self.loop.run(context, instructions, max_attempts=request.max_iterations)
        logger.info(
            f"Generation finished under node '{context.target_node.id}'",
            extra=log_fields(
                generation_status=result.status,
                iterations=result.iterations,
                severity=result.validation_report.severity,
                target_node=context.target_node.id,
            ),
        )
        return result


def create_connector(settings: ModelSettings, timeout: float | None = None) -> LLMConnector:
    """Build the provider named in the model settings."""
    model_config = {
        "provider": settings.provider,
        "model_name": settings.model_name,
        "base_url": settings.base_url,
    }

    if settings.provider == "ollama":
        from lexbound.core.providers.ollama_provider import OllamaProvider

        return OllamaProvider(model_config, settings.base_url, timeout=timeout or 120.0)

    if settings.provider == "openrouter":
        if not settings.api_key:
            raise ValueError("OPENROUTER_API_KEY is not set")
        from lexbound.core.providers.openrouter_provider import OpenRouterProvider

        return OpenRouterProvider(model_config, settings.api_key)

    raise ValueError(f"Unknown model provider: {settings.provider}")


def build_service(config: ConfigLoader) -> tuple[GenerationService, LLMConnector]:
    """Wire a GenerationService to the configured provider."""
    generation = config.get_generation_settings()
    connector = create_connector(config.get_model_settings(), generation.timeout_seconds)
    completion = ConnectorCompletionService(
        connector,
        temperature=generation.temperature,
        max_tokens=generation.max_tokens,
    )
    return GenerationService.from_config(config, completion), connector
