"""Generate / validate / regenerate loop.

States: DRAFTING -> VALIDATING -> {ACCEPTED, RETRYING, REJECTED, FLAGGED}.
Only a MAJOR report retries, and only while attempts remain. A CRITICAL
report rejects immediately, a MINOR one is flagged immediately, and a MAJOR
report on the last attempt is flagged.
"""

import asyncio
import logging

from lexbound.core.errors import CompletionTransportError
from lexbound.core.instruction_compiler import next_instructions
from lexbound.core.llm_connector import CompletionService
from lexbound.core.validation_engine import ValidationEngine
from lexbound.lib.logger import log_fields
from lexbound.models.generation import (
    TERMINAL_STATUS,
    AttemptRecord,
    GenerationResult,
    LoopState,
)
from lexbound.models.knowledge import AuthorizedContext
from lexbound.models.validation import Severity, ValidationReport

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


def transition(report: ValidationReport, attempt: int, max_attempts: int) -> LoopState:
    """State that follows VALIDATING for a given report.

    Args:
        report: Report for the draft just validated
        attempt: 1-based number of that draft
        max_attempts: Total drafts permitted

    Returns:
        ACCEPTED, REJECTED, FLAGGED or RETRYING
    """
    if report.severity == Severity.CRITICAL:
        return LoopState.REJECTED
    if report.severity == Severity.MAJOR:
        return LoopState.RETRYING if attempt < max_attempts else LoopState.FLAGGED
    if report.severity == Severity.MINOR:
        return LoopState.FLAGGED
    return LoopState.ACCEPTED


class GenerationLoop:
    """Drives the completion service until a draft is accepted or the loop ends."""

    def __init__(
        self,
        completion_service: CompletionService,
        validator: ValidationEngine | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        timeout_seconds: float | None = None,
    ):
        """Initialize generation loop.

        Args:
            completion_service: Text-completion collaborator
            validator: Validation engine (default thresholds if omitted)
            max_attempts: Total drafts permitted per query
            timeout_seconds: Per-call timeout for the completion service
        """
        self.completion_service = completion_service
        self.validator = validator or ValidationEngine()
        self.max_attempts = max_attempts
        self.timeout_seconds = timeout_seconds

    async def run(
        self,
        context: AuthorizedContext,
        base_instructions: str,
        max_attempts: int | None = None,
    ) -> GenerationResult:
        """Run the loop to a terminal state.

        Args:
            context: Authorized context drafts are validated against
            base_instructions: Compiled instructions for the first draft
            max_attempts: Override for the configured attempt limit

        Returns:
            GenerationResult carrying the last draft and its report

        Raises:
            CompletionTransportError: If the completion call fails or times out
        """
        limit = max_attempts or self.max_attempts
        attempts: list[AttemptRecord] = []
        report: ValidationReport | None = None
        generated_text = ""
        attempt = 0
        state = LoopState.DRAFTING

        while not state.is_terminal:
            attempt += 1
            state = LoopState.DRAFTING
            prompt = next_instructions(base_instructions, attempt, report)
            generated_text = await self._complete(prompt, attempt)

            state = LoopState.VALIDATING
            report = self.validator.validate(generated_text, context)

            state = transition(report, attempt, limit)
            attempts.append(AttemptRecord(attempt=attempt, state=state, severity=report.severity))
            logger.info(
                f"Attempt {attempt}/{limit}: {state.value}",
                extra=log_fields(attempt=attempt, state=state, severity=report.severity),
            )

        return GenerationResult(
            status=TERMINAL_STATUS[state],
            authorized_context=context,
            generated_text=generated_text,
            validation_report=report,
            iterations=attempt,
            attempts=attempts,
        )

    async def _complete(self, prompt: str, attempt: int) -> str:
        try:
            if self.timeout_seconds:
                return await asyncio.wait_for(
                    self.completion_service.complete(prompt), self.timeout_seconds
                )
            return await self.completion_service.complete(prompt)
        except asyncio.TimeoutError as e:
            logger.error(f"Completion timed out after {self.timeout_seconds}s (attempt {attempt})")
            raise CompletionTransportError(
                f"Text completion timed out after {self.timeout_seconds}s"
            ) from e
        except asyncio.CancelledError as e:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            logger.error(f"Completion was cancelled by the provider (attempt {attempt})")
            raise CompletionTransportError("Text completion was cancelled") from e
        except CompletionTransportError:
            raise
        except Exception as e:
            logger.error(f"Completion failed on attempt {attempt}: {e}")
            raise CompletionTransportError(f"Text completion failed: {e}") from e
