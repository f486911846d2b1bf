"""Request and result types for one constrained generation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from lexbound.models.knowledge import AuthorizedContext, KnowledgeBase
from lexbound.models.validation import Severity, ValidationReport


class GenerationRequest(BaseModel):
    """Input to the generation service."""

    query: Optional[str] = None
    knowledge_base: Optional[KnowledgeBase] = None
    target_node_id: Optional[str] = None
    max_iterations: Optional[int] = Field(default=None, ge=1, le=10)
    system_instructions: Optional[str] = None


class LoopState(str, Enum):
    """States of the generate/validate loop."""

    DRAFTING = "DRAFTING"
    VALIDATING = "VALIDATING"
    RETRYING = "RETRYING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    FLAGGED = "FLAGGED"

    @property
    def is_terminal(self) -> bool:
        return self in (LoopState.ACCEPTED, LoopState.REJECTED, LoopState.FLAGGED)


class GenerationStatus(str, Enum):
    VALIDATED = "validated"
    FLAGGED = "flagged"
    REJECTED = "rejected"
    INSUFFICIENT_AUTHORITY = "insufficient_authority"


TERMINAL_STATUS = {
    LoopState.ACCEPTED: GenerationStatus.VALIDATED,
    LoopState.REJECTED: GenerationStatus.REJECTED,
    LoopState.FLAGGED: GenerationStatus.FLAGGED,
}


@dataclass
class AttemptRecord:
    """Trace of one draft/validate pass."""

    attempt: int
    state: LoopState
    severity: Severity | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempt": self.attempt,
            "state": self.state.value,
            "severity": self.severity.value if self.severity else None,
        }


@dataclass
class GenerationResult:
    """Outcome returned to the caller, including rejected and flagged drafts."""

    status: GenerationStatus
    authorized_context: AuthorizedContext
    generated_text: str = ""
    validation_report: ValidationReport | None = None
    iterations: int = 0
    attempts: list[AttemptRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_text": self.generated_text,
            "validation_report": (
                self.validation_report.to_dict() if self.validation_report else None
            ),
            "status": self.status.value,
            "authorized_context": self.authorized_context.to_dict(),
            "iterations": self.iterations,
            "attempts": [a.to_dict() for a in self.attempts],
        }
