"""Validation result types.

Defines the structures produced by the validation engine:
- Individual check outcomes
- The aggregated report with severity and recommended action
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CheckType(str, Enum):
    """Verification rules applied to generated text."""

    CITATION_VERIFICATION = "citation_verification"
    RULE_TO_FIELD_MAPPING = "rule_to_field_mapping"
    CONSTRAINT_COMPLIANCE = "constraint_compliance"


class CheckStatus(str, Enum):
    """Outcome of a single check."""

    PASS = "PASS"
    FAIL = "FAIL"
    WARNING = "WARNING"


class OverallStatus(str, Enum):
    PASSED = "PASSED"
    FAILED = "FAILED"


class Severity(str, Enum):
    """Severity tiers, least to most severe."""

    MINOR = "MINOR"
    MAJOR = "MAJOR"
    CRITICAL = "CRITICAL"


class RecommendedAction(str, Enum):
    CORRECT = "CORRECT"
    REGENERATE = "REGENERATE"
    REJECT = "REJECT"


@dataclass
class ValidationCheck:
    """Result of one verification rule."""

    check_type: CheckType
    status: CheckStatus
    details: str
    failed_assertion: str | None = None
    best_match_similarity: float | None = None
    threshold: float | None = None
    missing_element: str | None = None

    @property
    def failed(self) -> bool:
        return self.status == CheckStatus.FAIL

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "check_type": self.check_type.value,
            "status": self.status.value,
            "details": self.details,
        }
        for key in ("failed_assertion", "best_match_similarity", "threshold", "missing_element"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class ValidationReport:
    """Aggregate of checks with derived status, severity and action."""

    overall_status: OverallStatus
    checks: list[ValidationCheck] = field(default_factory=list)
    severity: Severity | None = None
    recommended_action: RecommendedAction | None = None

    @property
    def passed(self) -> bool:
        return self.overall_status == OverallStatus.PASSED

    def failed_checks(self) -> list[ValidationCheck]:
        return [c for c in self.checks if c.failed]

    def get_check(self, check_type: CheckType) -> ValidationCheck | None:
        for check in self.checks:
            if check.check_type == check_type:
                return check
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "overall_status": self.overall_status.value,
            "validation_checks": [c.to_dict() for c in self.checks],
        }
        if self.severity is not None:
            data["severity"] = self.severity.value
        if self.recommended_action is not None:
            data["recommended_action"] = self.recommended_action.value
        return data
