"""Validation engine for generated text.

Checks a draft against its authorized context before it reaches the user:
- Citation verification (unauthorized citations are always critical)
- Rule-to-field mapping (normative sentences must trace to a rule field)
- Constraint compliance (required elements, then required tests)
"""

import logging
import re
from typing import Sequence

from lexbound.core.similarity import similarity
from lexbound.models.knowledge import (
    AuthorizedContext,
    ConstraintCategory,
    ConstraintRecord,
    KnowledgeItem,
)
from lexbound.models.validation import (
    CheckStatus,
    CheckType,
    OverallStatus,
    RecommendedAction,
    Severity,
    ValidationCheck,
    ValidationReport,
)

logger = logging.getLogger(__name__)

DEFAULT_RULE_SIMILARITY_THRESHOLD = 0.65

CASE_NAME_PATTERN = re.compile(
    r"([A-Z][a-zA-Z]+(?:\s+[A-Z][a-zA-Z]+)*)\s+v\.\s+([A-Z][a-zA-Z]+(?:\s+[A-Z][a-zA-Z]+)*)"
)
US_REPORTER_PATTERN = re.compile(r"\d+\s+U\.S\.\s+\d+")

NORMATIVE_KEYWORDS = [
    "rule is",
    "court held",
    "standard requires",
    "test is",
    "must",
    "shall",
    "requires",
    "prohibits",
    "allows",
    "permits",
]

CRITICAL_CHECKS = {CheckType.CITATION_VERIFICATION}


def normalize_citation(citation: str) -> str:
    """Case-fold, strip punctuation and collapse whitespace."""
    text = re.sub(r"[^\w\s]", "", citation.lower())
    return re.sub(r"\s+", " ", text).strip()


def _contains_tokens(text: str, part: str) -> bool:
    # Whole words only: "392 us 1" is not inside "392 us 10"
    return f" {part} " in f" {text} "


def extract_citations(text: str) -> list[str]:
    """Candidate case names and U.S. reporter citations, deduplicated in order."""
    citations = [f"{m.group(1)} v. {m.group(2)}" for m in CASE_NAME_PATTERN.finditer(text)]
    citations.extend(m.group(0) for m in US_REPORTER_PATTERN.finditer(text))
    return list(dict.fromkeys(citations))


def extract_rule_statements(text: str) -> list[str]:
    """Sentences containing normative vocabulary."""
    rules = []
    for sentence in re.split(r"[.!?]+", text):
        lower = sentence.lower()
        if any(keyword in lower for keyword in NORMATIVE_KEYWORDS):
            rules.append(sentence.strip())
    return rules


def _keywords(content: str) -> list[str]:
    return [w for w in re.sub(r"[^\w\s]", " ", content.lower()).split() if len(w) > 3]


class ValidationEngine:
    """Verifies generated text against an authorized context."""

    def __init__(self, rule_similarity_threshold: float = DEFAULT_RULE_SIMILARITY_THRESHOLD):
        """Initialize validation engine.

        Args:
            rule_similarity_threshold: Minimum similarity for a rule statement to
                count as mapped to an authorized rule field
        """
        self.rule_similarity_threshold = rule_similarity_threshold

    def validate(self, generated_text: str, context: AuthorizedContext) -> ValidationReport:
        """Run all checks and aggregate them into a report.

        Args:
            generated_text: Model output to verify
            context: Authorized context the output must stay within

        Returns:
            ValidationReport with overall status, severity and recommended action
        """
        checks = [
            self.verify_citations(generated_text, context.items),
            self.verify_rule_mappings(generated_text, context.items),
            self.verify_constraint_compliance(generated_text, context.constraints),
        ]
        report = aggregate(checks)

        if report.severity is None:
            logger.info("Validation passed")
        else:
            logger.warning(
                f"Validation {report.overall_status.value}: severity={report.severity.value}, "
                f"action={report.recommended_action.value}"
            )
        return report

    def verify_citations(
        self, generated_text: str, items: Sequence[KnowledgeItem]
    ) -> ValidationCheck:
        """Every extracted citation must match an authorized item's name or citation."""
        extracted = extract_citations(generated_text)

        authorized_forms = []
        for item in items:
            for value in (item.name, item.citation):
                normalized = normalize_citation(value or "")
                if normalized:
                    authorized_forms.append(normalized)

        unauthorized = []
        for citation in extracted:
            normalized = normalize_citation(citation)
            is_authorized = any(
                _contains_tokens(normalized, form) or _contains_tokens(form, normalized)
                for form in authorized_forms
            )
            if not is_authorized:
                unauthorized.append(citation)

        if unauthorized:
            logger.warning(f"Unauthorized citation(s): {', '.join(unauthorized)}")
            return ValidationCheck(
                check_type=CheckType.CITATION_VERIFICATION,
                status=CheckStatus.FAIL,
                details=(
                    f"Found {len(unauthorized)} unauthorized citation(s): "
                    f"{', '.join(unauthorized)}"
                ),
                failed_assertion=unauthorized[0],
            )

        return ValidationCheck(
            check_type=CheckType.CITATION_VERIFICATION,
            status=CheckStatus.PASS,
            details=f"All {len(extracted)} citations matched authorized objects",
        )

    def verify_rule_mappings(
        self, generated_text: str, items: Sequence[KnowledgeItem]
    ) -> ValidationCheck:
        """Each normative sentence must resemble some authorized rule field."""
        rules = extract_rule_statements(generated_text)
        authorized_rules = [item.rule_text for item in items if item.rule_text]

        unmapped = []
        lowest_similarity = 1.0

        for rule in rules:
            best = max((similarity(rule, text) for text in authorized_rules), default=0.0)
            if best < self.rule_similarity_threshold:
                unmapped.append(rule)
                lowest_similarity = min(lowest_similarity, best)

        if unmapped:
            logger.warning(
                f"{len(unmapped)} unmapped rule statement(s), worst similarity "
                f"{lowest_similarity:.2f}"
            )
            return ValidationCheck(
                check_type=CheckType.RULE_TO_FIELD_MAPPING,
                status=CheckStatus.FAIL,
                details=f"{len(unmapped)} rule statement(s) did not map to authorized rule fields",
                failed_assertion=unmapped[0],
                best_match_similarity=lowest_similarity,
                threshold=self.rule_similarity_threshold,
            )

        return ValidationCheck(
            check_type=CheckType.RULE_TO_FIELD_MAPPING,
            status=CheckStatus.PASS,
            details=f"All {len(rules)} rule statements mapped to authorized fields",
        )

    def verify_constraint_compliance(
        self, generated_text: str, constraints: Sequence[ConstraintRecord]
    ) -> ValidationCheck:
        """Required elements must be addressed; unaddressed tests only warn."""
        text_lower = generated_text.lower()
        elements = [c for c in constraints if c.category == ConstraintCategory.REQUIRED_ELEMENT]
        tests = [c for c in constraints if c.category == ConstraintCategory.REQUIRED_TEST]

        missing_elements = []
        for constraint in elements:
            keywords = _keywords(constraint.content)
            if keywords and not any(kw in text_lower for kw in keywords):
                missing_elements.append(constraint.content)

        if missing_elements:
            return ValidationCheck(
                check_type=CheckType.CONSTRAINT_COMPLIANCE,
                status=CheckStatus.FAIL,
                details=f"{len(missing_elements)} required element(s) not addressed",
                missing_element=missing_elements[0],
            )

        missing_tests = []
        for constraint in tests:
            keywords = _keywords(constraint.content)
            if keywords and not any(kw in text_lower for kw in keywords[:3]):
                missing_tests.append(constraint.content)

        if missing_tests:
            return ValidationCheck(
                check_type=CheckType.CONSTRAINT_COMPLIANCE,
                status=CheckStatus.WARNING,
                details=f"{len(missing_tests)} required test(s) may not be fully addressed",
            )

        return ValidationCheck(
            check_type=CheckType.CONSTRAINT_COMPLIANCE,
            status=CheckStatus.PASS,
            details="All required elements and tests appear to be addressed",
        )


def aggregate(checks: list[ValidationCheck]) -> ValidationReport:
    """Derive overall status, severity and action from individual checks."""
    has_critical = any(c.failed and c.check_type in CRITICAL_CHECKS for c in checks)
    has_failure = any(c.failed for c in checks)
    has_warning = any(c.status == CheckStatus.WARNING for c in checks)

    severity = None
    action = None
    if has_critical:
        severity, action = Severity.CRITICAL, RecommendedAction.REJECT
    elif has_failure:
        severity, action = Severity.MAJOR, RecommendedAction.REGENERATE
    elif has_warning:
        severity, action = Severity.MINOR, RecommendedAction.CORRECT

    return ValidationReport(
        overall_status=OverallStatus.FAILED if has_failure else OverallStatus.PASSED,
        checks=list(checks),
        severity=severity,
        recommended_action=action,
    )


def derive_adjustments(report: ValidationReport) -> list[str]:
    """Remediation directives for each failing check, for the retry prompt."""
    adjustments = []

    for check in report.failed_checks():
        if check.check_type == CheckType.CITATION_VERIFICATION:
            adjustments.append(
                "CRITICAL: Only cite cases explicitly listed in the authorized context. "
                "Do not invent or infer additional cases."
            )
        elif check.check_type == CheckType.RULE_TO_FIELD_MAPPING:
            adjustments.append(
                "Ensure every legal rule directly quotes or closely paraphrases the "
                "rule_of_law field from an authorized case."
            )
            if check.failed_assertion:
                adjustments.append(
                    f'The assertion "{check.failed_assertion}" did not map to any authorized '
                    f"rule. Revise to use exact language from case rule_of_law fields."
                )
        elif check.check_type == CheckType.CONSTRAINT_COMPLIANCE:
            if check.missing_element:
                adjustments.append(
                    f'Address the following required element: "{check.missing_element}"'
                )

    return adjustments
