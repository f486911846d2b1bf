"""Tests for the validation engine."""

import pytest

from lexbound.core.validation_engine import (
    ValidationEngine,
    aggregate,
    derive_adjustments,
    extract_citations,
    extract_rule_statements,
    normalize_citation,
)
from lexbound.models.knowledge import AuthorizedContext, KnowledgeItem, TaxonomyNode
from lexbound.models.validation import (
    CheckStatus,
    CheckType,
    OverallStatus,
    RecommendedAction,
    Severity,
    ValidationCheck,
)


@pytest.fixture
def engine():
    return ValidationEngine()


@pytest.fixture
def warrant_context():
    """Context with one uncited rule and no constraints."""
    item = KnowledgeItem(
        id="warrant",
        name="Warrant Overview",
        rule_of_law="officers must obtain a warrant",
        taxonomy_path=["root"],
    )
    return AuthorizedContext(
        target_node=TaxonomyNode(id="root", title="Warrants"), path=("root",), items=(item,)
    )


class TestExtraction:
    def test_normalize_citation(self):
        assert normalize_citation("  Katz v. United  States, ") == "katz v united states"

    def test_extract_case_names_and_reporters(self):
        text = "see Katz v. United States and 392 U.S. 1 together."
        assert extract_citations(text) == ["Katz v. United States", "392 U.S. 1"]

    def test_extract_citations_deduplicates(self):
        text = "see Smith v. Jones here and also Smith v. Jones there"
        assert extract_citations(text) == ["Smith v. Jones"]

    def test_extract_rule_statements(self):
        text = "Officers must knock. The sky is blue! The court held otherwise?"
        assert extract_rule_statements(text) == ["Officers must knock", "The court held otherwise"]


class TestCitationVerification:
    def test_unauthorized_citation_is_critical(self, engine, search_context):
        report = engine.validate("see Smith v. Jones for this point.", search_context)

        check = report.get_check(CheckType.CITATION_VERIFICATION)
        assert check.status == CheckStatus.FAIL
        assert check.failed_assertion == "Smith v. Jones"
        assert report.overall_status == OverallStatus.FAILED
        assert report.severity == Severity.CRITICAL
        assert report.recommended_action == RecommendedAction.REJECT

    def test_case_and_punctuation_insensitive_match(self, engine, search_context):
        check = engine.verify_citations("see KATZ v. UNITED STATES, 389 U.S. 347.", search_context.items)
        assert check.status == CheckStatus.PASS

    def test_substring_match_accepts_longer_mention(self, engine, search_context):
        check = engine.verify_citations("Under Katz v. United States the rule", search_context.items)
        assert check.status == CheckStatus.PASS

    def test_reporter_citation_matches_whole_page_number(self, engine, kb_items):
        terry = [item for item in kb_items if item.id == "terry"]

        assert engine.verify_citations("see 392 U.S. 1", terry).status == CheckStatus.PASS
        check = engine.verify_citations("see 392 U.S. 10", terry)
        assert check.status == CheckStatus.FAIL
        assert check.failed_assertion == "392 U.S. 10"

    def test_partial_case_name_does_not_authorize(self, engine, kb_items):
        terry = [item for item in kb_items if item.id == "terry"]
        check = engine.verify_citations("see McTerry v. Ohio", terry)
        assert check.status == CheckStatus.FAIL

    def test_empty_name_never_authorizes(self, engine):
        item = KnowledgeItem(id="blank", name="...", citation="", taxonomy_path=["root"])
        check = engine.verify_citations("see Smith v. Jones here", [item])
        assert check.status == CheckStatus.FAIL

    def test_duplicate_citation_reported_once(self, engine, search_context):
        check = engine.verify_citations(
            "see Smith v. Jones here and then Smith v. Jones again", search_context.items
        )
        assert check.details == "Found 1 unauthorized citation(s): Smith v. Jones"

    def test_no_citations_passes(self, engine, search_context):
        check = engine.verify_citations("nothing cited here", search_context.items)
        assert check.status == CheckStatus.PASS


class TestRuleMapping:
    def test_unmapped_rule_reports_similarity_and_threshold(self, engine, warrant_context):
        report = engine.validate("Officers must knock and announce.", warrant_context)

        check = report.get_check(CheckType.RULE_TO_FIELD_MAPPING)
        assert check.status == CheckStatus.FAIL
        assert check.failed_assertion == "Officers must knock and announce"
        assert check.best_match_similarity == pytest.approx(0.4)
        assert check.threshold == 0.65
        assert report.severity == Severity.MAJOR
        assert report.recommended_action == RecommendedAction.REGENERATE

    def test_threshold_is_configurable(self, warrant_context):
        report = ValidationEngine(rule_similarity_threshold=0.3).validate(
            "Officers must knock and announce.", warrant_context
        )
        assert report.passed
        assert report.severity is None

    def test_paraphrase_of_rule_field_passes(self, engine, kb_items):
        check = engine.verify_rule_mappings(
            "The Fourth Amendment prohibits unreasonable searches and seizures.", kb_items
        )
        assert check.status == CheckStatus.PASS

    def test_no_authorized_rules_fails_normative_text(self, engine):
        item = KnowledgeItem(id="bare", name="Bare Authority", taxonomy_path=["root"])
        check = engine.verify_rule_mappings("Officers must knock.", [item])
        assert check.status == CheckStatus.FAIL
        assert check.best_match_similarity == 0.0

    def test_no_normative_sentences_passes(self, engine, kb_items):
        check = engine.verify_rule_mappings("The phone booth was public.", kb_items)
        assert check.status == CheckStatus.PASS


class TestConstraintCompliance:
    def test_good_answer_passes_everything(self, engine, search_context, good_search_answer):
        report = engine.validate(good_search_answer, search_context)
        assert report.passed
        assert report.severity is None
        assert report.recommended_action is None
        assert all(c.status == CheckStatus.PASS for c in report.checks)

    def test_missing_element_fails(self, engine, search_context):
        report = engine.validate("A reasonable standard applies here.", search_context)

        check = report.get_check(CheckType.CONSTRAINT_COMPLIANCE)
        assert check.status == CheckStatus.FAIL
        assert check.missing_element == "subjective expectation of privacy"
        assert report.severity == Severity.MAJOR

    def test_unaddressed_test_only_warns(self, engine, search_context):
        report = engine.validate("The subjective view matters and society accepts it.", search_context)

        check = report.get_check(CheckType.CONSTRAINT_COMPLIANCE)
        assert check.status == CheckStatus.WARNING
        assert report.overall_status == OverallStatus.PASSED
        assert report.severity == Severity.MINOR
        assert report.recommended_action == RecommendedAction.CORRECT


def _check(check_type, status):
    return ValidationCheck(check_type=check_type, status=status, details="")


class TestAggregation:
    @pytest.mark.parametrize(
        "checks,expected",
        [
            (
                [_check(CheckType.CITATION_VERIFICATION, CheckStatus.FAIL),
                 _check(CheckType.CONSTRAINT_COMPLIANCE, CheckStatus.WARNING)],
                (OverallStatus.FAILED, Severity.CRITICAL, RecommendedAction.REJECT),
            ),
            (
                [_check(CheckType.RULE_TO_FIELD_MAPPING, CheckStatus.FAIL),
                 _check(CheckType.CONSTRAINT_COMPLIANCE, CheckStatus.WARNING)],
                (OverallStatus.FAILED, Severity.MAJOR, RecommendedAction.REGENERATE),
            ),
            (
                [_check(CheckType.CONSTRAINT_COMPLIANCE, CheckStatus.WARNING)],
                (OverallStatus.PASSED, Severity.MINOR, RecommendedAction.CORRECT),
            ),
            (
                [_check(CheckType.CITATION_VERIFICATION, CheckStatus.PASS)],
                (OverallStatus.PASSED, None, None),
            ),
        ],
    )
    def test_worst_check_wins(self, checks, expected):
        report = aggregate(checks)
        assert (report.overall_status, report.severity, report.recommended_action) == expected

    def test_report_to_dict(self):
        report = aggregate([_check(CheckType.CITATION_VERIFICATION, CheckStatus.PASS)])
        data = report.to_dict()
        assert data["overall_status"] == "PASSED"
        assert data["validation_checks"] == [
            {"check_type": "citation_verification", "status": "PASS", "details": ""}
        ]
        assert "severity" not in data


class TestAdjustments:
    def test_adjustments_per_failed_check(self):
        report = aggregate(
            [
                ValidationCheck(CheckType.CITATION_VERIFICATION, CheckStatus.FAIL, "", "Smith v. Jones"),
                ValidationCheck(
                    CheckType.RULE_TO_FIELD_MAPPING, CheckStatus.FAIL, "", "Officers must knock"
                ),
                ValidationCheck(
                    CheckType.CONSTRAINT_COMPLIANCE,
                    CheckStatus.FAIL,
                    "",
                    missing_element="subjective expectation of privacy",
                ),
            ]
        )
        adjustments = derive_adjustments(report)

        assert len(adjustments) == 4
        assert adjustments[0].startswith("CRITICAL: Only cite cases explicitly listed")
        assert adjustments[1].startswith("Ensure every legal rule directly quotes")
        assert '"Officers must knock" did not map' in adjustments[2]
        assert adjustments[3] == (
            'Address the following required element: "subjective expectation of privacy"'
        )

    def test_warnings_produce_no_adjustments(self):
        report = aggregate([_check(CheckType.CONSTRAINT_COMPLIANCE, CheckStatus.WARNING)])
        assert derive_adjustments(report) == []
