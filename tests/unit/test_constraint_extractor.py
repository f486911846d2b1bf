"""Tests for constraint marker extraction."""

from lexbound.core.constraint_extractor import collect_constraints, extract_constraints
from lexbound.models.knowledge import ConstraintCategory, KnowledgeItem


def _item(notes, path=("root", "search"), item_id="case"):
    return KnowledgeItem(id=item_id, name="Case v. State", notes=notes, taxonomy_path=list(path))


def test_test_and_elements_in_document_order(kb_items):
    katz = next(item for item in kb_items if item.id == "katz")
    records = extract_constraints(katz)

    assert [r.category for r in records] == [
        ConstraintCategory.REQUIRED_TEST,
        ConstraintCategory.REQUIRED_ELEMENT,
        ConstraintCategory.REQUIRED_ELEMENT,
    ]
    assert records[0].content == "reasonable expectation of privacy that society recognizes"
    assert records[1].content == "subjective expectation of privacy"
    assert records[1].label == "1"
    assert records[2].content == "expectation society accepts as reasonable"
    assert records[2].label == "2"
    assert all(r.path == ("root", "search") for r in records)
    assert all(r.item_id == "katz" for r in records)


def test_forks_are_alternative_branches():
    records = extract_constraints(
        _item("MACRO-FORK(a): vehicle is readily mobile\nMACRO-FORK(b): vehicle is parked at home")
    )
    assert [(r.category, r.label, r.content) for r in records] == [
        (ConstraintCategory.ALTERNATIVE_BRANCH, "a", "vehicle is readily mobile"),
        (ConstraintCategory.ALTERNATIVE_BRANCH, "b", "vehicle is parked at home"),
    ]


def test_micro_fork_with_roman_label():
    records = extract_constraints(_item("MICRO-FORK(ii): consent was voluntary"))
    assert len(records) == 1
    assert records[0].category == ConstraintCategory.ALTERNATIVE_BRANCH
    assert records[0].label == "ii"


def test_general_note_is_informational():
    records = extract_constraints(_item("GENERAL NOTE(■): Stops are seizures."))
    assert records[0].category == ConstraintCategory.INFORMATIONAL
    assert records[0].content == "Stops are seizures."


def test_element_marker_without_space():
    records = extract_constraints(_item("ELEMENT/FACTOR(3): nexus to the crime"))
    assert records[0].category == ConstraintCategory.REQUIRED_ELEMENT
    assert records[0].label == "3"


def test_span_continues_over_lowercase_line_and_stops_at_blank_line():
    notes = "GENERAL NOTE(◼): first line\ncontinues here\n\nlater paragraph is not included"
    records = extract_constraints(_item(notes))
    assert records[0].content == "first line\ncontinues here"


def test_span_stops_at_capitalized_line():
    notes = "TEST/STANDARD(◼): totality of the circumstances\nSee also the dissent."
    records = extract_constraints(_item(notes))
    assert records[0].content == "totality of the circumstances"


def test_multiple_tests_in_one_item():
    notes = "TEST/STANDARD(◼): first standard\n\nTEST/STANDARD(◼): second standard"
    records = extract_constraints(_item(notes))
    assert [r.content for r in records] == ["first standard", "second standard"]


def test_absent_or_malformed_markers_yield_nothing():
    assert extract_constraints(_item(None)) == []
    assert extract_constraints(_item("   ")) == []
    assert extract_constraints(_item("Plain annotation without markers.")) == []
    assert extract_constraints(_item("TEST/STANDARD: missing symbol")) == []
    assert extract_constraints(_item("ELEMENT/FACTOR (x): not a number")) == []


def test_record_ids_are_deterministic_and_distinct(kb_items):
    katz = next(item for item in kb_items if item.id == "katz")
    first = [r.id for r in extract_constraints(katz)]
    second = [r.id for r in extract_constraints(katz)]
    assert first == second
    assert len(set(first)) == len(first)


def test_collect_constraints_respects_path_scope(kb_items):
    seizure = collect_constraints(["root", "seizure"], kb_items)
    assert [r.item_id for r in seizure] == ["terry"]

    search = collect_constraints(["root", "search"], kb_items)
    assert {r.item_id for r in search} == {"katz"}

    everything = collect_constraints(["root"], kb_items)
    assert {r.item_id for r in everything} == {"katz", "terry"}
