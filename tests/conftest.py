"""Pytest configuration and shared fixtures.

Provides:
- Custom markers
- A small Fourth Amendment knowledge base (taxonomy + items)
- A scripted text-completion service that records every prompt
"""

import logging

import pytest

from lexbound.core.context_assembler import RetrievalController
from lexbound.core.llm_connector import CompletionService
from lexbound.models.knowledge import KnowledgeBase, KnowledgeItem, TaxonomyNode

logger = logging.getLogger(__name__)

KATZ_NOTES = (
    "TEST/STANDARD(◼): reasonable expectation of privacy that society recognizes\n"
    "\n"
    "ELEMENT/FACTOR (1): subjective expectation of privacy\n"
    "ELEMENT/FACTOR (2): expectation society accepts as reasonable"
)

GOOD_SEARCH_ANSWER = (
    "Under Katz v. United States, 389 U.S. 347, a search occurs when the government "
    "intrudes on a reasonable expectation of privacy. The person needs a subjective "
    "expectation of privacy that society accepts as reasonable."
)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


class ScriptedCompletionService(CompletionService):
    """Returns canned completions in order and records the prompts it saw."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.prompts = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        index = min(len(self.prompts), len(self.responses)) - 1
        logger.debug(f"Scripted completion #{len(self.prompts)} -> response {index}")
        return self.responses[index]


@pytest.fixture
def make_completion():
    """Factory for scripted completion services (last response repeats)."""
    return ScriptedCompletionService


@pytest.fixture
def taxonomy():
    return [
        TaxonomyNode(id="root", title="Fourth Amendment"),
        TaxonomyNode(id="search", title="Search", parent_id="root"),
        TaxonomyNode(id="automobile", title="Automobile Exception", parent_id="search"),
        TaxonomyNode(id="warrant", title="Warrant Requirement", parent_id="search"),
        TaxonomyNode(id="seizure", title="Seizure", parent_id="root"),
    ]


@pytest.fixture
def kb_items():
    """Items in source order: inherited match listed before the exact one."""
    return [
        KnowledgeItem(
            id="carroll",
            type="case",
            name="Carroll v. United States",
            citation="267 U.S. 132",
            rule_of_law=(
                "A vehicle may be searched without a warrant when officers have probable "
                "cause to believe it contains contraband"
            ),
            taxonomy_path=["root", "search", "automobile"],
        ),
        KnowledgeItem(
            id="katz",
            type="case",
            name="Katz v. United States",
            citation="389 U.S. 347",
            facts="Agents recorded calls from a public telephone booth.",
            holding="The Fourth Amendment protects people, not places.",
            rule_of_law=(
                "A search occurs when the government intrudes on a reasonable "
                "expectation of privacy"
            ),
            notes=KATZ_NOTES,
            taxonomy_path=["root", "search"],
        ),
        KnowledgeItem(
            id="terry",
            type="case",
            name="Terry v. Ohio",
            citation="392 U.S. 1",
            rule_of_law="An officer may briefly stop a person on reasonable suspicion",
            notes="GENERAL NOTE(◼): Stops are seizures of the person.",
            taxonomy_path=["root", "seizure"],
        ),
        KnowledgeItem(
            id="overview",
            type="authority",
            name="Fourth Amendment Overview",
            rule_of_law="The Fourth Amendment prohibits unreasonable searches and seizures",
            taxonomy_path=["root"],
        ),
    ]


@pytest.fixture
def knowledge_base(kb_items, taxonomy):
    return KnowledgeBase(items=kb_items, taxonomy=taxonomy)


@pytest.fixture
def bset_document():
    """The same knowledge base in the .bset wire shape."""
    return {
        "items": [
            {
                "id": "katz",
                "type": "case",
                "name": "Katz v. United States",
                "citation": "389 U.S. 347",
                "rule_of_law": (
                    "A search occurs when the government intrudes on a reasonable "
                    "expectation of privacy"
                ),
                "notes": KATZ_NOTES,
                "taxonomy_path": ["root", "search"],
            },
            {
                "id": "carroll",
                "type": "case",
                "name": "Carroll v. United States",
                "citation": "267 U.S. 132",
                "rule_of_law": "A vehicle may be searched without a warrant",
                "taxonomy_path": ["root", "search", "automobile"],
            },
        ],
        "_meta": {
            "format_version": "1.0",
            "headings": [
                {"id": "root", "title": "Fourth Amendment", "parent_id": None},
                {"id": "search", "title": "Search", "parent_id": "root"},
                {"id": "automobile", "title": "Automobile Exception", "parent_id": "search"},
                {"id": "warrant", "title": "Warrant Requirement", "parent_id": "search"},
            ],
        },
    }


@pytest.fixture
def good_search_answer():
    """Draft that passes every check against the "search" context."""
    return GOOD_SEARCH_ANSWER


@pytest.fixture
def search_context(knowledge_base):
    """Authorized context for the "search" node: Katz (exact) then Carroll (inherited)."""
    return RetrievalController().build_context("search", knowledge_base, target_node_id="search")
