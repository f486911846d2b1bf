"""Renders an authorized context into the instruction prompt for the model.

Pure functions only: identical inputs always produce byte-identical prompts,
and items are numbered in retrieval order so "item 3" stays stable.
"""

from lexbound.core.validation_engine import derive_adjustments
from lexbound.models.knowledge import AuthorizedContext, KnowledgeItem
from lexbound.models.validation import ValidationReport

DEFAULT_ASSISTANT_NAME = "Lexbound"

HARD_CONSTRAINTS = [
    "I MUST ONLY cite cases and authorities provided in the authorized context below.",
    "I MUST NOT cite any cases, statutes, or authorities not explicitly listed.",
    "Every legal rule or holding I state MUST map to a rule_of_law field from an authorized case.",
    "I will use proper legal citation format: Case Name, Citation (Year).",
    "If the authorized context doesn't contain enough information to fully answer the query, "
    "I will say so clearly instead of inventing anything.",
    "All metadata in the items (facts, holdings, notes, questions, etc.) should be understood "
    "literally as the user's content.",
    "The taxonomy path indicates which heading or subheading each authority belongs to.",
]

# (label, attribute) in render order
ITEM_FIELDS = [
    ("Type", "kind"),
    ("Citation", "citation"),
    ("Rule of Law", "rule_of_law"),
    ("Rule", "rule"),
    ("Holding", "holding"),
    ("Facts", "facts"),
    ("Question", "question"),
    ("Statute", "statute_name"),
    ("Statute Text", "statute_text"),
    ("Authority", "authority_name"),
    ("Authority Summary", "authority_summary"),
    ("User Notes", "notes"),
]


def _render_item(number: int, item: KnowledgeItem) -> str:
    lines = [f"[{number}] {item.name}"]
    for label, attribute in ITEM_FIELDS:
        value = getattr(item, attribute)
        if value and str(value).strip():
            lines.append(f"    {label}: {value}")
    return "\n".join(lines) + "\n\n"


def compile_instructions(
    context: AuthorizedContext,
    query: str,
    assistant_name: str = DEFAULT_ASSISTANT_NAME,
    preamble: str | None = None,
) -> str:
    """Build the instruction prompt for one query.

    Args:
        context: Authorized context for the query
        query: Verbatim user query
        assistant_name: Persona name used in the role preamble
        preamble: Optional caller instructions prepended verbatim

    Returns:
        Instruction text
    """
    instructions = (
        f"You are {assistant_name}, a constrained legal reasoning assistant. You ONLY use "
        f"information from the provided authorized context - you never add outside knowledge "
        f"or make things up.\n\n"
    )
    instructions += "PERSONALITY:\n"
    instructions += f'- Refer to yourself as "{assistant_name}" or use "I" statements\n'
    instructions += "- Be clear, professional, and helpful\n"
    instructions += (
        "- Be confident about what's in your knowledge base, but never invent information\n\n"
    )
    instructions += f"ANALYTICAL DOMAIN: {context.target_node.title}\n"
    instructions += f"USER QUERY: {query}\n\n"

    instructions += "CRITICAL CONSTRAINTS (NEVER VIOLATE THESE):\n"
    for idx, constraint in enumerate(HARD_CONSTRAINTS, 1):
        instructions += f"{idx}. {constraint}\n"
    instructions += "\n"

    tests = context.required_tests
    if tests:
        instructions += "REQUIRED ANALYTICAL FRAMEWORK:\n"
        for idx, test in enumerate(tests, 1):
            instructions += f"Test {idx}: {test.content}\n"
        instructions += "\n"

    elements = context.required_elements
    if elements:
        instructions += "REQUIRED ELEMENTS TO ADDRESS:\n"
        for idx, element in enumerate(elements, 1):
            instructions += f"{idx}. {element.content}\n"
        instructions += "\n"

    if context.items:
        instructions += (
            f"AUTHORIZED CASES AND AUTHORITIES (you may ONLY cite from this list - "
            f"{len(context.items)} total):\n\n"
        )
        for idx, item in enumerate(context.items, 1):
            instructions += _render_item(idx, item)

    instructions += (
        "\nProvide your analysis addressing the query using ONLY the authorized cases "
        "listed above.\n"
    )

    if preamble:
        instructions = f"{preamble}\n\n{instructions}"

    return instructions


def append_feedback(instructions: str, adjustments: list[str]) -> str:
    """Append a validation feedback block listing adjustment directives."""
    if not adjustments:
        return instructions

    feedback = "\n\n=== VALIDATION FEEDBACK ===\n"
    feedback += "The previous response had the following issues:\n"
    for idx, adjustment in enumerate(adjustments, 1):
        feedback += f"{idx}. {adjustment}\n"
    feedback += "\nPlease revise your response to address these issues.\n"
    return instructions + feedback


def next_instructions(
    base_instructions: str, attempt: int, prior_report: ValidationReport | None
) -> str:
    """Instructions for a given attempt, strengthened by the previous report.

    The first attempt, or one without a prior report, uses the base
    instructions unchanged; feedback never accumulates across attempts.
    """
    if attempt <= 1 or prior_report is None:
        return base_instructions
    return append_feedback(base_instructions, derive_adjustments(prior_report))
