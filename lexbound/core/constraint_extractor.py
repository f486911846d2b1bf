"""Extraction of directive markers embedded in item notes.

Marker grammar (all case-sensitive):

    TEST/STANDARD(◼): ...      required test
    ELEMENT/FACTOR (1): ...    required element (space before "(" optional)
    MACRO-FORK(a): ...         alternative branch
    MICRO-FORK(ii): ...        alternative branch
    GENERAL NOTE(◼): ...       informational

"■" is accepted in place of "◼". A marker's content runs until the first
blank line, the first line break followed by an uppercase letter, or the end
of the text.
"""

import hashlib
import logging
import re
from typing import Iterable, Sequence

from lexbound.core.retriever import is_path_prefix
from lexbound.models.knowledge import ConstraintCategory, ConstraintRecord, KnowledgeItem

logger = logging.getLogger(__name__)

_SPAN_END = r"(?=\n[ \t]*\n|\n[A-Z]|\Z)"


def _marker(head: str) -> re.Pattern:
    return re.compile(head + r":\s*(?P<content>.+?)" + _SPAN_END, re.S)


MARKER_PATTERNS = [
    (_marker(r"TEST/STANDARD\((?P<label>[◼■])\)"), ConstraintCategory.REQUIRED_TEST),
    (_marker(r"ELEMENT/FACTOR\s*\((?P<label>\d+)\)"), ConstraintCategory.REQUIRED_ELEMENT),
    (_marker(r"MACRO-FORK\((?P<label>[a-z])\)"), ConstraintCategory.ALTERNATIVE_BRANCH),
    (_marker(r"MICRO-FORK\((?P<label>[ivxlc]+|[a-z])\)"), ConstraintCategory.ALTERNATIVE_BRANCH),
    (_marker(r"GENERAL NOTE\((?P<label>[◼■])\)"), ConstraintCategory.INFORMATIONAL),
]


def _record_id(item_id: str, category: ConstraintCategory, offset: int, content: str) -> str:
    digest = hashlib.sha1(f"{item_id}|{category.value}|{offset}|{content}".encode("utf-8"))
    return f"constraint_{digest.hexdigest()[:12]}"


def extract_constraints(item: KnowledgeItem) -> list[ConstraintRecord]:
    """Parse an item's notes into constraint records, in document order.

    Notes without markers (or with malformed ones) yield no records.
    """
    notes = item.notes
    if not notes or not notes.strip():
        return []

    matches = []
    for pattern, category in MARKER_PATTERNS:
        for match in pattern.finditer(notes):
            content = match.group("content").strip()
            if content:
                matches.append((match.start(), category, match.group("label"), content))

    matches.sort(key=lambda m: m[0])

    return [
        ConstraintRecord(
            id=_record_id(item.id, category, offset, content),
            item_id=item.id,
            path=item.classification_path,
            category=category,
            label=label,
            content=content,
        )
        for offset, category, label, content in matches
    ]


def collect_constraints(
    path: Sequence[str], items: Iterable[KnowledgeItem]
) -> list[ConstraintRecord]:
    """Constraints from every item at or below the target path, in source order."""
    constraints = []
    for item in items:
        if not is_path_prefix(path, item.classification_path):
            continue
        constraints.extend(extract_constraints(item))

    logger.debug(f"Extracted {len(constraints)} constraint(s) for path {'/'.join(path)}")
    return constraints
