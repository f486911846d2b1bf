"""Path-based authority retrieval.

An item is in scope when its classification path equals the target path
(exact match) or extends it (inherited match: the item sits below the target
node). Output order is part of the contract because compiled instructions
number items: exact matches first, then inherited, each in source order.
"""

import logging
from typing import Iterable, Sequence

from lexbound.models.knowledge import KnowledgeItem

logger = logging.getLogger(__name__)


def is_exact_match(path: Sequence[str], item_path: Sequence[str]) -> bool:
    return tuple(path) == tuple(item_path)


def is_path_prefix(path: Sequence[str], item_path: Sequence[str]) -> bool:
    """True when ``path`` is a (non-strict) prefix of ``item_path``."""
    if len(path) > len(item_path):
        return False
    return tuple(item_path[: len(path)]) == tuple(path)


def retrieve_authorities(
    path: Sequence[str], items: Iterable[KnowledgeItem]
) -> list[KnowledgeItem]:
    """Select the items authorized for a target path.

    Args:
        path: Root-to-target node ids
        items: Knowledge base items in source order

    Returns:
        Exact matches followed by inherited matches
    """
    exact_matches = []
    inherited_matches = []

    for item in items:
        if is_exact_match(path, item.classification_path):
            exact_matches.append(item)
        elif is_path_prefix(path, item.classification_path):
            inherited_matches.append(item)

    logger.debug(
        f"Retrieved {len(exact_matches)} exact and {len(inherited_matches)} inherited "
        f"authorities for path {'/'.join(path)}"
    )
    return exact_matches + inherited_matches
