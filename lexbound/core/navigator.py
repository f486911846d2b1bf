"""Taxonomy navigation: pick the node a query is about and its root path."""

import logging
import re
from typing import Sequence

from lexbound.core.errors import BrokenTaxonomyError, EmptyTaxonomyError
from lexbound.core.similarity import similarity
from lexbound.models.knowledge import TaxonomyNode

logger = logging.getLogger(__name__)

DEFAULT_NODE_THRESHOLD = 0.15

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
        "be", "have", "has", "had", "do", "does", "did", "will", "would",
        "should", "could", "may", "might", "can", "what", "which", "who",
        "when", "where", "why", "how",
    }
)


def significant_terms(query: str) -> list[str]:
    """Query terms longer than two characters that are not stop words."""
    terms = re.sub(r"[^\w\s]", " ", query.lower()).split()
    return [term for term in terms if len(term) > 2 and term not in STOP_WORDS]


def find_root(nodes: Sequence[TaxonomyNode]) -> TaxonomyNode:
    """First parentless node, or the first node when every node has a parent."""
    if not nodes:
        raise EmptyTaxonomyError()
    for node in nodes:
        if node.is_root:
            return node
    return nodes[0]


def select_target_node(
    query: str,
    nodes: Sequence[TaxonomyNode],
    threshold: float = DEFAULT_NODE_THRESHOLD,
) -> TaxonomyNode:
    """Select the taxonomy node whose title best matches the query.

    Args:
        query: User query
        nodes: Taxonomy nodes in source order
        threshold: Minimum similarity a node must exceed to be chosen

    Returns:
        Best-scoring node above threshold (first one on ties), else a root node
    """
    root = find_root(nodes)

    if not significant_terms(query):
        logger.debug("No significant query terms, falling back to root node")
        return root

    best_node = None
    best_score = threshold

    for node in nodes:
        score = similarity(query, node.title)
        if score > best_score:
            best_score = score
            best_node = node

    if best_node is None:
        logger.info(f"No node scored above {threshold}, falling back to root '{root.id}'")
        return root

    logger.debug(f"Selected node '{best_node.id}' ({best_node.title}) score={best_score:.3f}")
    return best_node


def compute_path(target_node: TaxonomyNode, nodes: Sequence[TaxonomyNode]) -> list[str]:
    """Root-to-target sequence of node ids.

    Raises:
        BrokenTaxonomyError: If a parent id does not resolve or the chain loops
    """
    by_id = {node.id: node for node in nodes}
    path = []
    seen = set()
    current = target_node

    while True:
        if current.id in seen:
            raise BrokenTaxonomyError(target_node.id, current.id, reason="cycle through")
        seen.add(current.id)
        path.append(current.id)

        if current.is_root:
            break

        parent = by_id.get(current.parent_id)
        if parent is None:
            raise BrokenTaxonomyError(current.id, current.parent_id)
        current = parent

    path.reverse()
    return path
