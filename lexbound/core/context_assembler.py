"""Authorized context assembly and the retrieval controller.

The controller runs the retrieval half of a query:
1. Resolve the target node (explicit id or title similarity)
2. Compute the root-to-target path
3. Retrieve authorized items and their constraints
4. Package them into one immutable AuthorizedContext
"""

import logging
from typing import Sequence

from lexbound.core.constraint_extractor import collect_constraints
from lexbound.core.errors import EmptyTaxonomyError, TargetNodeNotFoundError
from lexbound.core.navigator import DEFAULT_NODE_THRESHOLD, compute_path, select_target_node
from lexbound.core.retriever import retrieve_authorities
from lexbound.models.knowledge import (
    AuthorizedContext,
    ConstraintRecord,
    KnowledgeBase,
    KnowledgeItem,
    TaxonomyNode,
)

logger = logging.getLogger(__name__)


def assemble_context(
    path: Sequence[str],
    target_node: TaxonomyNode,
    items: Sequence[KnowledgeItem],
    constraints: Sequence[ConstraintRecord],
) -> AuthorizedContext:
    """Package retrieval outputs into one authorized context."""
    return AuthorizedContext(
        target_node=target_node,
        path=tuple(path),
        items=tuple(items),
        constraints=tuple(constraints),
    )


class RetrievalController:
    """Maps a query onto the slice of the knowledge base it may use."""

    def __init__(self, node_threshold: float = DEFAULT_NODE_THRESHOLD):
        """Initialize controller.

        Args:
            node_threshold: Minimum title similarity for node selection
        """
        self.node_threshold = node_threshold

    def resolve_target(
        self, query: str, knowledge_base: KnowledgeBase, target_node_id: str | None = None
    ) -> TaxonomyNode:
        if not knowledge_base.taxonomy:
            raise EmptyTaxonomyError()

        if target_node_id is not None:
            node = knowledge_base.find_node(target_node_id)
            if node is None:
                raise TargetNodeNotFoundError(target_node_id)
            return node

        return select_target_node(query, knowledge_base.taxonomy, self.node_threshold)

    def build_context(
        self, query: str, knowledge_base: KnowledgeBase, target_node_id: str | None = None
    ) -> AuthorizedContext:
        """Compute the authorized context for a query.

        Args:
            query: User query
            knowledge_base: Items and taxonomy for this request
            target_node_id: Optional node id that bypasses similarity selection

        Returns:
            AuthorizedContext (possibly with no items)

        Raises:
            InputError: For an unknown target node or a broken taxonomy
        """
        target_node = self.resolve_target(query, knowledge_base, target_node_id)
        path = compute_path(target_node, knowledge_base.taxonomy)

        items = retrieve_authorities(path, knowledge_base.items)
        constraints = collect_constraints(path, knowledge_base.items)

        logger.info(
            f"Authorized context: node='{target_node.title}' depth={len(path) - 1} "
            f"items={len(items)} constraints={len(constraints)}"
        )
        return assemble_context(path, target_node, items, constraints)
