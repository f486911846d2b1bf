"""Exception hierarchy for the retrieval and generation core.

Validation failures are not exceptions; they are reported through
ValidationReport and handled by the generation loop.
"""


class LexboundError(Exception):
    """Base class for all core errors."""


class InputError(LexboundError):
    """Request input is missing or invalid. Raised before any model call."""

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


class MissingQueryError(InputError):
    def __init__(self):
        super().__init__("Missing required field: query", field="query")


class MissingKnowledgeBaseError(InputError):
    def __init__(self):
        super().__init__("Missing required field: knowledge_base", field="knowledge_base")


class EmptyTaxonomyError(InputError):
    def __init__(self):
        super().__init__(
            "Knowledge base taxonomy contains no nodes", field="knowledge_base.taxonomy"
        )


class TargetNodeNotFoundError(InputError):
    def __init__(self, node_id: str):
        super().__init__(f"Target node not found: {node_id}", field="target_node_id")
        self.node_id = node_id


class BrokenTaxonomyError(InputError):
    """A parent link points at a missing node, or the parent chain loops."""

    def __init__(self, node_id: str, parent_id: str, reason: str = "missing parent"):
        super().__init__(
            f"Broken taxonomy at node '{node_id}': {reason} '{parent_id}'",
            field="knowledge_base.taxonomy",
        )
        self.node_id = node_id
        self.parent_id = parent_id


class CompletionTransportError(LexboundError):
    """The text-completion call failed, timed out or was aborted."""
