# lexbound/models/knowledge.py
from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class TaxonomyNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    parent_id: Optional[str] = None
    children: List[str] = []

    @property
    def is_root(self) -> bool:
        return not self.parent_id


class KnowledgeItem(BaseModel):
    """One authority (case, statute or other) from the caller's knowledge base."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    kind: str = Field(default="case", alias="type")
    name: str
    citation: Optional[str] = None
    case: Optional[str] = None
    area_of_law: List[str] = []
    facts: Optional[str] = None
    question: Optional[str] = None
    holding: Optional[str] = None
    rule_of_law: Optional[str] = None
    rule: Optional[str] = None
    notes: Optional[str] = None
    heading_id: Optional[str] = None
    statute_name: Optional[str] = None
    statute_text: Optional[str] = None
    authority_name: Optional[str] = None
    authority_summary: Optional[str] = None
    classification_path: Tuple[str, ...] = Field(alias="taxonomy_path")

    @field_validator("classification_path")
    @classmethod
    def _path_not_empty(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("classification path must not be empty")
        return value

    @property
    def rule_text(self) -> str:
        """First non-empty of rule_of_law, rule, holding."""
        return self.rule_of_law or self.rule or self.holding or ""


class KnowledgeBase(BaseModel):
    """Items plus taxonomy, supplied whole per request.

    Accepts both ``{"items": [...], "taxonomy": [...]}`` and the ``.bset``
    document shape ``{"items": [...], "_meta": {"headings": [...]}}``.
    """

    model_config = ConfigDict(frozen=True)

    items: List[KnowledgeItem]
    taxonomy: List[TaxonomyNode]

    @model_validator(mode="before")
    @classmethod
    def _accept_bset_shape(cls, data: Any) -> Any:
        if isinstance(data, dict) and "taxonomy" not in data:
            meta = data.get("_meta") or {}
            if isinstance(meta, dict) and "headings" in meta:
                data = {"items": data.get("items", []), "taxonomy": meta["headings"]}
        return data

    @model_validator(mode="after")
    def _paths_resolve(self) -> "KnowledgeBase":
        known = {node.id for node in self.taxonomy}
        for item in self.items:
            unknown = [node_id for node_id in item.classification_path if node_id not in known]
            if unknown:
                raise ValueError(
                    f"item '{item.id}' references unknown taxonomy node(s): {', '.join(unknown)}"
                )
        return self

    def find_node(self, node_id: str) -> Optional[TaxonomyNode]:
        for node in self.taxonomy:
            if node.id == node_id:
                return node
        return None


class ConstraintCategory(str, Enum):
    """Kinds of directive mined from an item's notes."""

    REQUIRED_TEST = "requiredTest"
    REQUIRED_ELEMENT = "requiredElement"
    ALTERNATIVE_BRANCH = "alternativeBranch"
    INFORMATIONAL = "informational"


class ConstraintRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    item_id: str
    path: Tuple[str, ...]
    category: ConstraintCategory
    label: str
    content: str


class AuthorizedContext(BaseModel):
    """Everything a single query is allowed to draw on."""

    model_config = ConfigDict(frozen=True)

    target_node: TaxonomyNode
    path: Tuple[str, ...]
    items: Tuple[KnowledgeItem, ...] = ()
    constraints: Tuple[ConstraintRecord, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def required_tests(self) -> List[ConstraintRecord]:
        return [c for c in self.constraints if c.category == ConstraintCategory.REQUIRED_TEST]

    @property
    def required_elements(self) -> List[ConstraintRecord]:
        return [c for c in self.constraints if c.category == ConstraintCategory.REQUIRED_ELEMENT]

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
