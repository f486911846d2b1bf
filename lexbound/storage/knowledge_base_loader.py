"""Loads knowledge-base documents from disk.

Supports the ``.bset`` JSON document (``items`` plus ``_meta.headings``) and
plain JSON or YAML files shaped as ``{"items": [...], "taxonomy": [...]}``.
"""

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from lexbound.models.knowledge import KnowledgeBase

logger = logging.getLogger(__name__)


class KnowledgeBaseLoadError(ValueError):
    """The document could not be read or does not describe a knowledge base."""


def parse_knowledge_base(data: dict) -> KnowledgeBase:
    try:
        return KnowledgeBase.model_validate(data)
    except ValidationError as e:
        raise KnowledgeBaseLoadError(f"Invalid knowledge base: {e}") from e


def load_knowledge_base(path: str | Path) -> KnowledgeBase:
    """Read and validate a knowledge-base document.

    Args:
        path: File path (.bset, .json, .yaml or .yml)

    Returns:
        Validated KnowledgeBase

    Raises:
        KnowledgeBaseLoadError: If the file is missing, unparsable or invalid
    """
    file_path = Path(path)
    if not file_path.exists():
        raise KnowledgeBaseLoadError(f"Knowledge base file not found: {file_path}")

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise KnowledgeBaseLoadError(f"Could not parse {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise KnowledgeBaseLoadError(f"{file_path} does not contain a JSON/YAML object")

    knowledge_base = parse_knowledge_base(data)
    logger.info(
        f"Loaded knowledge base from {file_path}: {len(knowledge_base.items)} items, "
        f"{len(knowledge_base.taxonomy)} taxonomy nodes"
    )
    return knowledge_base
