"""Shared fixtures for integration tests."""

import pytest


@pytest.fixture
def kb_document(knowledge_base):
    """The shared knowledge base as a request body would carry it."""
    return knowledge_base.model_dump(mode="json", by_alias=True)
