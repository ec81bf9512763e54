"""Shared test fixtures and configuration."""

from __future__ import annotations

from typing import Any

import pytest

from docsearch.clients.memory.client import InMemorySearchClient
from docsearch.config.settings import Settings


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        backend={"name": "memory", "url": "memory://test", "timeout": 5.0},
        observability={"log_level": "debug", "log_format": "console"},
    )


@pytest.fixture
def sample_documents() -> dict[str, dict[str, Any]]:
    """Articles keyed by document id."""
    return {
        "article-1": {
            "title": "test document",
            "content": "A document used to exercise full-text matching.",
            "status": "published",
            "tags": ["testing", "search"],
            "author": {"name": "Test Author", "team": "docs"},
            "views": 42,
        },
        "article-2": {
            "title": "Elasticsearch tutorial",
            "content": "How to build match and term queries for a test cluster.",
            "status": "draft",
            "tags": ["elasticsearch", "tutorial"],
            "author": {"name": "Jane Doe", "team": "search"},
            "views": 7,
        },
        "article-3": {
            "title": "Go testing in practice",
            "content": "Testing in Go is awesome.",
            "status": "published",
            "tags": ["go", "testing"],
            "author": {"name": "John Smith", "team": "platform"},
            "views": 13,
        },
    }


@pytest.fixture
def memory_client() -> InMemorySearchClient:
    """An empty in-memory client."""
    return InMemorySearchClient()


@pytest.fixture
async def populated_client(
    memory_client: InMemorySearchClient,
    sample_documents: dict[str, dict[str, Any]],
) -> InMemorySearchClient:
    """An in-memory client with the sample articles indexed under ``articles``."""
    for doc_id, document in sample_documents.items():
        await memory_client.index("articles", doc_id, document)
    return memory_client
