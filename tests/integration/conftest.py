"""Integration test fixtures — a live Elasticsearch-compatible backend.

Expects a backend at ``DOCSEARCH_IT_URL`` (default ``http://localhost:9200``),
for example::

    docker run -p 9200:9200 -e discovery.type=single-node \
        -e xpack.security.enabled=false elasticsearch:8.13.0

Tests are skipped when no backend answers.
"""

from __future__ import annotations

import os
import time
import uuid
from typing import Any

import httpx
import pytest

MOCK_DOCUMENTS: dict[str, dict[str, Any]] = {
    "doc-001": {
        "title": "test document",
        "content": "A short document used by the integration suite.",
        "status": "published",
        "tags": ["testing"],
    },
    "doc-002": {
        "title": "Transformer Models for Natural Language Understanding",
        "content": "We survey recent advances in transformer-based models.",
        "status": "draft",
        "tags": ["nlp", "transformers"],
    },
    "doc-003": {
        "title": "Graph Neural Networks for Drug Discovery",
        "content": "This work applies graph neural networks to molecular property prediction.",
        "status": "published",
        "tags": ["graphs", "chemistry"],
    },
}


def _wait_for_service(url: str, timeout: float = 10.0) -> bool:
    """Block until *url* returns HTTP 200, or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=5)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(1)
    return False


@pytest.fixture(scope="session")
def elasticsearch_url() -> str:
    """Ensure Elasticsearch is running."""
    url = os.environ.get("DOCSEARCH_IT_URL", "http://localhost:9200")
    if not _wait_for_service(url):
        pytest.skip(f"Elasticsearch not available at {url}")
    return url


@pytest.fixture
def index_name(elasticsearch_url: str):
    """A unique index name, deleted after the test."""
    name = f"docsearch-it-{uuid.uuid4().hex[:8]}"
    yield name
    httpx.delete(f"{elasticsearch_url}/{name}", params={"ignore_unavailable": "true"}, timeout=10)


@pytest.fixture
def mock_documents() -> dict[str, dict[str, Any]]:
    return MOCK_DOCUMENTS
