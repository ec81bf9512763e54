"""docsearch — Pluggable client library for document search engines.

Quick start::

    from docsearch import build_match_query, new_client

    async with new_client("http://localhost:9200") as client:
        await client.index("articles", "a-1", {"title": "test document"})
        hits = await client.search("articles", build_match_query("title", "test"))
"""

__version__ = "0.1.0"

from docsearch.clients.base.client import Document, Query, SearchClient
from docsearch.clients.base.exceptions import (
    BackendUnavailableError,
    ConfigurationError,
    DeadlineExceededError,
    InvalidArgumentError,
    InvalidDocumentError,
    InvalidQueryError,
    PermissionDeniedError,
    SearchClientError,
)
from docsearch.clients.base.registry import ClientRegistry, create_client, new_client
from docsearch.clients.sync import SyncSearchClient
from docsearch.query import build_match_query, build_term_query

__all__ = [
    "BackendUnavailableError",
    "ClientRegistry",
    "ConfigurationError",
    "DeadlineExceededError",
    "Document",
    "InvalidArgumentError",
    "InvalidDocumentError",
    "InvalidQueryError",
    "PermissionDeniedError",
    "Query",
    "SearchClient",
    "SearchClientError",
    "SyncSearchClient",
    "__version__",
    "build_match_query",
    "build_term_query",
    "create_client",
    "new_client",
]
