"""Query builders — Produce query documents in the Elasticsearch query DSL.

Both builders return a fresh structure on every call::

    {"query": {"match": {"title": "test"}}}
    {"query": {"term": {"status": "published"}}}
"""

from __future__ import annotations

from typing import Any

from docsearch.clients.base.client import Query
from docsearch.clients.base.exceptions import InvalidArgumentError


def build_match_query(field: str, value: Any) -> Query:
    """Build an analyzed (full-text) match query for a single field.

    Args:
        field: Document field to match against.
        value: Text to match.

    Returns:
        ``{"query": {"match": {field: value}}}``

    Raises:
        InvalidArgumentError: If the field name is empty or the value is None.
    """
    return _build_clause("match", field, value)


def build_term_query(field: str, value: Any) -> Query:
    """Build an exact-value term query for a single field.

    Args:
        field: Document field to compare.
        value: Exact value the field must hold.

    Returns:
        ``{"query": {"term": {field: value}}}``

    Raises:
        InvalidArgumentError: If the field name is empty or the value is None.
    """
    return _build_clause("term", field, value)


def _build_clause(clause: str, field: str, value: Any) -> Query:
    if not isinstance(field, str) or not field:
        raise InvalidArgumentError(f"{clause} query requires a non-empty field name, got {field!r}")
    if value is None:
        raise InvalidArgumentError(f"{clause} query on '{field}' requires a value, got None")
    return {"query": {clause: {field: value}}}
