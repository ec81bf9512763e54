"""In-memory client — Process-local search backend for tests and prototyping.

Evaluates the subset of the Elasticsearch query DSL that docsearch builds
(``match``, ``term``) plus ``match_all`` and ``bool`` compositions, so code
written against a real cluster runs unchanged against this client.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import re
import threading
from collections.abc import Mapping
from typing import Any

from docsearch.clients.base.client import Document, Query, SearchClient
from docsearch.clients.base.exceptions import InvalidArgumentError, InvalidQueryError

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)
_TOP_LEVEL_KEYS = {"query", "size", "from"}
_BOOL_KEYS = {"must", "filter", "should", "must_not", "minimum_should_match"}
_MISSING = object()


class InMemorySearchClient(SearchClient):
    """Search client backed by a dictionary.

    Documents are deep-copied on the way in and on the way out, so callers
    never share state with the store. Store access is serialized with a lock,
    which makes one instance safe to use from several threads and tasks.

    Args:
        url: Ignored apart from being reported; accepted so the client can
            be built through the registry like any other backend.
        timeout: Default per-operation deadline in seconds.
        latency: Seconds to sleep before each operation, emulating a
            remote round-trip.
        **kwargs: Options meant for remote backends (``refresh`` and the
            like); ignored.
    """

    def __init__(
        self,
        url: str = "memory://",
        *,
        timeout: float | None = None,
        latency: float = 0.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(timeout=timeout)
        if latency < 0:
            raise InvalidArgumentError(f"latency must be non-negative, got {latency}")
        self._url = url
        self._latency = latency
        self._indices: dict[str, dict[str, Document]] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "memory"

    @property
    def url(self) -> str:
        return self._url

    @property
    def indices(self) -> list[str]:
        """Names of the indices that currently exist."""
        with self._lock:
            return list(self._indices)

    def count(self, index: str) -> int:
        """Number of documents stored in an index (0 if it does not exist)."""
        with self._lock:
            return len(self._indices.get(index, {}))

    # ── Operations ───────────────────────────────────────────────────────

    async def _index_document(self, index: str, doc_id: str, body: Document) -> None:
        await self._simulate_latency()
        with self._lock:
            documents = self._indices.setdefault(index, {})
            # Overwrites keep the original insertion slot, as ties rank by it.
            documents[doc_id] = copy.deepcopy(body)

    async def _execute_search(self, index: str, query: Query) -> list[Document]:
        unknown = set(query) - _TOP_LEVEL_KEYS
        if unknown:
            raise InvalidQueryError(f"Unsupported top-level query keys: {sorted(unknown)}")
        clause = query.get("query", {"match_all": {}})
        size = _non_negative_int(query, "size", 10)
        offset = _non_negative_int(query, "from", 0)

        # Reject malformed clauses even when the index holds no documents.
        _evaluate(clause, {})

        await self._simulate_latency()
        with self._lock:
            if index not in self._indices:
                raise InvalidQueryError(f"index_not_found_exception: no such index [{index}]")
            snapshot = list(self._indices[index].values())

        scored: list[tuple[float, int, Document]] = []
        for position, document in enumerate(snapshot):
            score = _evaluate(clause, document)
            if score is not None:
                scored.append((score, position, document))
        scored.sort(key=lambda item: (-item[0], item[1]))
        return [copy.deepcopy(document) for _, _, document in scored[offset : offset + size]]

    async def _delete_document(self, index: str, doc_id: str) -> None:
        await self._simulate_latency()
        with self._lock:
            self._indices.get(index, {}).pop(doc_id, None)

    async def _simulate_latency(self) -> None:
        if self._latency:
            await asyncio.sleep(self._latency)


# ── Query evaluation ─────────────────────────────────────────────────────


def _non_negative_int(query: Query, key: str, default: int) -> int:
    value = query.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidQueryError(f"'{key}' must be a non-negative integer, got {value!r}")
    return value


def _single_entry(clause_type: str, body: Any) -> tuple[str, Any]:
    if not isinstance(body, Mapping) or len(body) != 1:
        raise InvalidQueryError(f"[{clause_type}] query must name exactly one field")
    ((field, spec),) = body.items()
    return field, spec


def _evaluate(clause: Any, document: Document) -> float | None:
    """Score a document against a clause. ``None`` means no match."""
    if not isinstance(clause, Mapping) or len(clause) != 1:
        raise InvalidQueryError(f"A query clause must have exactly one key, got {clause!r}")
    ((clause_type, body),) = clause.items()

    if clause_type == "match_all":
        return 1.0
    if clause_type == "match":
        return _evaluate_match(body, document)
    if clause_type == "term":
        return _evaluate_term(body, document)
    if clause_type == "bool":
        return _evaluate_bool(body, document)
    raise InvalidQueryError(f"Unsupported query clause [{clause_type}]")


def _evaluate_match(body: Any, document: Document) -> float | None:
    field, spec = _single_entry("match", body)
    operator = "or"
    if isinstance(spec, Mapping):
        if "query" not in spec:
            raise InvalidQueryError(f"[match] query on '{field}' is missing 'query'")
        operator = str(spec.get("operator", "or")).lower()
        if operator not in ("or", "and"):
            raise InvalidQueryError(f"[match] operator must be 'or' or 'and', got {operator!r}")
        spec = spec["query"]

    query_tokens = set(_tokens(spec))
    if not query_tokens:
        return None
    field_tokens = set(_tokens(_field_value(document, field)))
    matched = query_tokens & field_tokens
    if not matched or (operator == "and" and matched != query_tokens):
        return None
    return len(matched) / len(query_tokens)


def _evaluate_term(body: Any, document: Document) -> float | None:
    field, spec = _single_entry("term", body)
    if isinstance(spec, Mapping):
        if "value" not in spec:
            raise InvalidQueryError(f"[term] query on '{field}' is missing 'value'")
        spec = spec["value"]

    value = _field_value(document, field)
    if isinstance(value, list):
        return 1.0 if spec in value else None
    return 1.0 if value is not _MISSING and value == spec else None


def _evaluate_bool(body: Any, document: Document) -> float | None:
    if not isinstance(body, Mapping):
        raise InvalidQueryError("[bool] query must be an object")
    unknown = set(body) - _BOOL_KEYS
    if unknown:
        raise InvalidQueryError(f"Unsupported [bool] keys: {sorted(unknown)}")

    must = _clause_list(body.get("must"))
    filters = _clause_list(body.get("filter"))
    should = _clause_list(body.get("should"))
    must_not = _clause_list(body.get("must_not"))
    default_minimum = 0 if (must or filters) else 1
    minimum_should = body.get("minimum_should_match", default_minimum if should else 0)
    if isinstance(minimum_should, bool) or not isinstance(minimum_should, int):
        raise InvalidQueryError("[bool] minimum_should_match must be an integer")

    # Every clause is evaluated so malformed ones are reported regardless of data.
    must_scores = [_evaluate(clause, document) for clause in must]
    filter_scores = [_evaluate(clause, document) for clause in filters]
    must_not_scores = [_evaluate(clause, document) for clause in must_not]
    should_scores = [s for s in (_evaluate(clause, document) for clause in should) if s is not None]

    if any(s is None for s in must_scores + filter_scores):
        return None
    if any(s is not None for s in must_not_scores):
        return None
    if len(should_scores) < minimum_should:
        return None
    score = sum(s for s in must_scores if s is not None) + sum(should_scores)
    return score if score > 0 else 1.0


def _clause_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _field_value(document: Mapping[str, Any], field: str) -> Any:
    """Resolve a (possibly dotted) field name inside a document."""
    if field in document:
        return document[field]
    current: Any = document
    for part in field.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _tokens(value: Any) -> list[str]:
    if value is _MISSING or value is None:
        return []
    if isinstance(value, list):
        return [token for item in value for token in _tokens(item)]
    if isinstance(value, Mapping):
        return []
    if isinstance(value, bool):
        return [str(value).lower()]
    return _TOKEN_RE.findall(str(value).lower())
