"""Base search client — Abstract interface for all search backend clients.

Every backend must implement this interface to integrate with docsearch.
The base class owns the behavior that is identical across backends:
  1. Validating index names, document ids and query shapes before any I/O
  2. Serializing caller documents to plain JSON mappings
  3. Enforcing per-call deadlines

Backend clients implement the ``_index_document``, ``_execute_search`` and
``_delete_document`` hooks, which only ever see validated input.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Mapping
from typing import Any, TypeVar

from docsearch.clients.base.exceptions import DeadlineExceededError, InvalidArgumentError
from docsearch.models.document import to_document_body

_T = TypeVar("_T")

logger = logging.getLogger(__name__)

Document = dict[str, Any]
"""A schema-less document body, as stored in and returned from a backend."""

Query = dict[str, Any]
"""A query document in the Elasticsearch query DSL."""


class SearchClient(ABC):
    """Abstract base class for search backend clients.

    All clients must implement:
      - name: Backend identifier
      - _index_document(): Store or overwrite a document
      - _execute_search(): Run a query and return matching documents
      - _delete_document(): Remove a document, tolerating missing ids
      - close(): Release transport resources

    Construction never performs network I/O. Clients are safe for concurrent
    use from many tasks; they hold no mutable state besides lazily created
    transport objects.

    Args:
        timeout: Default deadline in seconds applied to every operation.
            ``None`` disables the default deadline.
    """

    def __init__(self, timeout: float | None = None) -> None:
        if timeout is not None and timeout <= 0:
            raise InvalidArgumentError(f"timeout must be positive, got {timeout}")
        self._timeout = timeout

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique backend name (e.g., 'elasticsearch', 'memory')."""

    @property
    def timeout(self) -> float | None:
        """Default per-operation deadline in seconds."""
        return self._timeout

    async def __aenter__(self) -> SearchClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── Public operations ────────────────────────────────────────────────

    async def index(
        self,
        index: str,
        doc_id: str,
        document: Any,
        *,
        timeout: float | None = None,
    ) -> None:
        """Store or overwrite a document under ``(index, doc_id)``.

        Args:
            index: Target index name.
            doc_id: Document identifier.
            document: A mapping, pydantic model, or dataclass instance.
            timeout: Deadline in seconds for this call. Defaults to the
                client's timeout.

        Raises:
            InvalidArgumentError: If index or doc_id is empty.
            InvalidDocumentError: If the document cannot be serialized or the
                backend rejects it.
            BackendUnavailableError: If the backend cannot be reached.
            PermissionDeniedError: If the backend refuses the write.
            DeadlineExceededError: If the deadline expires first.
        """
        _require_name("index", index)
        _require_name("doc_id", doc_id)
        body = to_document_body(document)
        deadline = self._resolve_deadline(timeout)
        logger.debug("Indexing document %s/%s via %s", index, doc_id, self.name)
        await self._run_with_deadline("index", self._index_document(index, doc_id, body), deadline)

    async def search(
        self,
        index: str,
        query: Mapping[str, Any],
        *,
        timeout: float | None = None,
    ) -> list[Document]:
        """Execute a query and return the matching documents.

        Args:
            index: Index to search.
            query: Query document, e.g. from ``build_match_query()``.
            timeout: Deadline in seconds for this call.

        Returns:
            Matching documents in backend rank order. Empty when nothing matches.

        Raises:
            InvalidArgumentError: If index is empty or query is not a mapping.
            InvalidQueryError: If the backend rejects the query.
            BackendUnavailableError: If the backend cannot be reached.
            PermissionDeniedError: If the backend refuses the search.
            DeadlineExceededError: If the deadline expires first.
        """
        _require_name("index", index)
        if not isinstance(query, Mapping):
            raise InvalidArgumentError(f"query must be a mapping, got {type(query).__name__}")
        deadline = self._resolve_deadline(timeout)
        logger.debug("Searching index %s via %s", index, self.name)
        results = await self._run_with_deadline("search", self._execute_search(index, dict(query)), deadline)
        logger.debug("Search on %s returned %d documents", index, len(results))
        return results

    async def delete(
        self,
        index: str,
        doc_id: str,
        *,
        timeout: float | None = None,
    ) -> None:
        """Remove a document. Deleting a missing document is not an error.

        Args:
            index: Index holding the document.
            doc_id: Document identifier.
            timeout: Deadline in seconds for this call.

        Raises:
            InvalidArgumentError: If index or doc_id is empty.
            BackendUnavailableError: If the backend cannot be reached.
            PermissionDeniedError: If the backend refuses the delete.
            DeadlineExceededError: If the deadline expires first.
        """
        _require_name("index", index)
        _require_name("doc_id", doc_id)
        deadline = self._resolve_deadline(timeout)
        logger.debug("Deleting document %s/%s via %s", index, doc_id, self.name)
        await self._run_with_deadline("delete", self._delete_document(index, doc_id), deadline)

    async def close(self) -> None:
        """Release transport resources. The client stays usable afterwards."""

    # ── Backend hooks ────────────────────────────────────────────────────

    @abstractmethod
    async def _index_document(self, index: str, doc_id: str, body: Document) -> None:
        """Send a serialized document to the backend."""

    @abstractmethod
    async def _execute_search(self, index: str, query: Query) -> list[Document]:
        """Run a query against the backend and return the document bodies."""

    @abstractmethod
    async def _delete_document(self, index: str, doc_id: str) -> None:
        """Delete a document, treating a missing document as success."""

    # ── Helpers ──────────────────────────────────────────────────────────

    def _resolve_deadline(self, timeout: float | None) -> float | None:
        deadline = self._timeout if timeout is None else timeout
        if deadline is not None and deadline <= 0:
            raise InvalidArgumentError(f"timeout must be positive, got {deadline}")
        return deadline

    async def _run_with_deadline(self, operation: str, call: Awaitable[_T], deadline: float | None) -> _T:
        """Await a backend call, translating an expired deadline.

        Task cancellation is not intercepted: ``asyncio.CancelledError``
        propagates to the caller unchanged.
        """
        if deadline is None:
            return await call
        try:
            async with asyncio.timeout(deadline):
                return await call
        except TimeoutError as e:
            logger.warning("%s on %s exceeded its %.3fs deadline", operation, self.name, deadline)
            raise DeadlineExceededError(f"{operation} did not complete within {deadline}s") from e


def _require_name(label: str, value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidArgumentError(f"{label} must be a non-empty string, got {value!r}")
