"""Elasticsearch client — Document search over the Elasticsearch REST API.

Talks to any Elasticsearch-compatible HTTP/JSON endpoint using ``httpx``.
The underlying ``httpx.AsyncClient`` is created on first use, so building a
client never touches the network.

Usage::

    client = ElasticsearchClient("http://localhost:9200")
    await client.index("articles", "a-1", {"title": "test document"})
    hits = await client.search("articles", build_match_query("title", "test"))
    await client.close()
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from docsearch.clients.base.client import Document, Query, SearchClient
from docsearch.clients.base.exceptions import (
    BackendUnavailableError,
    InvalidArgumentError,
    InvalidDocumentError,
    InvalidQueryError,
    PermissionDeniedError,
    SearchClientError,
)

logger = logging.getLogger(__name__)

REFRESH_POLICIES = ("true", "false", "wait_for")


class ElasticsearchClient(SearchClient):
    """Search client for Elasticsearch (v7+) and API-compatible backends.

    Operations map onto the document and search APIs:
      - index: ``PUT /{index}/_doc/{id}``
      - search: ``POST /{index}/_search``
      - delete: ``DELETE /{index}/_doc/{id}`` (404 counts as success)

    Args:
        url: Backend base URL, e.g. ``"http://localhost:9200"``.
        timeout: Default per-operation deadline in seconds.
        refresh: Optional refresh policy sent with writes
            (``"true"``, ``"false"`` or ``"wait_for"``).
        verify_certs: Whether to verify TLS certificates.
        **httpx_kwargs: Additional keyword arguments passed to ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        url: str = "http://localhost:9200",
        *,
        timeout: float | None = 30.0,
        refresh: str | None = None,
        verify_certs: bool = True,
        **httpx_kwargs: Any,
    ) -> None:
        super().__init__(timeout=timeout)
        if not url:
            raise InvalidArgumentError("url must be a non-empty string")
        if refresh is not None and refresh not in REFRESH_POLICIES:
            raise InvalidArgumentError(f"refresh must be one of {REFRESH_POLICIES}, got {refresh!r}")
        self._url = url.rstrip("/")
        self._refresh = refresh
        self._verify_certs = verify_certs
        self._httpx_kwargs = httpx_kwargs
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "elasticsearch"

    @property
    def url(self) -> str:
        """Backend base URL."""
        return self._url

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # Deadlines are enforced per call by the base class, not by httpx.
            client_kwargs: dict[str, Any] = {
                "base_url": self._url,
                "headers": {"Accept": "application/json"},
                "verify": self._verify_certs,
                "timeout": httpx.Timeout(None),
            }
            client_kwargs.update(self._httpx_kwargs)
            self._client = httpx.AsyncClient(**client_kwargs)
            logger.info("Opened HTTP client for Elasticsearch at %s", self._url)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            client, self._client = self._client, None
            await client.aclose()
            logger.debug("Closed HTTP client for %s", self._url)

    # ── Operations ───────────────────────────────────────────────────────

    async def _index_document(self, index: str, doc_id: str, body: Document) -> None:
        params = {"refresh": self._refresh} if self._refresh else None
        response = await self._request("PUT", _doc_path(index, doc_id), json=body, params=params)
        if response.is_success:
            return
        raise _error_for_response(response, "index")

    async def _execute_search(self, index: str, query: Query) -> list[Document]:
        response = await self._request("POST", f"/{_segment(index)}/_search", json=query)
        if not response.is_success:
            raise _error_for_response(response, "search")

        try:
            data = response.json()
        except ValueError as e:
            raise BackendUnavailableError(f"Elasticsearch returned a malformed search response: {e}") from e
        return sources_from_response(data, "Elasticsearch")

    async def _delete_document(self, index: str, doc_id: str) -> None:
        params = {"refresh": self._refresh} if self._refresh else None
        response = await self._request("DELETE", _doc_path(index, doc_id), params=params)
        if response.is_success or response.status_code == 404:
            return
        raise _error_for_response(response, "delete")

    # ── Helpers ──────────────────────────────────────────────────────────

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request, mapping transport failures to ``BackendUnavailableError``."""
        try:
            return await self._get_client().request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.warning("Elasticsearch request %s %s failed: %s", method, path, e)
            raise BackendUnavailableError(f"Elasticsearch at {self._url} is unavailable: {e}") from e


def sources_from_response(data: Any, engine: str) -> list[Document]:
    """Pull the ``_source`` bodies out of a search response's ``hits.hits``."""
    if not isinstance(data, dict):
        raise BackendUnavailableError(f"{engine} returned a malformed search response")
    hits = data.get("hits") or {}
    if not isinstance(hits, dict):
        raise BackendUnavailableError(f"{engine} returned malformed search hits: {hits!r}")
    entries = hits.get("hits") or []
    if not isinstance(entries, list) or not all(isinstance(hit, dict) for hit in entries):
        raise BackendUnavailableError(f"{engine} returned malformed search hits: {entries!r}")
    return [hit.get("_source") or {} for hit in entries]


def _segment(value: str) -> str:
    return quote(value, safe="")


def _doc_path(index: str, doc_id: str) -> str:
    return f"/{_segment(index)}/_doc/{_segment(doc_id)}"


def _error_reason(response: httpx.Response) -> str:
    """Extract ``error.type: error.reason`` from an Elasticsearch error body."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase

    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        error_type = error.get("type", "error")
        reason = error.get("reason") or error.get("root_cause") or ""
        return f"{error_type}: {reason}"
    if error:
        return str(error)
    return response.reason_phrase


def _error_for_response(response: httpx.Response, operation: str) -> SearchClientError:
    """Map a failed Elasticsearch response to the client error taxonomy."""
    status = response.status_code
    message = f"Elasticsearch {operation} failed with HTTP {status}: {_error_reason(response)}"
    logger.warning(message)

    if status in (401, 403):
        return PermissionDeniedError(message)
    if status in (408, 429) or status >= 500:
        return BackendUnavailableError(message)
    if operation == "index" and status in (400, 409):
        return InvalidDocumentError(message)
    if operation == "search" and status in (400, 404):
        return InvalidQueryError(message)
    return SearchClientError(message)
