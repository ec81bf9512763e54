"""OpenSearch client — Document search for OpenSearch (v2+).

OpenSearch is an AWS-maintained fork of Elasticsearch with a compatible
query DSL and API surface. This client uses ``opensearch-py`` (async).

Install the optional dependency::

    pip install docsearch[opensearch]
    # or: pip install "opensearch-py[async]"
"""

from __future__ import annotations

import logging
from typing import Any

from docsearch.clients.base.client import Document, Query, SearchClient
from docsearch.clients.base.exceptions import (
    BackendUnavailableError,
    ConfigurationError,
    InvalidArgumentError,
    InvalidDocumentError,
    InvalidQueryError,
    PermissionDeniedError,
    SearchClientError,
)
from docsearch.clients.elasticsearch.client import REFRESH_POLICIES, sources_from_response

logger = logging.getLogger(__name__)


class OpenSearchClient(SearchClient):
    """Search client for OpenSearch (v2+).

    The ``AsyncOpenSearch`` client is created on first use.

    Args:
        url: OpenSearch node URL.
        timeout: Default per-operation deadline in seconds.
        refresh: Optional refresh policy sent with writes.
        verify_certs: Whether to verify TLS certificates.
        **kwargs: Additional keyword arguments forwarded to ``AsyncOpenSearch``.
    """

    def __init__(
        self,
        url: str = "http://localhost:9200",
        *,
        timeout: float | None = 30.0,
        refresh: str | None = None,
        verify_certs: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(timeout=timeout)
        if not url:
            raise InvalidArgumentError("url must be a non-empty string")
        if refresh is not None and refresh not in REFRESH_POLICIES:
            raise InvalidArgumentError(f"refresh must be one of {REFRESH_POLICIES}, got {refresh!r}")
        self._url = url.rstrip("/")
        self._refresh = refresh
        self._verify_certs = verify_certs
        self._extra_kwargs = kwargs
        self._client: Any = None

    @property
    def name(self) -> str:
        return "opensearch"

    @property
    def url(self) -> str:
        """Backend node URL."""
        return self._url

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                from opensearchpy import AsyncOpenSearch
            except ImportError as e:
                raise ConfigurationError(
                    "opensearch-py with its async transport is required.  "
                    "Install with: pip install docsearch[opensearch] (or opensearch-py[async])"
                ) from e

            client_kwargs: dict[str, Any] = {
                "hosts": [self._url],
                "verify_certs": self._verify_certs,
                "ssl_show_warn": False,
                # Deadlines are enforced per call by the base class.
                "timeout": None,
            }
            client_kwargs.update(self._extra_kwargs)
            self._client = AsyncOpenSearch(**client_kwargs)
            logger.info("Opened OpenSearch client for %s", self._url)
        return self._client

    async def close(self) -> None:
        """Close the OpenSearch client."""
        if self._client:
            client, self._client = self._client, None
            await client.close()

    # ── Operations ───────────────────────────────────────────────────────

    async def _index_document(self, index: str, doc_id: str, body: Document) -> None:
        kwargs: dict[str, Any] = {"index": index, "id": doc_id, "body": body}
        if self._refresh:
            kwargs["refresh"] = self._refresh
        client = self._get_client()
        try:
            await client.index(**kwargs)
        except Exception as e:
            raise _translate_error(e, "index") from e

    async def _execute_search(self, index: str, query: Query) -> list[Document]:
        client = self._get_client()
        try:
            response = await client.search(index=index, body=query)
        except Exception as e:
            raise _translate_error(e, "search") from e

        return sources_from_response(response, "OpenSearch")

    async def _delete_document(self, index: str, doc_id: str) -> None:
        kwargs: dict[str, Any] = {"index": index, "id": doc_id}
        if self._refresh:
            kwargs["refresh"] = self._refresh
        client = self._get_client()
        from opensearchpy.exceptions import NotFoundError

        try:
            await client.delete(**kwargs)
        except NotFoundError:
            logger.debug("Document %s/%s already absent", index, doc_id)
        except Exception as e:
            raise _translate_error(e, "delete") from e


def _translate_error(exc: Exception, operation: str) -> SearchClientError:
    """Map an ``opensearchpy`` exception to the client error taxonomy."""
    from opensearchpy import exceptions as os_exc

    message = f"OpenSearch {operation} failed: {exc}"
    logger.warning(message)

    if isinstance(exc, (os_exc.AuthenticationException, os_exc.AuthorizationException)):
        return PermissionDeniedError(message)
    # ConnectionError (and ConnectionTimeout) derive from TransportError.
    if isinstance(exc, os_exc.ConnectionError):
        return BackendUnavailableError(message)
    if operation == "index" and isinstance(exc, (os_exc.RequestError, os_exc.ConflictError)):
        return InvalidDocumentError(message)
    if operation == "search" and isinstance(exc, (os_exc.RequestError, os_exc.NotFoundError)):
        return InvalidQueryError(message)
    if isinstance(exc, os_exc.TransportError):
        status = exc.status_code
        if isinstance(status, int) and (status in (408, 429) or status >= 500):
            return BackendUnavailableError(message)
    return SearchClientError(message)
