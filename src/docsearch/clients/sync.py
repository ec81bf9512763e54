"""Synchronous facade — Blocking access to any async search client.

Usage::

    client = SyncSearchClient.from_url("http://localhost:9200")
    client.index("articles", "a-1", {"title": "test document"})
    hits = client.search("articles", build_match_query("title", "test"))
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from collections.abc import Callable, Coroutine, Mapping
from typing import Any, TypeVar

from docsearch.clients.base.client import Document, SearchClient
from docsearch.clients.base.registry import new_client

_T = TypeVar("_T")


class SyncSearchClient:
    """Blocking wrapper around an async ``SearchClient``.

    Each call obtains a client from ``factory``, runs the operation to
    completion on a private event loop and closes the client again, so no
    transport state outlives a call. Closed clients reopen on next use, which
    lets the factory hand out the same instance every time.

    Args:
        factory: Zero-argument callable returning a ``SearchClient``.
    """

    def __init__(self, factory: Callable[[], SearchClient]) -> None:
        self._factory = factory

    @classmethod
    def from_url(cls, url: str, *, backend: str = "elasticsearch", **kwargs: Any) -> SyncSearchClient:
        """Build a facade around one ``backend`` client shared by every call."""
        client = new_client(url, backend=backend, **kwargs)
        return cls(lambda: client)

    def _run(self, coro: Coroutine[Any, Any, _T]) -> _T:
        """Run an async coroutine synchronously."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop and loop.is_running():
            # Already inside an event loop (e.g. Jupyter): run on a worker thread.
            with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
                return pool.submit(asyncio.run, coro).result()
        return asyncio.run(coro)

    def index(self, index: str, doc_id: str, document: Any, *, timeout: float | None = None) -> None:
        """Store or overwrite a document."""

        async def _call() -> None:
            async with self._factory() as c:
                await c.index(index, doc_id, document, timeout=timeout)

        self._run(_call())

    def search(self, index: str, query: Mapping[str, Any], *, timeout: float | None = None) -> list[Document]:
        """Execute a query and return matching documents."""

        async def _call() -> list[Document]:
            async with self._factory() as c:
                return await c.search(index, query, timeout=timeout)

        return self._run(_call())

    def delete(self, index: str, doc_id: str, *, timeout: float | None = None) -> None:
        """Remove a document; missing documents are not an error."""

        async def _call() -> None:
            async with self._factory() as c:
                await c.delete(index, doc_id, timeout=timeout)

        self._run(_call())
