"""Tests for the in-memory search client."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest
from pydantic import BaseModel

from docsearch.clients.base.exceptions import (
    DeadlineExceededError,
    InvalidArgumentError,
    InvalidDocumentError,
    InvalidQueryError,
)
from docsearch.clients.memory.client import InMemorySearchClient
from docsearch.query import build_match_query, build_term_query


def _titles(results: list[dict[str, Any]]) -> list[str]:
    return [doc["title"] for doc in results]


# ── Properties ───────────────────────────────────────────────────────────────


class TestInMemoryProperties:
    def test_name(self, memory_client: InMemorySearchClient) -> None:
        assert memory_client.name == "memory"

    def test_starts_empty(self, memory_client: InMemorySearchClient) -> None:
        assert memory_client.indices == []
        assert memory_client.count("articles") == 0

    def test_negative_latency_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            InMemorySearchClient(latency=-1)

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            InMemorySearchClient(timeout=0)


# ── Index ────────────────────────────────────────────────────────────────────


class TestInMemoryIndex:
    async def test_index_mapping(self, memory_client: InMemorySearchClient) -> None:
        await memory_client.index("test-index", "doc-1", {"title": "Test Document", "author": "Test Author"})
        assert memory_client.indices == ["test-index"]
        assert memory_client.count("test-index") == 1

    async def test_index_dataclass(self, memory_client: InMemorySearchClient) -> None:
        @dataclass
        class Article:
            title: str
            content: str
            tags: list[str] = field(default_factory=list)

        await memory_client.index("articles", "article-1", Article("Go Testing", "Testing in Go", ["go"]))
        results = await memory_client.search("articles", build_term_query("tags", "go"))
        assert results == [{"title": "Go Testing", "content": "Testing in Go", "tags": ["go"]}]

    async def test_index_pydantic_model(self, memory_client: InMemorySearchClient) -> None:
        class Article(BaseModel):
            title: str
            views: int

        await memory_client.index("articles", "a", Article(title="Pydantic", views=3))
        results = await memory_client.search("articles", build_term_query("views", 3))
        assert _titles(results) == ["Pydantic"]

    async def test_overwrite_replaces_document(self, memory_client: InMemorySearchClient) -> None:
        await memory_client.index("articles", "a", {"title": "first"})
        await memory_client.index("articles", "a", {"title": "second"})
        assert memory_client.count("articles") == 1
        results = await memory_client.search("articles", {})
        assert _titles(results) == ["second"]

    async def test_caller_document_is_copied(self, memory_client: InMemorySearchClient) -> None:
        document = {"title": "original", "tags": ["a"]}
        await memory_client.index("articles", "a", document)
        document["tags"].append("b")
        results = await memory_client.search("articles", {})
        assert results[0]["tags"] == ["a"]

    async def test_results_are_copies(self, populated_client: InMemorySearchClient) -> None:
        results = await populated_client.search("articles", build_term_query("status", "draft"))
        results[0]["title"] = "mutated"
        again = await populated_client.search("articles", build_term_query("status", "draft"))
        assert again[0]["title"] == "Elasticsearch tutorial"

    @pytest.mark.parametrize(("index", "doc_id"), [("", "doc-1"), ("articles", ""), ("articles", None)])
    async def test_empty_names_rejected(self, memory_client: InMemorySearchClient, index: Any, doc_id: Any) -> None:
        with pytest.raises(InvalidArgumentError):
            await memory_client.index(index, doc_id, {"title": "x"})
        assert memory_client.indices == []

    async def test_unsupported_document_rejected(self, memory_client: InMemorySearchClient) -> None:
        with pytest.raises(InvalidDocumentError):
            await memory_client.index("articles", "a", ["not", "a", "mapping"])

    async def test_unserializable_document_rejected(self, memory_client: InMemorySearchClient) -> None:
        with pytest.raises(InvalidDocumentError, match="JSON"):
            await memory_client.index("articles", "a", {"handle": object()})

    async def test_concurrent_index_with_distinct_ids(self) -> None:
        client = InMemorySearchClient(latency=0.001)
        await asyncio.gather(*(client.index("bulk", f"doc-{i}", {"n": i}) for i in range(50)))
        assert client.count("bulk") == 50


# ── Search ───────────────────────────────────────────────────────────────────


class TestInMemorySearch:
    async def test_match_query_finds_document(self, populated_client: InMemorySearchClient) -> None:
        results = await populated_client.search("articles", build_match_query("title", "test"))
        assert _titles(results) == ["test document"]

    async def test_match_is_case_insensitive(self, populated_client: InMemorySearchClient) -> None:
        results = await populated_client.search("articles", build_match_query("title", "ELASTICSEARCH"))
        assert _titles(results) == ["Elasticsearch tutorial"]

    async def test_match_ranks_by_matched_tokens(self, populated_client: InMemorySearchClient) -> None:
        results = await populated_client.search("articles", build_match_query("content", "testing in go"))
        assert _titles(results)[0] == "Go testing in practice"

    async def test_match_and_operator(self, populated_client: InMemorySearchClient) -> None:
        query = {"query": {"match": {"title": {"query": "test tutorial", "operator": "and"}}}}
        assert await populated_client.search("articles", query) == []

    async def test_term_query_exact_value(self, populated_client: InMemorySearchClient) -> None:
        results = await populated_client.search("articles", build_term_query("status", "published"))
        assert _titles(results) == ["test document", "Go testing in practice"]

    async def test_term_query_is_not_analyzed(self, populated_client: InMemorySearchClient) -> None:
        assert await populated_client.search("articles", build_term_query("status", "Published")) == []

    async def test_term_on_list_field(self, populated_client: InMemorySearchClient) -> None:
        results = await populated_client.search("articles", build_term_query("tags", "testing"))
        assert len(results) == 2

    async def test_dotted_field(self, populated_client: InMemorySearchClient) -> None:
        results = await populated_client.search("articles", build_term_query("author.team", "search"))
        assert _titles(results) == ["Elasticsearch tutorial"]

    async def test_no_match_returns_empty_list(self, populated_client: InMemorySearchClient) -> None:
        results = await populated_client.search("articles", build_match_query("title", "xyzzyspoon999"))
        assert results == []

    async def test_empty_query_matches_all(self, populated_client: InMemorySearchClient) -> None:
        assert len(await populated_client.search("articles", {})) == 3

    async def test_bool_query(self, populated_client: InMemorySearchClient) -> None:
        query = {
            "query": {
                "bool": {
                    "must": [
                        {"match": {"title": "test"}},
                        {"term": {"status": "published"}},
                    ],
                },
            },
        }
        results = await populated_client.search("articles", query)
        assert _titles(results) == ["test document"]

    async def test_bool_must_not_and_should(self, populated_client: InMemorySearchClient) -> None:
        query = {
            "query": {
                "bool": {
                    "should": [{"term": {"tags": "go"}}, {"term": {"tags": "tutorial"}}],
                    "must_not": {"term": {"status": "draft"}},
                },
            },
        }
        results = await populated_client.search("articles", query)
        assert _titles(results) == ["Go testing in practice"]

    async def test_size_and_from(self, populated_client: InMemorySearchClient) -> None:
        results = await populated_client.search("articles", {"size": 1, "from": 1})
        assert _titles(results) == ["Elasticsearch tutorial"]

    async def test_missing_index_raises(self, memory_client: InMemorySearchClient) -> None:
        with pytest.raises(InvalidQueryError, match="index_not_found"):
            await memory_client.search("missing", build_match_query("title", "test"))

    @pytest.mark.parametrize(
        "query",
        [
            {"query": {"fuzzy": {"title": "tset"}}},
            {"query": {"match": {"title": "a", "content": "b"}}},
            {"query": {"term": {"status": {"no_value": "x"}}}},
            {"query": {"bool": {"unknown": []}}},
            {"aggs": {}},
            {"size": -1},
        ],
    )
    async def test_invalid_queries_rejected(
        self, populated_client: InMemorySearchClient, query: dict[str, Any]
    ) -> None:
        with pytest.raises(InvalidQueryError):
            await populated_client.search("articles", query)

    async def test_non_mapping_query_rejected(self, populated_client: InMemorySearchClient) -> None:
        with pytest.raises(InvalidArgumentError):
            await populated_client.search("articles", "title:test")  # type: ignore[arg-type]


# ── Delete ───────────────────────────────────────────────────────────────────


class TestInMemoryDelete:
    async def test_delete_removes_document(self, populated_client: InMemorySearchClient) -> None:
        await populated_client.delete("articles", "article-1")
        assert populated_client.count("articles") == 2
        assert await populated_client.search("articles", build_match_query("title", "test")) == []

    async def test_delete_twice_is_not_an_error(self, populated_client: InMemorySearchClient) -> None:
        await populated_client.delete("articles", "article-1")
        await populated_client.delete("articles", "article-1")

    async def test_delete_from_missing_index(self, memory_client: InMemorySearchClient) -> None:
        await memory_client.delete("missing", "doc-1")

    async def test_delete_validates_arguments(self, memory_client: InMemorySearchClient) -> None:
        with pytest.raises(InvalidArgumentError):
            await memory_client.delete("articles", "")


# ── Deadlines and cancellation ───────────────────────────────────────────────


class TestInMemoryDeadlines:
    async def test_call_timeout_raises_deadline_exceeded(self) -> None:
        client = InMemorySearchClient(latency=5.0)
        with pytest.raises(DeadlineExceededError):
            await client.index("articles", "a", {"title": "slow"}, timeout=0.05)
        assert client.count("articles") == 0

    async def test_client_default_timeout(self) -> None:
        client = InMemorySearchClient(latency=5.0, timeout=0.05)
        with pytest.raises(DeadlineExceededError):
            await client.delete("articles", "a")

    async def test_invalid_call_timeout(self, memory_client: InMemorySearchClient) -> None:
        with pytest.raises(InvalidArgumentError):
            await memory_client.search("articles", {}, timeout=-1)

    async def test_cancellation_propagates_promptly(self) -> None:
        client = InMemorySearchClient(latency=30.0)
        task = asyncio.create_task(client.search("articles", build_match_query("title", "test")))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await asyncio.wait_for(task, timeout=1.0)
