"""Search client layer — Pluggable clients for document search backends.

Built-in clients:
  - elasticsearch: Elasticsearch REST API over ``httpx``
  - opensearch: OpenSearch v2+ via ``opensearch-py`` (optional extra)
  - memory: In-process backend for tests and prototyping

Implement ``SearchClient`` to connect your own search backend.
"""
