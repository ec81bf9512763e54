from docsearch.clients.memory.client import InMemorySearchClient

__all__ = ["InMemorySearchClient"]
