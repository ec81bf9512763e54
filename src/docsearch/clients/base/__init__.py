"""Base client interface — Abstract contract for search backend clients."""

from docsearch.clients.base.client import SearchClient
from docsearch.clients.base.registry import ClientRegistry

__all__ = ["ClientRegistry", "SearchClient"]
