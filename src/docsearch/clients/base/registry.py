"""Client Registry — Maps backend names to search client classes.

The registry is the central place to register client classes and build
client instances from a URL or from configuration. It holds classes only;
every ``create()`` returns a new, independent client.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from docsearch.clients.base.client import SearchClient
from docsearch.clients.base.exceptions import ConfigurationError

if TYPE_CHECKING:
    from docsearch.config.settings import Settings

logger = logging.getLogger(__name__)


class ClientNotFoundError(ConfigurationError):
    """Raised when a requested backend is not registered."""


class ClientRegistry:
    """Registry for search client classes.

    Example:
        >>> registry = ClientRegistry.with_builtins()
        >>> client = registry.create("elasticsearch", url="http://localhost:9200")
    """

    def __init__(self) -> None:
        self._classes: dict[str, type[SearchClient]] = {}

    @classmethod
    def with_builtins(cls) -> ClientRegistry:
        """Create a registry holding the built-in backends."""
        from docsearch.clients.elasticsearch.client import ElasticsearchClient
        from docsearch.clients.memory.client import InMemorySearchClient
        from docsearch.clients.opensearch.client import OpenSearchClient

        registry = cls()
        registry.register("elasticsearch", ElasticsearchClient)
        registry.register("opensearch", OpenSearchClient)
        registry.register("memory", InMemorySearchClient)
        return registry

    def register(self, name: str, client_class: type[SearchClient]) -> None:
        """Register a client class.

        Args:
            name: Unique backend name.
            client_class: The client class to register.
        """
        if name in self._classes:
            logger.warning("Overwriting existing client registration: %s", name)
        self._classes[name] = client_class
        logger.debug("Registered search client: %s", name)

    def create(self, name: str, **kwargs: Any) -> SearchClient:
        """Create a client instance. No network I/O happens here.

        Args:
            name: The registered backend name.
            **kwargs: Parameters passed to the client constructor.

        Returns:
            A new client instance.

        Raises:
            ClientNotFoundError: If no client is registered under this name.
        """
        if name not in self._classes:
            raise ClientNotFoundError(
                f"No search client registered with name '{name}'. "
                f"Available backends: {self.registered_clients}"
            )
        client = self._classes[name](**kwargs)
        logger.debug("Created %s client", name)
        return client

    @property
    def registered_clients(self) -> list[str]:
        """List all registered backend names."""
        return list(self._classes.keys())


def new_client(url: str, *, backend: str = "elasticsearch", **kwargs: Any) -> SearchClient:
    """Create a ready-to-use client for the backend at ``url``.

    The connection is opened lazily on the first operation.

    Args:
        url: Backend address, e.g. ``"http://localhost:9200"``.
        backend: Registered backend name.
        **kwargs: Additional client options (``timeout``, ``refresh``, ...).

    Returns:
        A new search client.
    """
    return ClientRegistry.with_builtins().create(backend, url=url, **kwargs)


def create_client(settings: Settings, registry: ClientRegistry | None = None) -> SearchClient:
    """Build the configured search client.

    Args:
        settings: Application settings; ``settings.backend`` selects the client.
        registry: Registry to resolve the backend name. Defaults to the built-ins.

    Returns:
        A new search client.
    """
    registry = registry or ClientRegistry.with_builtins()
    backend = settings.backend
    kwargs: dict[str, Any] = {"url": backend.url, "timeout": backend.timeout}
    if backend.refresh is not None:
        kwargs["refresh"] = backend.refresh
    if not backend.verify_certs:
        kwargs["verify_certs"] = False
    kwargs.update(backend.extra)
    return registry.create(backend.name, **kwargs)
