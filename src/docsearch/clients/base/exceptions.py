"""Search client exceptions.

Every backend failure surfaces as one of these. Clients never retry; callers
own their retry and backoff policy.
"""


class SearchClientError(Exception):
    """Base exception for search client errors."""


class InvalidArgumentError(SearchClientError, ValueError):
    """Raised for malformed input, before any backend I/O happens."""


class InvalidQueryError(SearchClientError):
    """Raised when the backend rejects a query."""


class InvalidDocumentError(SearchClientError):
    """Raised when a document cannot be serialized or the backend rejects it."""


class BackendUnavailableError(SearchClientError):
    """Raised when the search backend cannot be reached or is overloaded."""


class PermissionDeniedError(SearchClientError):
    """Raised when the backend refuses the request (HTTP 401/403)."""


class DeadlineExceededError(SearchClientError):
    """Raised when an operation does not finish within its deadline."""


class ConfigurationError(SearchClientError):
    """Raised when client configuration is invalid or a backend library is missing."""
