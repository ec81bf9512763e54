"""Document serialization — Normalize caller documents to JSON-ready mappings.

Callers may index plain mappings, pydantic models, or dataclass instances.
Whatever goes in, the backend receives a fresh ``dict`` that shares no
mutable state with the caller's object.
"""

from __future__ import annotations

import copy
import dataclasses
import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from docsearch.clients.base.exceptions import InvalidDocumentError


def to_document_body(document: Any) -> dict[str, Any]:
    """Convert a caller document into a JSON-serializable ``dict``.

    Args:
        document: A mapping, pydantic model, or dataclass instance.

    Returns:
        A deep copy of the document as a plain ``dict``.

    Raises:
        InvalidDocumentError: If the document is of an unsupported type or
            contains values that cannot be encoded as JSON.
    """
    if isinstance(document, BaseModel):
        body: Any = document.model_dump(mode="json")
    elif dataclasses.is_dataclass(document) and not isinstance(document, type):
        body = dataclasses.asdict(document)
    elif isinstance(document, Mapping):
        body = copy.deepcopy(dict(document))
    else:
        raise InvalidDocumentError(
            f"Unsupported document type {type(document).__name__}; "
            "expected a mapping, pydantic model or dataclass instance."
        )

    for key in body:
        if not isinstance(key, str):
            raise InvalidDocumentError(f"Document field names must be strings, got {key!r}")

    try:
        json.dumps(body)
    except (TypeError, ValueError) as e:
        raise InvalidDocumentError(f"Document is not JSON-serializable: {e}") from e
    return body
