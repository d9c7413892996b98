"""
Error taxonomy for the semantic document store.

Three kinds, one decision tree for callers:

- InvalidInput: caller-supplied data breaks a precondition. Never retry.
- EmbeddingUnavailable: the embedding provider failed or timed out.
  Transient; callers may retry with backoff.
- PersistenceError: the document store failed to read or write.

Timeouts are not a separate kind. An embedding timeout is an
EmbeddingUnavailable, a store timeout is a PersistenceError.

Usage:
------
    from semantic_store.core.errors import EmbeddingUnavailable, InvalidInput

    try:
        hits = retrieval.search_text(query, workspace_id="ws1")
    except InvalidInput:
        ...  # fix the request
    except EmbeddingUnavailable as e:
        logger.warning(f"embedding provider down: {e.original_error}")
"""

from __future__ import annotations

from typing import Any


class SemanticStoreError(Exception):
    """
    Base exception for every error raised by this package.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error (optional)
        original_error: The underlying exception that caused this error (optional)
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def __str__(self) -> str:
        base = self.message
        if self.details:
            base += f" | Details: {self.details}"
        if self.original_error:
            base += f" | Caused by: {type(self.original_error).__name__}: {self.original_error}"
        return base


class InvalidInput(SemanticStoreError, ValueError):
    """Caller-supplied data violates a precondition."""


class EmbeddingUnavailable(SemanticStoreError):
    """The embedding provider failed, timed out, or returned a malformed vector."""


class PersistenceError(SemanticStoreError):
    """The document store failed to write or read."""
