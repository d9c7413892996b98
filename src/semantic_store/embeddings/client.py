"""
EmbeddingClient - the only path from text to a stored or queried vector.

Wraps an injected EmbeddingProvider and owns the error mapping for that
single external call:

- empty text                           -> InvalidInput
- provider exception (timeout, quota)  -> EmbeddingUnavailable
- wrong size, NaN/inf, all-zero vector -> EmbeddingUnavailable

No retries and no caching happen here. One call in, at most one
outbound request.
"""

from __future__ import annotations

import logging

import numpy as np

from semantic_store.core.errors import EmbeddingUnavailable, InvalidInput
from semantic_store.core.protocols import EmbeddingProvider

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """Validated access to an embedding provider."""

    def __init__(self, provider: EmbeddingProvider, dimensions: int | None = None):
        """
        Args:
            provider: Embedding provider (injected, not created here)
            dimensions: Expected vector size D; defaults to the provider's
        """
        self._provider = provider
        self._dimensions = dimensions or provider.dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider(self) -> EmbeddingProvider:
        return self._provider

    def embed(self, text: str) -> np.ndarray:
        """Embed one text, returning a float32 vector of length D."""
        if not isinstance(text, str) or not text.strip():
            raise InvalidInput("text to embed must be a non-empty string")

        try:
            raw = self._provider.embed(text)
        except Exception as e:
            logger.warning(f"Embedding provider call failed: {type(e).__name__}: {e}")
            raise EmbeddingUnavailable(
                "Embedding provider call failed",
                details={"provider": type(self._provider).__name__},
                original_error=e,
            ) from e

        return self._check_vector(raw)

    def _check_vector(self, raw: object) -> np.ndarray:
        try:
            vector = np.asarray(raw, dtype=np.float32)
        except (TypeError, ValueError) as e:
            raise EmbeddingUnavailable(
                "Embedding provider returned a malformed response",
                original_error=e,
            ) from e

        if vector.ndim != 1 or vector.shape[0] != self._dimensions:
            raise EmbeddingUnavailable(
                "Embedding has unexpected dimensions",
                details={"expected": self._dimensions, "shape": list(vector.shape)},
            )
        if not np.all(np.isfinite(vector)):
            raise EmbeddingUnavailable("Embedding contains non-finite values")
        if not np.any(vector):
            raise EmbeddingUnavailable("Embedding is a zero vector")
        return vector
