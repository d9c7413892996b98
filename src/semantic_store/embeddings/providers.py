"""
Embedding providers - Single Responsibility: turn text into vectors.

It has ONE job: call something that maps text -> vector. No validation,
no error mapping, no database logic. That belongs to EmbeddingClient.

Pattern: Protocol -> Production impl -> Test double -> Factory
"""

from __future__ import annotations

import hashlib
import os
import re

import numpy as np
from openai import OpenAI

from semantic_store.core.protocols import EmbeddingProvider

DEFAULT_EMBEDDING_MODEL = "text-embedding-ada-002"

MODEL_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbeddings:
    """
    OpenAI-based embedding provider.

    Uses text-embedding-ada-002 by default (1536 dimensions, cosine
    similarity). The SDK client is created with an explicit timeout and
    retries disabled; retry policy belongs to the caller.
    """

    def __init__(
        self,
        model: str = DEFAULT_EMBEDDING_MODEL,
        api_key: str | None = None,
        timeout: float = 30.0,
        client: OpenAI | None = None,
    ):
        self.model = model
        self._client = client or OpenAI(
            api_key=api_key or os.environ.get("OPENAI_API_KEY"),
            timeout=timeout,
            max_retries=0,
        )

    @property
    def dimensions(self) -> int:
        """Return embedding dimensions for the model."""
        return MODEL_DIMENSIONS.get(self.model, 1536)

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        response = self._client.embeddings.create(
            input=text,
            model=self.model,
        )
        return np.array(response.data[0].embedding, dtype=np.float32)


_TOKEN_RE = re.compile(r"[a-z0-9]+")


class MockEmbeddings:
    """
    Mock embedding provider for testing without API calls.

    Hashed bag of words plus character trigrams, L2-normalised. Texts that
    share words (or word stems) land close together, identical texts get
    identical vectors, and the output is stable across processes.
    NOT for production use - only for testing/development.
    """

    def __init__(self, dimensions: int = 1536):
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _features(self, text: str) -> list[str]:
        tokens = _TOKEN_RE.findall(text.lower()) or [text.strip().lower()]
        features = []
        for token in tokens:
            features.append(f"w:{token}")
            features.extend(f"c:{token[i:i + 3]}" for i in range(len(token) - 2))
        return features

    def embed(self, text: str) -> np.ndarray:
        """Generate deterministic pseudo-embedding from hashed features."""
        vector = np.zeros(self._dimensions, dtype=np.float32)
        for feature in self._features(text):
            digest = hashlib.sha256(feature.encode("utf-8")).digest()
            bucket = int.from_bytes(digest[:4], "big") % self._dimensions
            sign = 1.0 if digest[4] & 1 else -1.0
            vector[bucket] += sign

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector


def get_embedding_provider(
    use_mock: bool = False,
    model: str = DEFAULT_EMBEDDING_MODEL,
    timeout: float = 30.0,
    dimensions: int | None = None,
) -> EmbeddingProvider:
    """
    Factory function to get the appropriate embedding provider.

    Args:
        use_mock: If True, return MockEmbeddings (for testing)
        model: OpenAI embedding model name
        timeout: Per-request timeout in seconds
        dimensions: Vector size for the mock provider
    """
    if use_mock:
        return MockEmbeddings(dimensions or MODEL_DIMENSIONS.get(model, 1536))
    return OpenAIEmbeddings(model=model, timeout=timeout)
