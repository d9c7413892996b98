"""
Embeddings module - text embedding generation.

1. Protocol (EmbeddingProvider) defines the interface
2. Production implementation (OpenAIEmbeddings)
3. Test double (MockEmbeddings) for fast testing
4. Factory function (get_embedding_provider)
5. EmbeddingClient validates input/output and maps provider failures
"""

from semantic_store.core.protocols import EmbeddingProvider
from semantic_store.embeddings.client import EmbeddingClient
from semantic_store.embeddings.providers import (
    DEFAULT_EMBEDDING_MODEL,
    MODEL_DIMENSIONS,
    OpenAIEmbeddings,
    MockEmbeddings,
    get_embedding_provider,
)

__all__ = [
    "EmbeddingProvider",
    "EmbeddingClient",
    "DEFAULT_EMBEDDING_MODEL",
    "MODEL_DIMENSIONS",
    "OpenAIEmbeddings",
    "MockEmbeddings",
    "get_embedding_provider",
]
