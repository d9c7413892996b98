"""
Core module - shared protocols and errors for the entire package.

USAGE:
------
from semantic_store.core import DocumentStore, EmbeddingProvider, InvalidInput
"""

from semantic_store.core.errors import (
    SemanticStoreError,
    InvalidInput,
    EmbeddingUnavailable,
    PersistenceError,
)
from semantic_store.core.protocols import (
    EmbeddingProvider,
    DocumentStore,
    SimilarityIndex,
    ScoredDocument,
)

__all__ = [
    # Errors
    "SemanticStoreError",
    "InvalidInput",
    "EmbeddingUnavailable",
    "PersistenceError",
    # Protocols
    "EmbeddingProvider",
    "DocumentStore",
    "SimilarityIndex",
    # Data classes
    "ScoredDocument",
]
