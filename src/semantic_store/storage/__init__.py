"""
Storage module - document persistence and similarity search.

This module provides:
- PgVectorDocumentStore / InMemoryDocumentStore: append-only persistence
- PgVectorIndex / LinearScanIndex: top-K cosine ranking
- get_document_store(), get_similarity_index(): factories
"""

from semantic_store.storage.store import (
    PGVECTOR_AVAILABLE,
    PgVectorDocumentStore,
    InMemoryDocumentStore,
    get_document_store,
)
from semantic_store.storage.index import (
    LinearScanIndex,
    PgVectorIndex,
    cosine_similarity,
    rank_candidates,
    get_similarity_index,
)

__all__ = [
    "PGVECTOR_AVAILABLE",
    # Stores
    "PgVectorDocumentStore",
    "InMemoryDocumentStore",
    "get_document_store",
    # Indexes
    "LinearScanIndex",
    "PgVectorIndex",
    "cosine_similarity",
    "rank_candidates",
    "get_similarity_index",
]
