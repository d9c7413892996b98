"""
Core protocols defining the contracts between components.

Every infrastructure piece is injected through one of these protocols:

    EmbeddingProvider  -> OpenAIEmbeddings (production), MockEmbeddings (testing)
    DocumentStore      -> PgVectorDocumentStore, InMemoryDocumentStore
    SimilarityIndex    -> PgVectorIndex (indexed), LinearScanIndex (reference)

The services never construct their collaborators. Tests hand them the
in-memory doubles; production wiring lives in semantic_store.services.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, Sequence, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from semantic_store.documents import Document, NewDocument


# ---------------------------------------------------------------------------
# EMBEDDING PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Contract for the remote text -> vector capability.

    Implementations:
    - OpenAIEmbeddings (production)
    - MockEmbeddings (testing)
    """

    @property
    def dimensions(self) -> int:
        """Dimensionality D of every vector this provider returns."""
        ...

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        ...


# ---------------------------------------------------------------------------
# DOCUMENT STORE PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class DocumentStore(Protocol):
    """
    Contract for append-only document persistence.

    Implementations:
    - PgVectorDocumentStore (production with PostgreSQL)
    - InMemoryDocumentStore (testing/development)
    """

    @property
    def dimensions(self) -> int:
        """Embedding dimensionality this store accepts."""
        ...

    def put(self, doc: NewDocument) -> Document:
        """Assign id and created_at, persist atomically, return the stored record."""
        ...

    def get_by_workspace(self, workspace_id: str) -> Sequence[Document]:
        """All documents of one workspace, oldest first."""
        ...

    def get_all(self) -> Sequence[Document]:
        """Every stored document, oldest first."""
        ...

    def count(self, workspace_id: str | None = None) -> int:
        """Number of stored documents, optionally scoped to a workspace."""
        ...


# ---------------------------------------------------------------------------
# SIMILARITY INDEX PROTOCOL
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScoredDocument:
    """A retrieved document with its cosine similarity to the query."""

    document: Document
    score: float

    def to_dict(self) -> dict[str, Any]:
        data = self.document.to_dict()
        data["score"] = self.score
        return data


@runtime_checkable
class SimilarityIndex(Protocol):
    """
    Contract for top-K ranking by cosine similarity.

    Results are ordered by score descending, ties broken by created_at
    ascending. A workspace filter is a hard partition applied before
    ranking.

    Implementations:
    - PgVectorIndex (HNSW index in PostgreSQL)
    - LinearScanIndex (reference, scores every candidate)
    """

    def search(
        self,
        query_vector: np.ndarray,
        workspace_id: str | None = None,
        limit: int = 5,
    ) -> list[ScoredDocument]:
        """Return at most `limit` documents most similar to `query_vector`."""
        ...
