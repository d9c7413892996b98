"""
semantic_store - workspace-scoped semantic document store.

Turns text (insights, recommendations, chat turns, summaries) into
embeddings, persists them per workspace, and answers nearest-neighbour
queries ranked by cosine similarity.

ARCHITECTURE:
-------------
1. Protocols define the contracts (core.protocols)
2. Production implementations (OpenAIEmbeddings, PgVectorDocumentStore, PgVectorIndex)
3. Test doubles (MockEmbeddings, InMemoryDocumentStore, LinearScanIndex)
4. Factories and build_services() for wiring
"""

from semantic_store.core import (
    SemanticStoreError,
    InvalidInput,
    EmbeddingUnavailable,
    PersistenceError,
    EmbeddingProvider,
    DocumentStore,
    SimilarityIndex,
    ScoredDocument,
)
from semantic_store.documents import Document, DocumentType, NewDocument
from semantic_store.embeddings import EmbeddingClient, MockEmbeddings, OpenAIEmbeddings
from semantic_store.storage import (
    InMemoryDocumentStore,
    PgVectorDocumentStore,
    LinearScanIndex,
    PgVectorIndex,
)
from semantic_store.services import (
    BatchResult,
    IngestionService,
    RetrievalService,
    SemanticStoreServices,
    build_services,
)

__version__ = "0.1.0"

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
    # Model
    "Document",
    "DocumentType",
    "NewDocument",
    "ScoredDocument",
    # Implementations
    "EmbeddingClient",
    "MockEmbeddings",
    "OpenAIEmbeddings",
    "InMemoryDocumentStore",
    "PgVectorDocumentStore",
    "LinearScanIndex",
    "PgVectorIndex",
    # Services
    "BatchResult",
    "IngestionService",
    "RetrievalService",
    "SemanticStoreServices",
    "build_services",
]
