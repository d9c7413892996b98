"""
Services module - public entry points for ingestion and retrieval.

build_services() wires the configured provider, store and index:

    services = build_services()
    services.ingestion.store_one("Revenue grew 12% YoY", {}, "ws1", "insight")
    hits = services.retrieval.search_text("revenue growth", "ws1", limit=1)
"""

from __future__ import annotations

from dataclasses import dataclass

from semantic_store.config import StoreConfig, get_config
from semantic_store.core.protocols import DocumentStore, EmbeddingProvider, SimilarityIndex
from semantic_store.embeddings import EmbeddingClient, get_embedding_provider
from semantic_store.observability.config import get_tracing_config
from semantic_store.services.ingestion import BatchFailure, BatchResult, IngestionService
from semantic_store.services.retrieval import DEFAULT_LIMIT, RetrievalService
from semantic_store.storage import get_document_store, get_similarity_index


@dataclass
class SemanticStoreServices:
    """The wired-up components, sharing one client and one store."""

    config: StoreConfig
    embeddings: EmbeddingClient
    store: DocumentStore
    index: SimilarityIndex
    ingestion: IngestionService
    retrieval: RetrievalService

    def close(self) -> None:
        close = getattr(self.store, "close", None)
        if close is not None:
            close()


def build_services(
    config: StoreConfig | None = None,
    provider: EmbeddingProvider | None = None,
    store: DocumentStore | None = None,
    index: SimilarityIndex | None = None,
) -> SemanticStoreServices:
    """
    Wire the services from configuration.

    Any collaborator can be passed in to override the configured one;
    tests pass MockEmbeddings and an InMemoryDocumentStore.
    """
    if config is None:
        config = get_config()
    if provider is None:
        provider = get_embedding_provider(
            use_mock=config.use_mock_embeddings,
            model=config.embedding_model,
            timeout=config.embedding_timeout_s,
            dimensions=config.embedding_dim,
        )
    embeddings = EmbeddingClient(provider, dimensions=config.embedding_dim)
    if store is None:
        store = get_document_store(config)
    if index is None:
        index = get_similarity_index(store)
    capture = get_tracing_config().capture_content

    return SemanticStoreServices(
        config=config,
        embeddings=embeddings,
        store=store,
        index=index,
        ingestion=IngestionService(embeddings, store, capture_content=capture),
        retrieval=RetrievalService(embeddings, index, capture_content=capture),
    )


__all__ = [
    "SemanticStoreServices",
    "build_services",
    "IngestionService",
    "BatchResult",
    "BatchFailure",
    "RetrievalService",
    "DEFAULT_LIMIT",
]
