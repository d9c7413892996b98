"""Request/response schemas for the ingestion and retrieval services."""

from semantic_store.schemas.documents import (
    IngestRequest,
    StoredDocument,
    SearchHit,
    SearchResponse,
    FailureEntry,
    BatchReport,
)

__all__ = [
    "IngestRequest",
    "StoredDocument",
    "SearchHit",
    "SearchResponse",
    "FailureEntry",
    "BatchReport",
]
