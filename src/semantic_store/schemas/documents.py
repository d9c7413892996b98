"""
Boundary schemas for ingestion and search.

These Pydantic models are the contract with whatever transport wraps the
services (CLI today, HTTP elsewhere). Core code works with Document and
ScoredDocument; these models exist to parse requests and shape responses.

Ingestion requests accept both snake_case keys and the camelCase keys the
web client sends (`workspaceId`, `documentType`).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from semantic_store.core.protocols import ScoredDocument
from semantic_store.documents import Document, DocumentType

MetadataValue = Union[str, int, float, bool, None]


class IngestRequest(BaseModel):
    """
    One item to ingest.

    `content` and `workspace_id` are optional here on purpose: batch
    ingestion skips items that lack them instead of rejecting the batch.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    content: str | None = None
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)
    workspace_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("workspace_id", "workspaceId"),
    )
    document_type: DocumentType = Field(
        default=DocumentType.OTHER,
        validation_alias=AliasChoices("document_type", "documentType"),
    )

    @field_validator("metadata", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("document_type", mode="before")
    @classmethod
    def _parse_type(cls, value: Any) -> DocumentType:
        return DocumentType.parse(value)

    @property
    def is_complete(self) -> bool:
        """True when both content and workspace_id are present."""
        return bool(
            self.content and self.content.strip()
            and self.workspace_id and self.workspace_id.strip()
        )


class StoredDocument(BaseModel):
    """A persisted document as returned to callers (embedding omitted)."""

    id: str
    content: str
    metadata: dict[str, MetadataValue]
    workspace_id: str
    document_type: DocumentType
    created_at: datetime

    @classmethod
    def from_document(cls, doc: Document) -> "StoredDocument":
        return cls(
            id=doc.id,
            content=doc.content,
            metadata=dict(doc.metadata),
            workspace_id=doc.workspace_id,
            document_type=doc.document_type,
            created_at=doc.created_at,
        )


class SearchHit(StoredDocument):
    """A stored document plus its similarity to the query."""

    score: float

    @classmethod
    def from_scored(cls, hit: ScoredDocument) -> "SearchHit":
        base = StoredDocument.from_document(hit.document)
        return cls(**base.model_dump(), score=hit.score)


class SearchResponse(BaseModel):
    """Ranked search results."""

    success: bool = True
    count: int
    data: list[SearchHit]

    @classmethod
    def from_results(cls, results: Iterable[ScoredDocument]) -> "SearchResponse":
        hits = [SearchHit.from_scored(r) for r in results]
        return cls(count=len(hits), data=hits)


class FailureEntry(BaseModel):
    """Why one batch item was not stored."""

    index: int
    error_type: str
    message: str


class BatchReport(BaseModel):
    """Outcome of a batch ingestion: stored documents plus what was left out."""

    success: bool = True
    count: int
    data: list[StoredDocument]
    skipped: list[int] = Field(default_factory=list)
    failed: list[FailureEntry] = Field(default_factory=list)
