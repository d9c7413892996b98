"""
Ingestion service - embed text and persist it as a workspace document.

Each call is self-contained: validate -> embed -> put. Nothing is kept
between calls.

store_one propagates InvalidInput, EmbeddingUnavailable and
PersistenceError unchanged.

store_batch is skip-and-continue:
- items missing content or workspace_id are skipped silently (their index
  is recorded in BatchResult.skipped, nothing is raised)
- items that fail validation, embedding or persistence are collected in
  BatchResult.failures and the batch moves on
- stored documents come back in input order

Pass fail_fast=True to abort on the first failure instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping

from pydantic import ValidationError

from semantic_store.core.errors import InvalidInput, SemanticStoreError
from semantic_store.core.protocols import DocumentStore
from semantic_store.documents import Document, DocumentType, NewDocument, validate_metadata
from semantic_store.embeddings.client import EmbeddingClient
from semantic_store.observability.attributes import (
    STORE_CONTENT,
    STORE_DOCUMENT_ID,
    batch_attributes,
    store_attributes,
)
from semantic_store.observability.tracer import TracerProtocol, get_tracer
from semantic_store.schemas.documents import (
    BatchReport,
    FailureEntry,
    IngestRequest,
    StoredDocument,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchFailure:
    """A batch item that was attempted and failed."""

    index: int
    error: SemanticStoreError


@dataclass
class BatchResult:
    """
    Outcome of store_batch.

    Iterating yields the stored documents, so callers that only want the
    documents can treat the result as a sequence.
    """

    documents: list[Document] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    failures: list[BatchFailure] = field(default_factory=list)

    def __iter__(self) -> Iterator[Document]:
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)

    def __getitem__(self, index: int) -> Document:
        return self.documents[index]

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def to_report(self) -> BatchReport:
        return BatchReport(
            count=len(self.documents),
            data=[StoredDocument.from_document(d) for d in self.documents],
            skipped=list(self.skipped),
            failed=[
                FailureEntry(
                    index=f.index,
                    error_type=type(f.error).__name__,
                    message=f.error.message,
                )
                for f in self.failures
            ],
        )


def _to_request(item: Any) -> IngestRequest:
    if isinstance(item, IngestRequest):
        return item
    if not isinstance(item, Mapping):
        raise InvalidInput(
            "batch items must be mappings or IngestRequest",
            details={"type": type(item).__name__},
        )
    try:
        return IngestRequest.model_validate(dict(item))
    except ValidationError as e:
        first = e.errors(include_url=False)[0]
        raise InvalidInput(
            f"batch item failed validation: {first['msg']}",
            details={"fields": [".".join(str(p) for p in err["loc"]) for err in e.errors()]},
            original_error=e,
        ) from e


class IngestionService:
    """Stores text as embedded, workspace-scoped documents."""

    def __init__(
        self,
        embeddings: EmbeddingClient,
        store: DocumentStore,
        tracer: TracerProtocol | None = None,
        capture_content: bool = False,
    ):
        """
        Args:
            embeddings: Embedding client (injected, not created here)
            store: Document store to append to
            tracer: Tracer for spans (defaults to the global tracer)
            capture_content: Attach document text to spans
        """
        self._embeddings = embeddings
        self._store = store
        self._tracer = tracer or get_tracer()
        self._capture_content = capture_content

    def store_one(
        self,
        content: str,
        metadata: Mapping[str, Any] | None = None,
        workspace_id: str | None = None,
        document_type: DocumentType | str | None = None,
    ) -> Document:
        """Embed `content` and persist it in `workspace_id`."""
        with self._tracer.start_span(
            "semantic_store.store_one",
            attributes=store_attributes("store_one", workspace_id, _type_name(document_type)),
        ) as span:
            if self._capture_content and isinstance(content, str):
                span.set_attribute(STORE_CONTENT, content)
            doc = self._embed_and_put(content, metadata, workspace_id, document_type)
            span.set_attribute(STORE_DOCUMENT_ID, doc.id)
            return doc

    def store_batch(
        self,
        items: Iterable[IngestRequest | Mapping[str, Any]],
        fail_fast: bool = False,
    ) -> BatchResult:
        """Store many items in input order, skipping incomplete ones."""
        result = BatchResult()
        total = 0

        with self._tracer.start_span(
            "semantic_store.store_batch",
            attributes=store_attributes("store_batch"),
        ) as span:
            for index, item in enumerate(items):
                total += 1
                try:
                    request = _to_request(item)
                    if not request.is_complete:
                        logger.debug(f"Skipping batch item {index}: missing content or workspace_id")
                        result.skipped.append(index)
                        continue
                    doc = self._embed_and_put(
                        request.content,
                        request.metadata,
                        request.workspace_id,
                        request.document_type,
                    )
                except SemanticStoreError as e:
                    if fail_fast:
                        raise
                    logger.warning(f"Batch item {index} failed: {type(e).__name__}: {e.message}")
                    result.failures.append(BatchFailure(index=index, error=e))
                    continue
                result.documents.append(doc)

            span.set_attributes(batch_attributes(
                size=total,
                stored=len(result.documents),
                skipped=len(result.skipped),
                failed=len(result.failures),
            ))

        if result.failures:
            logger.info(
                f"Batch stored {len(result.documents)}/{total} items "
                f"({len(result.skipped)} skipped, {len(result.failures)} failed)"
            )
        return result

    def _embed_and_put(
        self,
        content: Any,
        metadata: Mapping[str, Any] | None,
        workspace_id: Any,
        document_type: DocumentType | str | None,
    ) -> Document:
        if not isinstance(content, str) or not content.strip():
            raise InvalidInput("content is required")
        if not isinstance(workspace_id, str) or not workspace_id.strip():
            raise InvalidInput("workspace_id is required")

        # Validate everything before paying for the embedding request
        clean_metadata = validate_metadata(metadata)
        doc_type = DocumentType.parse(document_type)

        vector = self._embeddings.embed(content)
        return self._store.put(
            NewDocument(
                content=content,
                embedding=vector,
                workspace_id=workspace_id,
                metadata=clean_metadata,
                document_type=doc_type,
            )
        )


def _type_name(document_type: DocumentType | str | None) -> str | None:
    if isinstance(document_type, DocumentType):
        return document_type.value
    return document_type if isinstance(document_type, str) else None
