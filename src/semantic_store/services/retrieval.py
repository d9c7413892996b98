"""
Retrieval service - free-text query to ranked workspace documents.

Flow: validate -> EmbeddingClient.embed -> SimilarityIndex.search.

Validation happens before the embedding call, so a bad limit or an empty
query never costs a provider request. Errors from the client and the
index propagate unchanged.
"""

from __future__ import annotations

from semantic_store.core.errors import InvalidInput
from semantic_store.core.protocols import ScoredDocument, SimilarityIndex
from semantic_store.embeddings.client import EmbeddingClient
from semantic_store.observability.attributes import (
    SEARCH_QUERY,
    SEARCH_RESULT_COUNT,
    SEARCH_TOP_SCORE,
    search_attributes,
)
from semantic_store.observability.tracer import TracerProtocol, get_tracer
from semantic_store.schemas.documents import SearchResponse
from semantic_store.storage.index import check_limit, check_workspace

DEFAULT_LIMIT = 5


class RetrievalService:
    """Answers nearest-neighbour queries over stored documents."""

    def __init__(
        self,
        embeddings: EmbeddingClient,
        index: SimilarityIndex,
        tracer: TracerProtocol | None = None,
        capture_content: bool = False,
    ):
        self._embeddings = embeddings
        self._index = index
        self._tracer = tracer or get_tracer()
        self._capture_content = capture_content

    def search_text(
        self,
        query: str,
        workspace_id: str | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> list[ScoredDocument]:
        """
        Return up to `limit` documents most similar to `query`.

        Args:
            query: Free text to search for
            workspace_id: Restrict candidates to this workspace (None = all)
            limit: Maximum number of results, must be positive

        Returns:
            ScoredDocument list, score descending, oldest first on ties
        """
        if not isinstance(query, str) or not query.strip():
            raise InvalidInput("search query is required")
        limit = check_limit(limit)
        workspace_id = check_workspace(workspace_id)

        with self._tracer.start_span(
            "semantic_store.search_text",
            attributes=search_attributes(workspace_id, limit),
        ) as span:
            if self._capture_content:
                span.set_attribute(SEARCH_QUERY, query)
            vector = self._embeddings.embed(query)
            results = self._index.search(vector, workspace_id=workspace_id, limit=limit)

            span.set_attribute(SEARCH_RESULT_COUNT, len(results))
            if results:
                span.set_attribute(SEARCH_TOP_SCORE, results[0].score)
            return results

    def search(
        self,
        query: str,
        workspace_id: str | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> SearchResponse:
        """search_text shaped as a transport-ready response."""
        return SearchResponse.from_results(self.search_text(query, workspace_id, limit))
