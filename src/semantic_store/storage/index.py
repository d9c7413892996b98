"""
Similarity query engine.

Two SimilarityIndex implementations with identical ranking rules:

- LinearScanIndex: reference implementation. Scores every candidate with
  numpy and sorts. Always correct; tests assert against it.
- PgVectorIndex: ranks in SQL with the same tie-break. Scoped searches
  scan the workspace exactly; unscoped searches walk the HNSW index.

Ranking rules shared by both:
1. Workspace filter first. A scoped search only ever sees that workspace.
2. Cosine similarity, descending.
3. Ties broken by created_at ascending, then insertion order.
4. At most `limit` results; fewer if fewer candidates exist.
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from semantic_store.core.errors import InvalidInput
from semantic_store.core.protocols import DocumentStore, ScoredDocument, SimilarityIndex
from semantic_store.documents import Document
from semantic_store.storage.store import PgVectorDocumentStore, row_to_document

# pgvector caps hnsw.ef_search at 1000
_MAX_EF_SEARCH = 1000


def check_limit(limit: Any) -> int:
    """Reject anything that is not a positive integer."""
    if isinstance(limit, bool) or not isinstance(limit, (int, np.integer)):
        raise InvalidInput("limit must be a positive integer", details={"limit": repr(limit)})
    if limit <= 0:
        raise InvalidInput("limit must be a positive integer", details={"limit": int(limit)})
    return int(limit)


def check_workspace(workspace_id: Any) -> str | None:
    """None means unscoped; anything else must be a non-empty string."""
    if workspace_id is None:
        return None
    if not isinstance(workspace_id, str) or not workspace_id.strip():
        raise InvalidInput("workspace_id must be a non-empty string when given")
    return workspace_id


def check_query_vector(query_vector: Any, dimensions: int) -> np.ndarray:
    vector = np.asarray(query_vector, dtype=np.float32)
    if vector.ndim != 1 or vector.shape[0] != dimensions:
        raise InvalidInput(
            "query vector has the wrong dimensionality",
            details={"expected": dimensions, "shape": list(vector.shape)},
        )
    return vector


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Calculate cosine similarity between two vectors (0.0 for a zero vector)."""
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom == 0.0:
        return 0.0
    return float(np.dot(a, b) / denom)


def rank_candidates(
    query_vector: np.ndarray,
    candidates: Sequence[Document],
    limit: int,
) -> list[ScoredDocument]:
    """
    Score every candidate and return the top `limit`.

    `candidates` must be in insertion order; the sort is stable, so fully
    tied documents keep that order.
    """
    if not candidates:
        return []

    matrix = np.vstack([doc.embedding for doc in candidates]).astype(np.float64)
    query = query_vector.astype(np.float64)
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    scores = np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)

    order = sorted(
        range(len(candidates)),
        key=lambda i: (-scores[i], candidates[i].created_at),
    )
    return [
        ScoredDocument(document=candidates[i], score=float(scores[i]))
        for i in order[:limit]
    ]


# ---------------------------------------------------------------------------
# LINEAR SCAN (Reference)
# ---------------------------------------------------------------------------


class LinearScanIndex:
    """
    Reference similarity search over any DocumentStore.

    Reads the candidate set from the store (one workspace, or everything
    when unscoped) and ranks it in memory.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    def search(
        self,
        query_vector: np.ndarray,
        workspace_id: str | None = None,
        limit: int = 5,
    ) -> list[ScoredDocument]:
        limit = check_limit(limit)
        workspace_id = check_workspace(workspace_id)
        query = check_query_vector(query_vector, self._store.dimensions)

        if workspace_id is None:
            candidates = self._store.get_all()
        else:
            candidates = self._store.get_by_workspace(workspace_id)
        return rank_candidates(query, candidates, limit)


# ---------------------------------------------------------------------------
# PGVECTOR INDEX (Production)
# ---------------------------------------------------------------------------


class PgVectorIndex:
    """
    Similarity search pushed down to PostgreSQL.

    Scoped searches rank every row of the workspace exactly. The
    workspace CTE is MATERIALIZED so the planner reads it through the
    (workspace_id, created_at, seq) btree instead of filtering the output
    of a table-wide HNSW scan, which would only ever see the
    hnsw.ef_search nearest rows of all workspaces.

    Unscoped searches use the HNSW index: the inner query orders by cosine
    distance alone, over-fetching `limit * candidate_multiplier` rows, and
    the outer query re-sorts that window with the created_at tie-break.
    """

    def __init__(self, store: PgVectorDocumentStore, candidate_multiplier: int | None = None):
        self._store = store
        self._multiplier = candidate_multiplier or store.config.candidate_multiplier

    def search(
        self,
        query_vector: np.ndarray,
        workspace_id: str | None = None,
        limit: int = 5,
    ) -> list[ScoredDocument]:
        limit = check_limit(limit)
        workspace_id = check_workspace(workspace_id)
        query = check_query_vector(query_vector, self._store.dimensions)

        if workspace_id is None:
            rows = self._search_all(query, limit)
        else:
            rows = self._search_workspace(query, workspace_id, limit)

        return [
            ScoredDocument(document=row_to_document(row), score=float(row[7]))
            for row in rows
        ]

    def _search_workspace(self, query: np.ndarray, workspace_id: str, limit: int) -> list[Any]:
        return self._store.execute(
            f"""
            WITH workspace_docs AS MATERIALIZED (
                SELECT id, seq, content, embedding, metadata, workspace_id,
                       document_type, created_at
                FROM {self._store.table_name}
                WHERE workspace_id = %s
            )
            SELECT id, content, embedding, metadata, workspace_id, document_type,
                   created_at, 1 - (embedding <=> %s) AS score
            FROM workspace_docs
            ORDER BY embedding <=> %s, created_at, seq
            LIMIT %s
            """,
            [workspace_id, query, query, limit],
        ).fetchall()

    def _search_all(self, query: np.ndarray, limit: int) -> list[Any]:
        candidates = limit * self._multiplier
        with self._store.transaction():
            # is_local=true: the setting ends with this transaction
            self._store.execute(
                "SELECT set_config('hnsw.ef_search', %s, true)",
                (str(min(max(candidates, 40), _MAX_EF_SEARCH)),),
            )
            return self._store.execute(
                f"""
                SELECT id, content, embedding, metadata, workspace_id, document_type,
                       created_at, 1 - distance AS score
                FROM (
                    SELECT id, seq, content, embedding, metadata, workspace_id,
                           document_type, created_at, embedding <=> %s AS distance
                    FROM {self._store.table_name}
                    ORDER BY embedding <=> %s
                    LIMIT %s
                ) AS candidates
                ORDER BY distance, created_at, seq
                LIMIT %s
                """,
                [query, query, candidates, limit],
            ).fetchall()


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_similarity_index(store: DocumentStore, use_native: bool = True) -> SimilarityIndex:
    """
    Pick the index that matches a store.

    PgVectorDocumentStore gets the native PgVectorIndex unless
    `use_native` is False; every other store gets LinearScanIndex.
    """
    if use_native and isinstance(store, PgVectorDocumentStore):
        return PgVectorIndex(store)
    return LinearScanIndex(store)
