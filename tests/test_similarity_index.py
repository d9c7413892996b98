"""
Unit Tests for the Similarity Query Engine

Tests LinearScanIndex, the reference implementation every other index
must agree with.

STAFF ENGINEER PATTERNS:
------------------------
1. Hand-built vectors so expected scores are known exactly
2. Injected clocks to pin the created_at tie-break
3. Scoping asserted as a hard partition, regardless of similarity
"""

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from semantic_store.core.errors import InvalidInput
from semantic_store.core.protocols import SimilarityIndex
from semantic_store.documents import NewDocument
from semantic_store.storage.index import (
    LinearScanIndex,
    PgVectorIndex,
    cosine_similarity,
    get_similarity_index,
    rank_candidates,
)
from semantic_store.storage.store import InMemoryDocumentStore


START = datetime(2024, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


class ListClock:
    """Hands out the given timestamps in order."""

    def __init__(self, *offsets):
        self._values = iter(START + timedelta(seconds=o) for o in offsets)

    def __call__(self):
        return next(self._values)


def put(store, content, vector, workspace_id="ws1"):
    return store.put(NewDocument(content=content, embedding=vector, workspace_id=workspace_id))


@pytest.fixture
def store():
    return InMemoryDocumentStore(dimensions=3)


@pytest.fixture
def index(store):
    return LinearScanIndex(store)


@pytest.fixture
def populated(store):
    """Three ws1 documents at known angles to the x axis, one in ws2."""
    docs = {
        "x": put(store, "x axis", [1.0, 0.0, 0.0]),
        "diag": put(store, "diagonal", [1.0, 1.0, 0.0]),
        "y": put(store, "y axis", [0.0, 1.0, 0.0]),
        "other_ws": put(store, "x axis elsewhere", [1.0, 0.0, 0.0], workspace_id="ws2"),
    }
    return docs


QUERY_X = np.array([1.0, 0.0, 0.0])


# ---------------------------------------------------------------------------
# COSINE
# ---------------------------------------------------------------------------


class TestCosineSimilarity:
    def test_identical(self):
        assert cosine_similarity(QUERY_X, QUERY_X) == pytest.approx(1.0)

    def test_orthogonal(self):
        assert cosine_similarity(QUERY_X, np.array([0.0, 1.0, 0.0])) == pytest.approx(0.0)

    def test_scale_invariant(self):
        assert cosine_similarity(QUERY_X, np.array([5.0, 0.0, 0.0])) == pytest.approx(1.0)

    def test_zero_vector(self):
        assert cosine_similarity(QUERY_X, np.zeros(3)) == 0.0


# ---------------------------------------------------------------------------
# RANKING
# ---------------------------------------------------------------------------


class TestRanking:
    """Results are ordered by score descending."""

    def test_orders_by_score(self, index, populated):
        results = index.search(QUERY_X, workspace_id="ws1", limit=10)

        assert [r.document.content for r in results] == ["x axis", "diagonal", "y axis"]
        assert results[0].score == pytest.approx(1.0)
        assert results[1].score == pytest.approx(1 / np.sqrt(2))
        assert results[2].score == pytest.approx(0.0)

    def test_unscoped_sees_every_workspace(self, index, populated):
        results = index.search(QUERY_X, limit=10)

        assert len(results) == 4
        assert {r.document.workspace_id for r in results} == {"ws1", "ws2"}

    def test_empty_store(self, index):
        assert index.search(QUERY_X, workspace_id="ws1", limit=5) == []

    def test_scored_document_to_dict(self, index, populated):
        data = index.search(QUERY_X, workspace_id="ws1", limit=1)[0].to_dict()
        assert data["content"] == "x axis"
        assert data["score"] == pytest.approx(1.0)


class TestTieBreak:
    """Equal scores are ordered by created_at ascending."""

    def test_earliest_created_wins(self):
        # First insert gets the later timestamp
        store = InMemoryDocumentStore(dimensions=3, clock=ListClock(10, 5, 1))
        late = put(store, "late", [1.0, 0.0, 0.0])
        middle = put(store, "middle", [2.0, 0.0, 0.0])
        early = put(store, "early", [3.0, 0.0, 0.0])

        results = LinearScanIndex(store).search(QUERY_X, limit=3)

        assert [r.document for r in results] == [early, middle, late]

    def test_same_timestamp_keeps_insertion_order(self):
        store = InMemoryDocumentStore(dimensions=3, clock=lambda: START)
        docs = [put(store, f"doc {i}", [1.0, 0.0, 0.0]) for i in range(5)]

        results = LinearScanIndex(store).search(QUERY_X, limit=5)

        assert [r.document for r in results] == docs

    def test_repeated_searches_are_identical(self, index, populated):
        first = index.search(np.array([0.3, 0.5, 0.1]), limit=10)
        second = index.search(np.array([0.3, 0.5, 0.1]), limit=10)

        assert [(r.document.id, r.score) for r in first] == [
            (r.document.id, r.score) for r in second
        ]


# ---------------------------------------------------------------------------
# SCOPING
# ---------------------------------------------------------------------------


class TestScoping:
    """A scoped search never returns another workspace's documents."""

    def test_scope_excludes_identical_vector(self, index, populated):
        results = index.search(QUERY_X, workspace_id="ws1", limit=10)
        assert populated["other_ws"] not in [r.document for r in results]

    def test_scope_to_other_workspace(self, index, populated):
        results = index.search(np.array([0.0, 1.0, 0.0]), workspace_id="ws2", limit=10)

        assert [r.document for r in results] == [populated["other_ws"]]

    def test_unknown_workspace_is_empty(self, index, populated):
        assert index.search(QUERY_X, workspace_id="nope", limit=10) == []

    def test_empty_workspace_string_is_invalid(self, index):
        with pytest.raises(InvalidInput):
            index.search(QUERY_X, workspace_id="", limit=1)


# ---------------------------------------------------------------------------
# LIMIT
# ---------------------------------------------------------------------------


class TestLimit:
    """Exactly min(limit, candidates) results."""

    @pytest.mark.parametrize("limit,expected", [(1, 1), (2, 2), (3, 3), (50, 3)])
    def test_limit_respected(self, index, populated, limit, expected):
        assert len(index.search(QUERY_X, workspace_id="ws1", limit=limit)) == expected

    @pytest.mark.parametrize("limit", [0, -1, 1.5, "3", True, None])
    def test_invalid_limit(self, index, populated, limit):
        with pytest.raises(InvalidInput):
            index.search(QUERY_X, workspace_id="ws1", limit=limit)

    def test_numpy_integer_limit(self, index, populated):
        assert len(index.search(QUERY_X, workspace_id="ws1", limit=np.int64(2))) == 2


class TestQueryVector:
    def test_wrong_dimensions(self, index):
        with pytest.raises(InvalidInput):
            index.search(np.array([1.0, 0.0]), limit=1)


class TestRankCandidates:
    def test_empty(self):
        assert rank_candidates(QUERY_X, [], 5) == []

    def test_zero_embedding_scores_zero(self, store):
        doc = store.put(NewDocument(content="z", embedding=[0.0, 0.0, 0.0], workspace_id="ws1"))
        results = rank_candidates(QUERY_X, [doc], 1)
        assert results[0].score == 0.0


# ---------------------------------------------------------------------------
# FACTORY / PROTOCOL
# ---------------------------------------------------------------------------


class TestGetSimilarityIndex:
    def test_memory_store_gets_linear_scan(self, store):
        index = get_similarity_index(store)
        assert isinstance(index, LinearScanIndex)
        assert isinstance(index, SimilarityIndex)

    def test_pg_store_gets_native_index(self):
        from semantic_store.config import StoreConfig
        from semantic_store.storage.store import PgVectorDocumentStore

        pg_store = PgVectorDocumentStore(StoreConfig(backend="postgres"))

        assert isinstance(get_similarity_index(pg_store), PgVectorIndex)
        assert isinstance(get_similarity_index(pg_store, use_native=False), LinearScanIndex)
