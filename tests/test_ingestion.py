"""
Unit Tests for IngestionService

Tests store_one validation and error propagation, and the
skip-and-continue behaviour of store_batch.

STAFF ENGINEER PATTERNS:
------------------------
1. Inject MockEmbeddings and InMemoryDocumentStore (no API, no database)
2. Wrap the provider in MagicMock to assert when it is NOT called
3. Failure injection through side_effect, one item at a time
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from semantic_store.core.errors import EmbeddingUnavailable, InvalidInput, PersistenceError
from semantic_store.documents import Document, DocumentType
from semantic_store.embeddings import EmbeddingClient, MockEmbeddings
from semantic_store.observability.tracer import NoOpTracer
from semantic_store.schemas.documents import IngestRequest
from semantic_store.services.ingestion import BatchResult, IngestionService
from semantic_store.storage.store import InMemoryDocumentStore

DIMS = 256
START = datetime(2024, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


class StepClock:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        value = START + timedelta(seconds=self.calls)
        self.calls += 1
        return value


@pytest.fixture
def provider():
    """MockEmbeddings wrapped so calls can be counted and failed on demand."""
    mock = MagicMock(wraps=MockEmbeddings(dimensions=DIMS))
    mock.dimensions = DIMS
    return mock


@pytest.fixture
def store():
    return InMemoryDocumentStore(dimensions=DIMS, clock=StepClock())


@pytest.fixture
def service(provider, store):
    return IngestionService(EmbeddingClient(provider), store, tracer=NoOpTracer())


def five_items():
    return [
        {"content": "Revenue grew 12% YoY", "workspace_id": "ws1", "document_type": "insight"},
        {"content": "Cut dining spend by 10%", "workspace_id": "ws1", "document_type": "recommendation"},
        {"content": "Monthly summary for March", "workspace_id": ""},
        {"content": "Savings rate is 18%", "workspace_id": "ws1", "document_type": "insight"},
        {"content": "How much did I spend on travel?", "workspace_id": "ws1", "document_type": "chat"},
    ]


# ---------------------------------------------------------------------------
# STORE ONE
# ---------------------------------------------------------------------------


class TestStoreOne:
    def test_returns_persisted_document(self, service, store):
        doc = service.store_one("Revenue grew 12% YoY", {"source": "report"}, "ws1", "insight")

        assert isinstance(doc, Document)
        assert doc.id
        assert doc.content == "Revenue grew 12% YoY"
        assert doc.workspace_id == "ws1"
        assert doc.document_type is DocumentType.INSIGHT
        assert dict(doc.metadata) == {"source": "report"}
        assert doc.created_at == START
        assert doc.dimensions == DIMS
        assert store.get_all() == [doc]

    def test_missing_type_defaults_to_other(self, service):
        doc = service.store_one("A note", {}, "ws1")
        assert doc.document_type is DocumentType.OTHER

    def test_ids_are_unique(self, service):
        ids = {service.store_one(f"note {i}", {}, "ws1").id for i in range(20)}
        assert len(ids) == 20

    def test_empty_content_is_invalid(self, service, provider, store):
        with pytest.raises(InvalidInput):
            service.store_one("", {}, "ws1")

        provider.embed.assert_not_called()
        assert store.count() == 0

    @pytest.mark.parametrize("workspace_id", [None, "", "   "])
    def test_missing_workspace_is_invalid(self, service, provider, workspace_id):
        with pytest.raises(InvalidInput):
            service.store_one("text", {}, workspace_id)

        provider.embed.assert_not_called()

    def test_nested_metadata_rejected_before_embedding(self, service, provider):
        with pytest.raises(InvalidInput):
            service.store_one("text", {"nested": {"a": 1}}, "ws1")

        provider.embed.assert_not_called()

    def test_unknown_type_rejected_before_embedding(self, service, provider):
        with pytest.raises(InvalidInput):
            service.store_one("text", {}, "ws1", "memo")

        provider.embed.assert_not_called()

    def test_embedding_failure_propagates(self, service, provider, store):
        provider.embed.side_effect = TimeoutError("embedding request timed out")

        with pytest.raises(EmbeddingUnavailable):
            service.store_one("text", {}, "ws1")

        assert store.count() == 0

    def test_persistence_failure_propagates(self, provider):
        failing_store = MagicMock()
        failing_store.put.side_effect = PersistenceError("statement timeout")
        service = IngestionService(EmbeddingClient(provider), failing_store, tracer=NoOpTracer())

        with pytest.raises(PersistenceError):
            service.store_one("text", {}, "ws1")

    def test_stored_document_cannot_change(self, service):
        doc = service.store_one("Revenue grew 12% YoY", {"k": "v"}, "ws1")

        with pytest.raises(AttributeError):
            doc.content = "changed"
        with pytest.raises(ValueError):
            doc.embedding[0] = 1.0
        with pytest.raises(TypeError):
            doc.metadata["k"] = "changed"


# ---------------------------------------------------------------------------
# STORE BATCH
# ---------------------------------------------------------------------------


class TestStoreBatch:
    def test_incomplete_item_is_skipped(self, service):
        items = five_items()

        result = service.store_batch(items)

        assert isinstance(result, BatchResult)
        assert len(result) == 4
        assert [d.content for d in result] == [items[i]["content"] for i in (0, 1, 3, 4)]
        assert result.skipped == [2]
        assert not result.has_failures

    def test_documents_keep_input_order_in_created_at(self, service):
        result = service.store_batch(five_items())

        created = [d.created_at for d in result]
        assert created == sorted(created)

    @pytest.mark.parametrize(
        "item",
        [
            {"workspace_id": "ws1"},
            {"content": "text"},
            {"content": "   ", "workspace_id": "ws1"},
            {"content": None, "workspace_id": "ws1"},
        ],
    )
    def test_missing_fields_skip_without_embedding(self, service, provider, item):
        result = service.store_batch([item])

        assert len(result) == 0
        assert result.skipped == [0]
        provider.embed.assert_not_called()

    def test_accepts_camel_case_keys(self, service):
        result = service.store_batch(
            [{"content": "Saved 200 this month", "workspaceId": "ws9", "documentType": "summary"}]
        )

        assert result[0].workspace_id == "ws9"
        assert result[0].document_type is DocumentType.SUMMARY

    def test_accepts_ingest_requests(self, service):
        request = IngestRequest(content="Rent is due", workspace_id="ws1")

        result = service.store_batch([request])

        assert result[0].content == "Rent is due"

    def test_embedding_failure_is_reported_and_batch_continues(self, service, provider):
        real_embed = MockEmbeddings(dimensions=DIMS).embed

        def flaky(text):
            if text.startswith("Cut"):
                raise ConnectionError("provider unavailable")
            return real_embed(text)

        provider.embed.side_effect = flaky

        result = service.store_batch(five_items())

        assert len(result) == 3
        assert result.skipped == [2]
        assert [f.index for f in result.failures] == [1]
        assert isinstance(result.failures[0].error, EmbeddingUnavailable)

    def test_invalid_items_are_reported(self, service):
        items = [
            {"content": "ok", "workspace_id": "ws1"},
            {"content": "bad type", "workspace_id": "ws1", "document_type": "memo"},
            {"content": "bad metadata", "workspace_id": "ws1", "metadata": {"a": [1, 2]}},
            "not a mapping",
        ]

        result = service.store_batch(items)

        assert len(result) == 1
        assert [f.index for f in result.failures] == [1, 2, 3]
        assert all(isinstance(f.error, InvalidInput) for f in result.failures)

    def test_fail_fast_raises_first_failure(self, service, provider, store):
        provider.embed.side_effect = [
            MockEmbeddings(dimensions=DIMS).embed("first"),
            ConnectionError("provider unavailable"),
        ]

        with pytest.raises(EmbeddingUnavailable):
            service.store_batch(five_items(), fail_fast=True)

        assert store.count() == 1

    def test_empty_batch(self, service):
        result = service.store_batch([])

        assert len(result) == 0
        assert result.skipped == []
        assert result.failures == []

    def test_to_report(self, service):
        items = five_items()
        items[1]["document_type"] = "memo"

        report = service.store_batch(items).to_report()

        assert report.success is True
        assert report.count == 3
        assert [d.content for d in report.data] == [items[i]["content"] for i in (0, 3, 4)]
        assert report.skipped == [2]
        assert report.failed[0].index == 1
        assert report.failed[0].error_type == "InvalidInput"
        assert "memo" in report.failed[0].message

    def test_report_serialises(self, service):
        report = service.store_batch(five_items()).to_report()

        data = report.model_dump(mode="json")

        assert data["count"] == 4
        assert data["data"][0]["document_type"] == "insight"
        assert "embedding" not in data["data"][0]
