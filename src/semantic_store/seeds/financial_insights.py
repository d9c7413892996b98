"""
Sample workspace content for demos and smoke tests.

A handful of insights, recommendations and summaries of the kind the
financial assistant writes into a workspace.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from semantic_store.schemas.documents import IngestRequest

if TYPE_CHECKING:
    from semantic_store.services.ingestion import BatchResult, IngestionService


def get_sample_documents(workspace_id: str) -> list[IngestRequest]:
    """Sample ingestion requests, all scoped to `workspace_id`."""
    samples = [
        (
            "insight",
            "Revenue grew 12% year over year, driven by subscription renewals in the enterprise segment.",
            {"source": "quarterly_report", "quarter": "Q2"},
        ),
        (
            "insight",
            "Operating expenses fell 3% after consolidating cloud hosting contracts.",
            {"source": "quarterly_report", "quarter": "Q2"},
        ),
        (
            "insight",
            "Days sales outstanding rose from 41 to 55, suggesting slower customer collections.",
            {"source": "ar_aging", "quarter": "Q2"},
        ),
        (
            "recommendation",
            "Tighten payment terms for accounts more than 60 days overdue and automate reminder emails.",
            {"source": "assistant", "priority": "high"},
        ),
        (
            "recommendation",
            "Move idle cash reserves into a short-term treasury ladder to improve interest income.",
            {"source": "assistant", "priority": "medium"},
        ),
        (
            "summary",
            "Q2 summary: healthy top-line growth, stable margins, and a working capital squeeze from receivables.",
            {"source": "assistant"},
        ),
        (
            "chat",
            "User asked whether the marketing budget increase paid off; customer acquisition cost dropped 8%.",
            {"source": "chat", "role": "assistant"},
        ),
    ]
    return [
        IngestRequest(
            content=content,
            metadata=metadata,
            workspace_id=workspace_id,
            document_type=doc_type,
        )
        for doc_type, content, metadata in samples
    ]


def seed_workspace(ingestion: IngestionService, workspace_id: str) -> BatchResult:
    """Store the sample documents in `workspace_id`."""
    return ingestion.store_batch(get_sample_documents(workspace_id))
