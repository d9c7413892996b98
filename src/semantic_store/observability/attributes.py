"""
Semantic Conventions for Span Attributes

Attribute keys for the semantic_store namespace. Embedding request spans
come from the OpenAI instrumentor and carry the standard gen_ai.* keys.

Reference: https://opentelemetry.io/docs/specs/semconv/gen-ai/
"""

# ---------------------------------------------------------------------------
# SEMANTIC STORE NAMESPACE (custom)
# ---------------------------------------------------------------------------

STORE_OPERATION = "semantic_store.operation"  # "store_one", "store_batch", "search_text"
STORE_WORKSPACE_ID = "semantic_store.workspace_id"
STORE_DOCUMENT_TYPE = "semantic_store.document_type"
STORE_DOCUMENT_ID = "semantic_store.document_id"
STORE_CONTENT = "semantic_store.content"  # only with TRACING_CAPTURE_CONTENT

# Failures (set by the tracer when an operation raises)
STORE_ERROR_KIND = "semantic_store.error.kind"  # "InvalidInput", "PersistenceError", ...
STORE_ERROR_MESSAGE = "semantic_store.error.message"

# Batch ingestion
STORE_BATCH_SIZE = "semantic_store.batch.size"
STORE_BATCH_STORED = "semantic_store.batch.stored"
STORE_BATCH_SKIPPED = "semantic_store.batch.skipped"
STORE_BATCH_FAILED = "semantic_store.batch.failed"

# Search
SEARCH_QUERY = "semantic_store.search.query"  # only with TRACING_CAPTURE_CONTENT
SEARCH_LIMIT = "semantic_store.search.limit"
SEARCH_RESULT_COUNT = "semantic_store.search.result_count"
SEARCH_TOP_SCORE = "semantic_store.search.top_score"
SEARCH_SCOPED = "semantic_store.search.scoped"  # bool


# ---------------------------------------------------------------------------
# HELPER FUNCTIONS
# ---------------------------------------------------------------------------


def store_attributes(
    operation: str,
    workspace_id: str | None = None,
    document_type: str | None = None,
) -> dict:
    """Create attributes dict for an ingestion span."""
    attrs = {STORE_OPERATION: operation}
    if workspace_id:
        attrs[STORE_WORKSPACE_ID] = workspace_id
    if document_type:
        attrs[STORE_DOCUMENT_TYPE] = document_type
    return attrs


def search_attributes(
    workspace_id: str | None,
    limit: int,
) -> dict:
    """Create attributes dict for a search span."""
    attrs = {
        STORE_OPERATION: "search_text",
        SEARCH_LIMIT: limit,
        SEARCH_SCOPED: workspace_id is not None,
    }
    if workspace_id is not None:
        attrs[STORE_WORKSPACE_ID] = workspace_id
    return attrs


def batch_attributes(size: int, stored: int, skipped: int, failed: int) -> dict:
    """Create attributes dict summarising a batch ingestion."""
    return {
        STORE_BATCH_SIZE: size,
        STORE_BATCH_STORED: stored,
        STORE_BATCH_SKIPPED: skipped,
        STORE_BATCH_FAILED: failed,
    }
