"""
Document store implementations.

Pattern: Protocol -> Production impl -> Test double -> Factory

1. PgVectorDocumentStore - PostgreSQL with pgvector (production)
2. InMemoryDocumentStore - append-only list (testing/development)
3. get_document_store() - Factory function

Both stores are append-only. There is no update or delete, so readers
never have to coordinate with writers: the in-memory store snapshots its
list, PostgreSQL gives every SELECT its own MVCC snapshot.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Sequence
from uuid import uuid4

from semantic_store.config import StoreConfig
from semantic_store.core.errors import InvalidInput, PersistenceError
from semantic_store.core.protocols import DocumentStore
from semantic_store.documents import Document, NewDocument

logger = logging.getLogger(__name__)

# Optional: Only import psycopg if available (for local dev without postgres)
try:
    import psycopg
    from psycopg.types.json import Jsonb
    from pgvector.psycopg import register_vector

    PGVECTOR_AVAILABLE = True
except ImportError:
    PGVECTOR_AVAILABLE = False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_new_document(doc: NewDocument, dimensions: int) -> None:
    if not isinstance(doc, NewDocument):
        raise InvalidInput(
            "put() expects a NewDocument",
            details={"type": type(doc).__name__},
        )
    if doc.embedding.shape[0] != dimensions:
        raise InvalidInput(
            "embedding has the wrong dimensionality for this store",
            details={"expected": dimensions, "actual": int(doc.embedding.shape[0])},
        )


# ---------------------------------------------------------------------------
# PGVECTOR STORE (Production)
# ---------------------------------------------------------------------------


_COLUMNS = "id, content, embedding, metadata, workspace_id, document_type, created_at"


class PgVectorDocumentStore:
    """
    PostgreSQL document store using pgvector.

    Every statement runs under the configured statement_timeout, and every
    psycopg error is re-raised as PersistenceError. A single INSERT per
    document keeps writes atomic: the row is either there in full or not
    at all.
    """

    def __init__(self, config: StoreConfig, clock: Callable[[], datetime] = _utcnow):
        """
        Args:
            config: Store configuration
            clock: Source of created_at timestamps
        """
        self.config = config
        self._clock = clock
        self._conn = None
        # One connection shared by every caller; multi-statement work holds this
        self._lock = threading.RLock()

    @property
    def dimensions(self) -> int:
        return self.config.embedding_dim

    @property
    def table_name(self) -> str:
        return self.config.table_name

    def connect(self) -> None:
        """Establish database connection."""
        if not PGVECTOR_AVAILABLE:
            raise PersistenceError(
                "postgres backend requires: pip install pgvector psycopg[binary]"
            )

        timeout_ms = int(self.config.store_timeout_s * 1000)
        conn = None
        try:
            conn = psycopg.connect(
                self.config.connection_string,
                autocommit=True,
                connect_timeout=max(1, int(self.config.store_timeout_s)),
                options=f"-c statement_timeout={timeout_ms}",
            )
            conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
            register_vector(conn)
        except psycopg.Error as e:
            if conn is not None:
                conn.close()
            raise PersistenceError(
                "Could not connect to the document store",
                original_error=e,
            ) from e
        self._conn = conn

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> PgVectorDocumentStore:
        self.connect()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _connection(self) -> Any:
        # A closed connection (server restart, network drop) is replaced
        if self._conn is None or self._conn.closed:
            self._conn = None
            self.connect()
        return self._conn

    def _discard_if_broken(self, error: Exception) -> None:
        if isinstance(error, psycopg.OperationalError) and self._conn is not None:
            logger.warning("Dropping document store connection after operational error")
            try:
                self._conn.close()
            finally:
                self._conn = None

    def execute(self, query: str, params: Sequence[Any] | None = None) -> Any:
        """Run one statement, mapping driver failures to PersistenceError."""
        with self._lock:
            conn = self._connection()
            try:
                return conn.execute(query, params)
            except psycopg.Error as e:
                logger.error(f"Document store statement failed: {e}")
                self._discard_if_broken(e)
                raise PersistenceError(
                    "Document store operation failed",
                    details={"table": self.table_name},
                    original_error=e,
                ) from e

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Run several execute() calls as one transaction.

        The store lock is held throughout, so settings made with
        set_config(..., true) apply only to these statements.
        """
        with self._lock:
            conn = self._connection()
            try:
                with conn.transaction():
                    yield
            except psycopg.Error as e:
                self._discard_if_broken(e)
                raise PersistenceError(
                    "Document store transaction failed",
                    details={"table": self.table_name},
                    original_error=e,
                ) from e

    def create_schema(self) -> None:
        """Create the documents table and its indexes."""
        table = self.table_name
        self.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id TEXT PRIMARY KEY,
                seq BIGSERIAL NOT NULL,
                content TEXT NOT NULL,
                embedding vector({self.dimensions}) NOT NULL,
                metadata JSONB NOT NULL DEFAULT '{{}}'::jsonb,
                workspace_id TEXT NOT NULL,
                document_type TEXT NOT NULL DEFAULT 'other'
                    CHECK (document_type IN
                        ('insight', 'recommendation', 'summary', 'chat', 'other')),
                created_at TIMESTAMPTZ NOT NULL
            )
        """
        )

        # HNSW index for approximate nearest neighbour search
        self.execute(
            f"""
            CREATE INDEX IF NOT EXISTS {table}_embedding_idx
            ON {table}
            USING hnsw (embedding vector_cosine_ops)
            WITH (m = {self.config.hnsw_m}, ef_construction = {self.config.hnsw_ef_construction})
        """
        )

        # Workspace scoping and oldest-first listing
        self.execute(
            f"""
            CREATE INDEX IF NOT EXISTS {table}_workspace_idx
            ON {table} (workspace_id, created_at, seq)
        """
        )
        logger.info(f"Schema ready for {table} (dimensions={self.dimensions})")

    def put(self, doc: NewDocument) -> Document:
        """Insert a document; id and created_at are assigned here."""
        _check_new_document(doc, self.dimensions)
        stored = doc.to_document(id=str(uuid4()), created_at=self._clock())

        self.execute(
            f"""
            INSERT INTO {self.table_name}
                (id, content, embedding, metadata, workspace_id, document_type, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            """,
            (
                stored.id,
                stored.content,
                stored.embedding,
                Jsonb(dict(stored.metadata)),
                stored.workspace_id,
                stored.document_type.value,
                stored.created_at,
            ),
        )
        return stored

    def get_by_workspace(self, workspace_id: str) -> list[Document]:
        rows = self.execute(
            f"""
            SELECT {_COLUMNS} FROM {self.table_name}
            WHERE workspace_id = %s
            ORDER BY created_at, seq
            """,
            (workspace_id,),
        ).fetchall()
        return [row_to_document(row) for row in rows]

    def get_all(self) -> list[Document]:
        rows = self.execute(
            f"SELECT {_COLUMNS} FROM {self.table_name} ORDER BY created_at, seq"
        ).fetchall()
        return [row_to_document(row) for row in rows]

    def count(self, workspace_id: str | None = None) -> int:
        if workspace_id is None:
            row = self.execute(f"SELECT count(*) FROM {self.table_name}").fetchone()
        else:
            row = self.execute(
                f"SELECT count(*) FROM {self.table_name} WHERE workspace_id = %s",
                (workspace_id,),
            ).fetchone()
        return int(row[0])


def row_to_document(row: Sequence[Any]) -> Document:
    """Build a Document from a row in _COLUMNS order."""
    return Document(
        id=row[0],
        content=row[1],
        embedding=row[2],
        metadata=row[3] or {},
        workspace_id=row[4],
        document_type=row[5],
        created_at=row[6],
    )


# ---------------------------------------------------------------------------
# IN-MEMORY STORE (Testing/Development)
# ---------------------------------------------------------------------------


class InMemoryDocumentStore:
    """
    In-memory document store for development/testing.

    Implements the same interface as PgVectorDocumentStore but doesn't
    require Postgres. Writers append under a lock; readers copy the list
    and never take the lock.
    """

    def __init__(self, dimensions: int = 1536, clock: Callable[[], datetime] = _utcnow):
        self._dimensions = dimensions
        self._clock = clock
        self._documents: list[Document] = []
        self._lock = threading.Lock()

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def connect(self) -> None:
        """No-op for in-memory store."""
        pass

    def close(self) -> None:
        """No-op for in-memory store."""
        pass

    def create_schema(self) -> None:
        """No-op for in-memory store."""
        pass

    def put(self, doc: NewDocument) -> Document:
        """Append document to memory."""
        _check_new_document(doc, self._dimensions)
        with self._lock:
            stored = doc.to_document(id=str(uuid4()), created_at=self._clock())
            self._documents.append(stored)
        return stored

    def get_by_workspace(self, workspace_id: str) -> list[Document]:
        return [d for d in self._documents[:] if d.workspace_id == workspace_id]

    def get_all(self) -> list[Document]:
        return self._documents[:]

    def count(self, workspace_id: str | None = None) -> int:
        if workspace_id is None:
            return len(self._documents)
        return len(self.get_by_workspace(workspace_id))


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_document_store(config: StoreConfig | None = None) -> DocumentStore:
    """
    Factory function to get the configured document store.

    Args:
        config: Store configuration (loaded from env if not provided)

    Returns:
        DocumentStore implementation
    """
    if config is None:
        from semantic_store.config import get_config

        config = get_config()

    if config.backend == "postgres":
        if not PGVECTOR_AVAILABLE:
            raise PersistenceError(
                "postgres backend requires: pip install pgvector psycopg[binary]"
            )
        return PgVectorDocumentStore(config)
    return InMemoryDocumentStore(dimensions=config.embedding_dim)
