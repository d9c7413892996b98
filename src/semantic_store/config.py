"""
Store configuration.

Loads backend, database and embedding settings from environment
variables. The CLI loads a .env file first; library users can build a
StoreConfig directly.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from semantic_store.core.errors import InvalidInput
from semantic_store.embeddings.providers import DEFAULT_EMBEDDING_MODEL, MODEL_DIMENSIONS

BACKENDS = ("memory", "postgres")

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")

_TRUE_VALUES = ("true", "1", "yes")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise InvalidInput(f"{name} must be a number", details={"value": raw}) from e


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise InvalidInput(f"{name} must be an integer", details={"value": raw}) from e


@dataclass
class StoreConfig:
    """Configuration for the semantic store.

    Environment Variables:
        SEMANTIC_STORE_BACKEND: "memory" or "postgres" (default: memory)
        DATABASE_URL: PostgreSQL connection string
        SEMANTIC_STORE_TABLE: Table holding documents (default: vector_documents)
        EMBEDDING_MODEL: OpenAI embedding model (default: text-embedding-ada-002)
        EMBEDDING_DIM: Vector size D (default: the model's native size)
        EMBEDDING_TIMEOUT_S: Per-request embedding timeout (default: 30)
        STORE_TIMEOUT_S: Connect and statement timeout (default: 10)
        USE_MOCK_EMBEDDINGS: Use the offline mock provider (default: false)
    """

    backend: str = "memory"
    connection_string: str = "postgresql://localhost/semantic_store"
    table_name: str = "vector_documents"
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    embedding_dim: int = 1536
    embedding_timeout_s: float = 30.0
    store_timeout_s: float = 10.0
    use_mock_embeddings: bool = False
    hnsw_m: int = 16
    hnsw_ef_construction: int = 64
    candidate_multiplier: int = 10

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise InvalidInput(
                f"Unknown backend {self.backend!r}; expected one of: {', '.join(BACKENDS)}"
            )
        if not _IDENTIFIER_RE.match(self.table_name):
            raise InvalidInput("table_name must be a plain SQL identifier",
                               details={"table_name": self.table_name})
        if self.embedding_dim <= 0:
            raise InvalidInput("embedding_dim must be positive")
        if self.embedding_timeout_s <= 0 or self.store_timeout_s <= 0:
            raise InvalidInput("timeouts must be positive")

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """Load config from environment variables."""
        model = os.environ.get("EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL)
        return cls(
            backend=os.environ.get("SEMANTIC_STORE_BACKEND", "memory").lower(),
            connection_string=os.environ.get(
                "DATABASE_URL", "postgresql://localhost/semantic_store"
            ),
            table_name=os.environ.get("SEMANTIC_STORE_TABLE", "vector_documents"),
            embedding_model=model,
            embedding_dim=_env_int("EMBEDDING_DIM", MODEL_DIMENSIONS.get(model, 1536)),
            embedding_timeout_s=_env_float("EMBEDDING_TIMEOUT_S", 30.0),
            store_timeout_s=_env_float("STORE_TIMEOUT_S", 10.0),
            use_mock_embeddings=os.environ.get("USE_MOCK_EMBEDDINGS", "false").lower()
            in _TRUE_VALUES,
        )


# Global config singleton
_config: StoreConfig | None = None


def get_config() -> StoreConfig:
    """Get the global store config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = StoreConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None
