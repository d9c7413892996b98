"""
Document model for the semantic store.

Single responsibility: define the structure of documents stored in a
DocumentStore and the rules a record must satisfy before it is persisted.

Two shapes:
- NewDocument: validated but unsaved. Has an embedding, no id yet.
- Document: the persisted, write-once record returned by DocumentStore.put.

Both are frozen. A Document's embedding is a read-only numpy array and its
metadata a read-only mapping, so nothing downstream can alter what the
vector represents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Union

import numpy as np

from semantic_store.core.errors import InvalidInput

MetadataValue = Union[str, int, float, bool, None]

_METADATA_TYPES = (str, int, float, bool, type(None))


class DocumentType(str, Enum):
    """Closed set of document kinds produced by the application."""

    INSIGHT = "insight"
    RECOMMENDATION = "recommendation"
    SUMMARY = "summary"
    CHAT = "chat"
    OTHER = "other"

    @classmethod
    def parse(cls, value: DocumentType | str | None) -> DocumentType:
        """Coerce user input to a DocumentType; missing values mean OTHER."""
        if value is None or value == "":
            return cls.OTHER
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            allowed = ", ".join(t.value for t in cls)
            raise InvalidInput(
                f"Unknown document type {value!r}; expected one of: {allowed}",
            ) from e


def validate_metadata(metadata: Mapping[str, Any] | None) -> dict[str, MetadataValue]:
    """
    Check that metadata is a flat map of string keys to primitive values.

    Returns a plain dict copy. Nested containers and arbitrary objects are
    rejected so records stay serialisable and comparable.
    """
    if metadata is None:
        return {}
    if not isinstance(metadata, Mapping):
        raise InvalidInput(
            "metadata must be a mapping",
            details={"type": type(metadata).__name__},
        )

    clean: dict[str, MetadataValue] = {}
    for key, value in metadata.items():
        if not isinstance(key, str):
            raise InvalidInput("metadata keys must be strings", details={"key": repr(key)})
        if not isinstance(value, _METADATA_TYPES):
            raise InvalidInput(
                "metadata values must be str, int, float, bool or None",
                details={"key": key, "type": type(value).__name__},
            )
        clean[key] = value
    return clean


def _frozen_vector(embedding: Any) -> np.ndarray:
    vector = np.array(embedding, dtype=np.float32)
    if vector.ndim != 1 or vector.size == 0:
        raise InvalidInput(
            "embedding must be a non-empty one-dimensional vector",
            details={"shape": list(vector.shape)},
        )
    vector.flags.writeable = False
    return vector


def _require_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{name} is required and must be non-empty")
    return value


@dataclass(frozen=True)
class NewDocument:
    """
    A validated document that has not been persisted yet.

    DocumentStore.put turns it into a Document by assigning `id` and
    `created_at`.
    """

    content: str
    embedding: np.ndarray
    workspace_id: str
    metadata: Mapping[str, MetadataValue] = field(default_factory=dict)
    document_type: DocumentType = DocumentType.OTHER

    def __post_init__(self) -> None:
        _require_text(self.content, "content")
        _require_text(self.workspace_id, "workspace_id")
        object.__setattr__(self, "embedding", _frozen_vector(self.embedding))
        object.__setattr__(
            self, "metadata", MappingProxyType(validate_metadata(self.metadata))
        )
        object.__setattr__(self, "document_type", DocumentType.parse(self.document_type))

    def to_document(self, id: str, created_at: datetime) -> Document:
        """Bind a store-assigned identity to this record."""
        return Document(
            id=id,
            content=self.content,
            embedding=self.embedding,
            metadata=dict(self.metadata),
            workspace_id=self.workspace_id,
            document_type=self.document_type,
            created_at=created_at,
        )


@dataclass(frozen=True, eq=False)
class Document:
    """
    A persisted document with its embedding.

    Write-once: there is no update path, so the embedding always matches
    the content it was computed from.
    """

    id: str
    content: str
    embedding: np.ndarray
    metadata: Mapping[str, MetadataValue]
    workspace_id: str
    document_type: DocumentType
    created_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "embedding", _frozen_vector(self.embedding))
        object.__setattr__(
            self, "metadata", MappingProxyType(validate_metadata(self.metadata))
        )
        object.__setattr__(self, "document_type", DocumentType.parse(self.document_type))

    @property
    def dimensions(self) -> int:
        return int(self.embedding.shape[0])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return (
            self.id == other.id
            and self.content == other.content
            and self.workspace_id == other.workspace_id
            and self.document_type == other.document_type
            and self.created_at == other.created_at
            and dict(self.metadata) == dict(other.metadata)
            and np.array_equal(self.embedding, other.embedding)
        )

    def __hash__(self) -> int:
        return hash(self.id)

    def to_dict(self, include_embedding: bool = False) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "id": self.id,
            "content": self.content,
            "metadata": dict(self.metadata),
            "workspace_id": self.workspace_id,
            "document_type": self.document_type.value,
            "created_at": self.created_at.isoformat(),
        }
        if include_embedding:
            data["embedding"] = self.embedding.tolist()
        return data
