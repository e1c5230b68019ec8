"""Embedding records and the types that travel with them."""

from datetime import datetime
from enum import Enum
from typing import Any, NamedTuple
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, model_validator

from company_brain.domain.models.utils import utc_now


class EmbeddingScope(str, Enum):
    """The two logical embedding tables."""

    COMPANY = "company_scope"
    PROJECT = "project_scope"

    @property
    def label(self) -> str:
        """Neo4j label holding this scope's records."""
        return "CompanyEmbedding" if self is EmbeddingScope.COMPANY else "ProjectEmbedding"

    @classmethod
    def parse(cls, value: str) -> "EmbeddingScope":
        """Accept the scope value or the legacy table name."""
        return cls(_TABLE_ALIASES.get(value, value))


_TABLE_ALIASES = {
    "company_brain_embeddings": EmbeddingScope.COMPANY.value,
    "project_embeddings": EmbeddingScope.PROJECT.value,
}


class ContentType(str, Enum):
    """What kind of source entity an embedding represents."""

    COMPANY_INFO = "company_info"
    DOCUMENT = "document"
    ADDITIONAL_CONTEXT = "additional_context"
    PROJECT_METADATA = "project_metadata"
    DOCUMENT_CHUNK = "document_chunk"


ALLOWED_CONTENT_TYPES: dict[EmbeddingScope, frozenset[ContentType]] = {
    EmbeddingScope.COMPANY: frozenset(
        {ContentType.COMPANY_INFO, ContentType.DOCUMENT, ContentType.ADDITIONAL_CONTEXT}
    ),
    EmbeddingScope.PROJECT: frozenset(
        {ContentType.PROJECT_METADATA, ContentType.DOCUMENT, ContentType.DOCUMENT_CHUNK}
    ),
}


class EmbeddingKey(NamedTuple):
    """Identity of "the current embedding set" of one source entity."""

    scope: EmbeddingScope
    tenant_id: str
    scope_id: str | None
    content_type: ContentType
    content_id: str | None


class EmbeddingRecord(BaseModel):
    """One embedded piece of text in either scope.

    ``metadata`` is an open bag; nothing in the embedding subsystem reads it,
    it is only threaded through to search results.
    """

    id: UUID = Field(default_factory=uuid4)
    scope: EmbeddingScope = EmbeddingScope.COMPANY
    tenant_id: str = Field(min_length=1)
    scope_id: str | None = None
    content_type: ContentType
    content_id: str | None = None
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    embedding: list[float] | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_scope(self) -> "EmbeddingRecord":
        if self.content_type not in ALLOWED_CONTENT_TYPES[self.scope]:
            raise ValueError(f"content_type '{self.content_type.value}' is not stored in {self.scope.value}")
        if self.scope is EmbeddingScope.PROJECT and not self.scope_id:
            raise ValueError("project_scope records require a scope_id")
        if self.scope is EmbeddingScope.COMPANY and self.scope_id is not None:
            raise ValueError("company_scope records do not carry a scope_id")
        return self

    @property
    def key(self) -> EmbeddingKey:
        return EmbeddingKey(self.scope, self.tenant_id, self.scope_id, self.content_type, self.content_id)


class SearchMatch(BaseModel):
    """A ranked record as returned to search callers."""

    id: UUID
    tenant_id: str
    scope_id: str | None = None
    content_type: ContentType
    content_id: str | None = None
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    similarity: float
    created_at: datetime | None = None

    @classmethod
    def from_record(cls, record: EmbeddingRecord, similarity: float) -> "SearchMatch":
        return cls(
            id=record.id,
            tenant_id=record.tenant_id,
            scope_id=record.scope_id,
            content_type=record.content_type,
            content_id=record.content_id,
            content=record.content,
            metadata=record.metadata,
            similarity=similarity,
            created_at=record.created_at,
        )


class StoreOutcome(str, Enum):
    STORED = "stored"
    EMBEDDING_UNAVAILABLE = "embedding_unavailable"


class StoreResult(BaseModel):
    """Tagged result of a store or refresh; embedding failures never raise."""

    outcome: StoreOutcome
    records: list[EmbeddingRecord] = Field(default_factory=list)
    error: str | None = None
    error_code: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is StoreOutcome.STORED

    @classmethod
    def stored(cls, records: list[EmbeddingRecord]) -> "StoreResult":
        return cls(outcome=StoreOutcome.STORED, records=records)

    @classmethod
    def embedding_unavailable(cls, error: str, error_code: str | None = None) -> "StoreResult":
        return cls(outcome=StoreOutcome.EMBEDDING_UNAVAILABLE, error=error, error_code=error_code)
