"""Domain models for Company Brain."""

from .embedding import (
    ALLOWED_CONTENT_TYPES,
    ContentType,
    EmbeddingKey,
    EmbeddingRecord,
    EmbeddingScope,
    SearchMatch,
    StoreOutcome,
    StoreResult,
)
from .sources import (
    BrainDocument,
    CompanyBrain,
    Project,
    ProjectDocument,
    ProjectMetadata,
)

__all__ = [
    "ALLOWED_CONTENT_TYPES",
    # Sources
    "BrainDocument",
    "CompanyBrain",
    # Embeddings
    "ContentType",
    "EmbeddingKey",
    "EmbeddingRecord",
    "EmbeddingScope",
    "Project",
    "ProjectDocument",
    "ProjectMetadata",
    "SearchMatch",
    "StoreOutcome",
    "StoreResult",
]
