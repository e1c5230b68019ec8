"""Service layer interfaces.

The services depend on these protocols only; concrete clients and
repositories are wired in ``company_brain.main`` (or by tests).
"""

from collections.abc import Sequence
from typing import Any, Literal, Protocol, runtime_checkable

from company_brain.domain.models import (
    BrainDocument,
    CompanyBrain,
    EmbeddingKey,
    EmbeddingRecord,
    EmbeddingScope,
    Project,
    ProjectDocument,
    ProjectMetadata,
)


EmbeddingPurpose = Literal["document", "query"]


@runtime_checkable
class EmbeddingClient(Protocol):
    """Narrow boundary around an embedding provider."""

    model: str
    dimensions: int

    async def embed(self, text: str, *, purpose: EmbeddingPurpose = "document") -> list[float]:
        """Embed one text; ``purpose`` lets providers tune query vs stored-content vectors.

        Raises:
            ConfigurationError: No credential configured
            ProviderError: Non-2xx response, malformed body or wrong vector length
        """
        ...

    async def aclose(self) -> None: ...


@runtime_checkable
class EmbeddingRepository(Protocol):
    """Storage for embedding records in both scopes."""

    async def insert(self, records: Sequence[EmbeddingRecord]) -> None: ...

    async def replace(self, key: EmbeddingKey, records: Sequence[EmbeddingRecord]) -> int:
        """Atomically drop every record under ``key`` and insert ``records``; returns the removed count."""
        ...

    async def delete_where(self, scope: EmbeddingScope, filters: dict[str, Any]) -> int: ...

    async def rank(
        self,
        scope: EmbeddingScope,
        query_embedding: Sequence[float],
        *,
        filters: dict[str, Any],
        metadata_filters: dict[str, Any] | None = None,
        threshold: float | None = None,
        limit: int | None = None,
    ) -> list[tuple[EmbeddingRecord, float]]: ...

    async def count(self, scope: EmbeddingScope, filters: dict[str, Any] | None = None) -> int: ...


@runtime_checkable
class SourceRepository(Protocol):
    """Read access to the application's source rows."""

    async def list_company_brains(self) -> list[CompanyBrain]: ...

    async def list_brain_documents(
        self, tenant_id: str | None = None, include_deleted: bool = False
    ) -> list[BrainDocument]:
        """Documents of one tenant, or of every tenant when ``tenant_id`` is None."""
        ...

    async def list_projects(self) -> list[Project]: ...

    async def get_project(self, project_id: str) -> Project | None: ...

    async def get_project_metadata(self, project_id: str) -> ProjectMetadata | None: ...

    async def list_project_documents(self, project_id: str, include_deleted: bool = False) -> list[ProjectDocument]: ...

    async def get_project_document(self, document_id: str) -> ProjectDocument | None: ...


__all__ = ["EmbeddingClient", "EmbeddingPurpose", "EmbeddingRepository", "SourceRepository"]
