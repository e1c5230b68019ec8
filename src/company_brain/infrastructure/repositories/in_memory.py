"""Process-local embedding and source repositories.

Suitable for tests and single-process deployments with a small number of
vectors; ranking is a numpy pass over every candidate in scope.
"""

import asyncio
from collections.abc import Sequence
from enum import Enum
from typing import Any

from company_brain.domain.filters import FILTERABLE_COLUMNS, matches_metadata
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
from company_brain.domain.similarity import rank_records


def _column_value(record: EmbeddingRecord, field: str) -> Any:
    value = getattr(record, field)
    return value.value if isinstance(value, Enum) else value


def matches_filters(record: EmbeddingRecord, filters: dict[str, Any] | None) -> bool:
    """Same semantics as the Cypher filter compiler: equality, ``__in`` and ``__ne``."""
    for key, expected in (filters or {}).items():
        field, _, op = key.partition("__")
        if field not in FILTERABLE_COLUMNS:
            raise ValueError(f"Cannot filter on '{field}'")
        actual = _column_value(record, field)
        if not op and actual != expected:
            return False
        if op == "in" and actual not in expected:
            return False
        if op == "ne" and actual == expected:
            return False
        if op and op not in ("in", "ne"):
            raise ValueError(f"Unknown filter operator '{op}'")
    return True


class InMemoryEmbeddingRepository:
    """Embedding storage held in a dict per scope."""

    def __init__(self) -> None:
        self._tables: dict[EmbeddingScope, dict[str, EmbeddingRecord]] = {scope: {} for scope in EmbeddingScope}
        self._lock = asyncio.Lock()

    def records(self, scope: EmbeddingScope) -> list[EmbeddingRecord]:
        return list(self._tables[scope].values())

    async def insert(self, records: Sequence[EmbeddingRecord]) -> None:
        async with self._lock:
            for record in records:
                self._tables[record.scope][str(record.id)] = record.model_copy(deep=True)

    async def replace(self, key: EmbeddingKey, records: Sequence[EmbeddingRecord]) -> int:
        filters = {
            "tenant_id": key.tenant_id,
            "scope_id": key.scope_id,
            "content_type": key.content_type.value,
            "content_id": key.content_id,
        }
        async with self._lock:
            table = self._tables[key.scope]
            stale = [record_id for record_id, record in table.items() if matches_filters(record, filters)]
            for record_id in stale:
                del table[record_id]
            for record in records:
                table[str(record.id)] = record.model_copy(deep=True)
        return len(stale)

    async def delete_where(self, scope: EmbeddingScope, filters: dict[str, Any]) -> int:
        if not filters:
            raise ValueError("Refusing to delete without filters")
        async with self._lock:
            table = self._tables[scope]
            doomed = [record_id for record_id, record in table.items() if matches_filters(record, filters)]
            for record_id in doomed:
                del table[record_id]
        return len(doomed)

    async def rank(
        self,
        scope: EmbeddingScope,
        query_embedding: Sequence[float],
        *,
        filters: dict[str, Any],
        metadata_filters: dict[str, Any] | None = None,
        threshold: float | None = None,
        limit: int | None = None,
    ) -> list[tuple[EmbeddingRecord, float]]:
        candidates = [
            record
            for record in self._tables[scope].values()
            if matches_filters(record, filters) and matches_metadata(record.metadata, metadata_filters or {})
        ]
        ranked = rank_records(query_embedding, candidates, threshold=threshold, limit=limit)
        return [(record.model_copy(deep=True), score) for record, score in ranked]

    async def count(self, scope: EmbeddingScope, filters: dict[str, Any] | None = None) -> int:
        return sum(1 for record in self._tables[scope].values() if matches_filters(record, filters))


class InMemorySourceRepository:
    """Source rows held in lists; the application (or a test) fills them directly."""

    def __init__(
        self,
        brains: list[CompanyBrain] | None = None,
        brain_documents: list[BrainDocument] | None = None,
        projects: list[Project] | None = None,
        project_metadata: list[ProjectMetadata] | None = None,
        project_documents: list[ProjectDocument] | None = None,
    ) -> None:
        self.brains = brains or []
        self.brain_documents = brain_documents or []
        self.projects = projects or []
        self.project_metadata = project_metadata or []
        self.project_documents = project_documents or []

    async def list_company_brains(self) -> list[CompanyBrain]:
        return list(self.brains)

    async def list_brain_documents(
        self, tenant_id: str | None = None, include_deleted: bool = False
    ) -> list[BrainDocument]:
        return [
            doc
            for doc in self.brain_documents
            if tenant_id in (None, doc.tenant_id) and (include_deleted or not doc.is_deleted)
        ]

    async def list_projects(self) -> list[Project]:
        return list(self.projects)

    async def get_project(self, project_id: str) -> Project | None:
        return next((p for p in self.projects if p.id == project_id), None)

    async def get_project_metadata(self, project_id: str) -> ProjectMetadata | None:
        return next((m for m in self.project_metadata if m.project_id == project_id), None)

    async def list_project_documents(self, project_id: str, include_deleted: bool = False) -> list[ProjectDocument]:
        return [
            doc
            for doc in self.project_documents
            if doc.project_id == project_id and (include_deleted or not doc.is_deleted)
        ]

    async def get_project_document(self, document_id: str) -> ProjectDocument | None:
        return next((doc for doc in self.project_documents if doc.id == document_id), None)
