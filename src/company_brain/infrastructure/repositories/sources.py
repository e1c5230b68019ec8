"""Neo4j-backed reads of the application's source nodes."""

from typing import Any, TypeVar

from neo4j import AsyncDriver, AsyncSession
from neo4j.exceptions import DriverError, Neo4jError
from pydantic import BaseModel

from company_brain.core.base import DatabaseErrorDetails
from company_brain.core.decorators import with_session
from company_brain.core.errors import PersistenceError
from company_brain.domain.models import (
    BrainDocument,
    CompanyBrain,
    Project,
    ProjectDocument,
    ProjectMetadata,
)
from company_brain.infrastructure.neo4j.queries import SourceQueries

M = TypeVar("M", bound=BaseModel)


class Neo4jSourceRepository:
    """Reads ``CompanyBrain``, ``BrainDocument``, ``Project``, ``ProjectMetadata`` and ``ProjectDocument`` nodes."""

    def __init__(self, driver: AsyncDriver):
        self.driver = driver

    async def _fetch(self, session: AsyncSession, model: type[M], query: Any, params: dict[str, Any]) -> list[M]:
        try:
            result = await session.run(query, **params)
            rows = await result.data()
        except (Neo4jError, DriverError) as e:
            raise PersistenceError(
                message=f"Failed to read {model.__name__} rows: {e!s}",
                details=DatabaseErrorDetails(
                    source="neo4j_source_repository",
                    operation="read",
                    service_name="neo4j",
                    query_type="read",
                    table=model.__name__,
                ),
            ) from e
        return [model.model_validate(row["row"]) for row in rows]

    @with_session()
    async def list_company_brains(self, session: AsyncSession) -> list[CompanyBrain]:
        query, params = SourceQueries.list_company_brains()
        return await self._fetch(session, CompanyBrain, query, params)

    @with_session()
    async def list_brain_documents(
        self, session: AsyncSession, tenant_id: str | None = None, include_deleted: bool = False
    ) -> list[BrainDocument]:
        query, params = SourceQueries.list_brain_documents(tenant_id, include_deleted)
        return await self._fetch(session, BrainDocument, query, params)

    @with_session()
    async def list_projects(self, session: AsyncSession) -> list[Project]:
        query, params = SourceQueries.list_projects()
        return await self._fetch(session, Project, query, params)

    @with_session()
    async def get_project(self, session: AsyncSession, project_id: str) -> Project | None:
        query, params = SourceQueries.get_project(project_id)
        rows = await self._fetch(session, Project, query, params)
        return rows[0] if rows else None

    @with_session()
    async def get_project_metadata(self, session: AsyncSession, project_id: str) -> ProjectMetadata | None:
        query, params = SourceQueries.get_project_metadata(project_id)
        rows = await self._fetch(session, ProjectMetadata, query, params)
        return rows[0] if rows else None

    @with_session()
    async def list_project_documents(
        self, session: AsyncSession, project_id: str, include_deleted: bool = False
    ) -> list[ProjectDocument]:
        query, params = SourceQueries.list_project_documents(project_id, include_deleted)
        return await self._fetch(session, ProjectDocument, query, params)

    @with_session()
    async def get_project_document(self, session: AsyncSession, document_id: str) -> ProjectDocument | None:
        query, params = SourceQueries.get_project_document(document_id)
        rows = await self._fetch(session, ProjectDocument, query, params)
        return rows[0] if rows else None
