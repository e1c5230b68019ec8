"""Application-facing hooks that keep embeddings in step with source rows.

The application calls these after its own save or delete has committed. An
embedding failure never fails the caller; it comes back as a warning on the
returned ``IndexingReport``.
"""

from typing import Any

from pydantic import BaseModel, Field

from company_brain.core.constants import CHUNK_MAX_SIZE_DEFAULT
from company_brain.core.logging import get_logger
from company_brain.domain import content as prep
from company_brain.domain.chunking import chunk_text
from company_brain.domain.models import (
    BrainDocument,
    CompanyBrain,
    ContentType,
    EmbeddingKey,
    EmbeddingScope,
    Project,
    ProjectDocument,
    ProjectMetadata,
    StoreResult,
)
from company_brain.services.embedding_store import EmbeddingStore

logger = get_logger(__name__)


class IndexingReport(BaseModel):
    stored: int = 0
    removed: int = 0
    warnings: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings

    def add(self, label: str, result: StoreResult) -> StoreResult:
        if result.ok:
            self.stored += len(result.records)
        else:
            self.warnings.append(f"{label}: {result.error}")
        return result

    def merge(self, other: "IndexingReport") -> None:
        self.stored += other.stored
        self.removed += other.removed
        self.warnings.extend(other.warnings)


class IndexingService:
    def __init__(self, store: EmbeddingStore, chunk_size: int = CHUNK_MAX_SIZE_DEFAULT):
        self.store = store
        self.chunk_size = chunk_size

    def _chunks(self, text: str | None, **extra: Any) -> list[tuple[str, dict[str, Any]]]:
        pieces = [chunk for chunk in chunk_text(text or "", self.chunk_size) if chunk.strip()]
        return [(piece, prep.chunk_metadata(i, len(pieces), **extra)) for i, piece in enumerate(pieces)]

    async def index_company_info(self, brain: CompanyBrain) -> IndexingReport:
        """Refresh the company_info record and the additional_context chunks of one company brain."""
        report = await self.index_company_profile(brain)
        report.merge(await self.index_additional_context(brain))
        logger.info("Indexed company brain", tenant_id=brain.tenant_id, stored=report.stored, ok=report.ok)
        return report

    async def index_company_profile(self, brain: CompanyBrain) -> IndexingReport:
        report = IndexingReport()
        key = EmbeddingKey(EmbeddingScope.COMPANY, brain.tenant_id, None, ContentType.COMPANY_INFO, brain.id)
        info = prep.prepare_company_info(brain)
        contents = [(info, prep.company_info_metadata(brain))] if info else []
        report.add("company_info", await self.store.refresh(key, contents))
        return report

    async def index_additional_context(self, brain: CompanyBrain) -> IndexingReport:
        """Re-chunk the free-text field; an empty field clears its chunks."""
        report = IndexingReport()
        key = EmbeddingKey(EmbeddingScope.COMPANY, brain.tenant_id, None, ContentType.ADDITIONAL_CONTEXT, brain.id)
        chunks = self._chunks(brain.additional_context, source="company_brain_additional_context")
        report.add("additional_context", await self.store.refresh(key, chunks))
        return report

    async def index_company_document(self, doc: BrainDocument) -> IndexingReport:
        report = IndexingReport()
        key = EmbeddingKey(EmbeddingScope.COMPANY, doc.tenant_id, None, ContentType.DOCUMENT, doc.id)
        if doc.is_deleted:
            report.removed = await self.store.delete_by_content_id(EmbeddingScope.COMPANY, doc.id)
            return report
        contents = [(prep.prepare_document(doc), prep.document_metadata(doc))]
        report.add(f"document {doc.id}", await self.store.refresh(key, contents))
        return report

    async def index_project_document(self, doc: ProjectDocument, project: Project) -> IndexingReport:
        report = IndexingReport()
        key = EmbeddingKey(EmbeddingScope.PROJECT, doc.tenant_id, project.id, ContentType.DOCUMENT, doc.id)
        if doc.is_deleted:
            report.removed = await self.store.delete_by_content_id(EmbeddingScope.PROJECT, doc.id)
            return report
        contents = [
            (
                prep.prepare_document(doc, project.project_name),
                prep.document_metadata(doc, project.project_name),
            )
        ]
        report.add(f"document {doc.id}", await self.store.refresh(key, contents))
        return report

    async def index_project_metadata(self, metadata: ProjectMetadata, project: Project) -> IndexingReport:
        """Refresh the project_metadata record; its content_id is the project id."""
        report = IndexingReport()
        key = EmbeddingKey(
            EmbeddingScope.PROJECT, project.tenant_id, project.id, ContentType.PROJECT_METADATA, project.id
        )
        text = prep.prepare_project_metadata(metadata, project.project_name)
        contents = [(text, prep.project_metadata_metadata(project))] if text else []
        report.add("project_metadata", await self.store.refresh(key, contents))
        return report

    async def index_document_text(self, doc: ProjectDocument, text: str, project: Project) -> IndexingReport:
        """Chunk text the caller extracted from a project document into document_chunk records.

        No extraction happens here; an empty ``text`` clears the document's chunks.
        """
        report = IndexingReport()
        key = EmbeddingKey(EmbeddingScope.PROJECT, doc.tenant_id, project.id, ContentType.DOCUMENT_CHUNK, doc.id)
        chunks = self._chunks(text, file_name=doc.file_name, project_name=project.project_name)
        report.add(f"document_chunk {doc.id}", await self.store.refresh(key, chunks))
        return report

    async def remove_document(self, scope: EmbeddingScope, document_id: str) -> IndexingReport:
        return IndexingReport(removed=await self.store.delete_by_content_id(scope, document_id))

    async def remove_project(self, tenant_id: str, project_id: str) -> IndexingReport:
        return IndexingReport(removed=await self.store.delete_by_scope(tenant_id, project_id))

    async def clear_content_type(
        self, tenant_id: str, content_type: ContentType, scope_id: str | None = None
    ) -> IndexingReport:
        return IndexingReport(removed=await self.store.delete_by_type(tenant_id, scope_id, content_type))
