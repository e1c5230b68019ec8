"""Embedding write and delete endpoints."""

from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from company_brain.api.dependencies import get_embedding_store, get_indexing_service, get_source_repository
from company_brain.core.errors import ValidationError
from company_brain.domain.models import (
    ContentType,
    EmbeddingRecord,
    EmbeddingScope,
    StoreOutcome,
)
from company_brain.services import SourceRepository
from company_brain.services.embedding_store import EmbeddingStore
from company_brain.services.indexing_service import IndexingService

router = APIRouter(prefix="/embeddings", tags=["embeddings"])


class StoreRequest(BaseModel):
    scope: EmbeddingScope = EmbeddingScope.COMPANY
    tenant_id: str = Field(min_length=1)
    scope_id: str | None = None
    content_type: ContentType
    content_id: str | None = None
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    embedding: list[float] | None = None


class StoreResponse(BaseModel):
    outcome: StoreOutcome
    ids: list[str] = Field(default_factory=list)
    error: str | None = None
    error_code: str | None = None


class DeleteResponse(BaseModel):
    deleted: int


class GenerateRequest(BaseModel):
    """Which project row to (re)embed; ``company_id`` is the owning tenant."""

    type: Literal["metadata", "document"]
    project_id: str = Field(min_length=1)
    company_id: str = Field(min_length=1)
    document_id: str | None = None


class GenerateResponse(BaseModel):
    type: Literal["metadata", "document"]
    project_name: str
    file_name: str | None = None
    stored: int = 0
    removed: int = 0
    warnings: list[str] = Field(default_factory=list)


def _scope(value: str) -> EmbeddingScope:
    try:
        return EmbeddingScope.parse(value)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=f"Unknown scope '{value}'") from e


@router.post("", response_model=StoreResponse, operation_id="store_embedding")
async def store_embedding(
    request: StoreRequest,
    store: EmbeddingStore = Depends(get_embedding_store),
) -> StoreResponse:
    """Store one record; an embedding outage is reported in the body, not as an error status."""
    try:
        record = EmbeddingRecord(**request.model_dump())
    except PydanticValidationError as e:
        raise ValidationError(str(e.errors()[0]["msg"]), {"source": "embeddings_api", "operation": "store"}) from e

    result = await store.store(record)
    return StoreResponse(
        outcome=result.outcome,
        ids=[str(r.id) for r in result.records],
        error=result.error,
        error_code=result.error_code,
    )


@router.post("/generate", response_model=GenerateResponse, operation_id="generate_project_embedding")
async def generate_project_embedding(
    request: GenerateRequest,
    sources: SourceRepository = Depends(get_source_repository),
    indexer: IndexingService = Depends(get_indexing_service),
) -> GenerateResponse:
    """Re-embed a project's metadata or one of its documents from the stored rows.

    Replaces whatever embedding the row had before. A provider outage comes
    back as a warning with nothing changed.
    """
    project = await sources.get_project(request.project_id)
    if project is None or project.tenant_id != request.company_id:
        raise HTTPException(status_code=404, detail=f"Project '{request.project_id}' not found")

    file_name = None
    if request.type == "metadata":
        metadata = await sources.get_project_metadata(project.id)
        if metadata is None:
            raise HTTPException(status_code=404, detail=f"Project '{project.id}' has no metadata")
        report = await indexer.index_project_metadata(metadata, project)
    else:
        if not request.document_id:
            raise ValidationError(
                "document_id is required for document embeddings",
                {"source": "embeddings_api", "operation": "generate", "field": "document_id"},
            )
        doc = await sources.get_project_document(request.document_id)
        if doc is None or doc.project_id != project.id:
            raise HTTPException(status_code=404, detail=f"Document '{request.document_id}' not found")
        file_name = doc.file_name
        report = await indexer.index_project_document(doc, project)

    return GenerateResponse(
        type=request.type,
        project_name=project.project_name,
        file_name=file_name,
        stored=report.stored,
        removed=report.removed,
        warnings=report.warnings,
    )

@router.delete("/{scope}/content/{content_id}", response_model=DeleteResponse, operation_id="delete_by_content")
async def delete_by_content_id(
    scope: str,
    content_id: str,
    store: EmbeddingStore = Depends(get_embedding_store),
) -> DeleteResponse:
    return DeleteResponse(deleted=await store.delete_by_content_id(_scope(scope), content_id))


@router.delete("/{scope}/tenants/{tenant_id}", response_model=DeleteResponse, operation_id="delete_by_tenant")
async def delete_for_tenant(
    scope: str,
    tenant_id: str,
    scope_id: str | None = None,
    content_type: ContentType | None = None,
    store: EmbeddingStore = Depends(get_embedding_store),
) -> DeleteResponse:
    """Delete a tenant's records, narrowed by project and/or content type."""
    target = _scope(scope)
    if content_type is not None:
        deleted = await store.delete_by_type(tenant_id, scope_id, content_type, scope=target)
    elif scope_id is not None:
        if target is not EmbeddingScope.PROJECT:
            raise ValidationError(
                "scope_id only applies to project_scope", {"source": "embeddings_api", "operation": "delete"}
            )
        deleted = await store.delete_by_scope(tenant_id, scope_id)
    else:
        deleted = await store.delete_by_tenant(tenant_id, target)
    return DeleteResponse(deleted=deleted)
