"""API dependencies."""

from fastapi import HTTPException

from company_brain.services import SourceRepository
from company_brain.services.embedding_store import EmbeddingStore
from company_brain.services.indexing_service import IndexingService
from company_brain.services.regeneration_jobs import RegenerationJob, RegenerationScheduler
from company_brain.services.search_service import SimilaritySearchService

# These will be set by the main.py lifespan
embedding_store: EmbeddingStore | None = None
search_service: SimilaritySearchService | None = None
indexing_service: IndexingService | None = None
source_repository: SourceRepository | None = None
regeneration_job: RegenerationJob | None = None
regeneration_scheduler: RegenerationScheduler | None = None


def get_embedding_store() -> EmbeddingStore:
    if embedding_store is None:
        raise HTTPException(status_code=503, detail="Embedding store not initialized")
    return embedding_store


def get_search_service() -> SimilaritySearchService:
    if search_service is None:
        raise HTTPException(status_code=503, detail="Search service not initialized")
    return search_service


def get_indexing_service() -> IndexingService:
    if indexing_service is None:
        raise HTTPException(status_code=503, detail="Indexing service not initialized")
    return indexing_service


def get_source_repository() -> SourceRepository:
    if source_repository is None:
        raise HTTPException(status_code=503, detail="Source repository not initialized")
    return source_repository


def get_regeneration_job() -> RegenerationJob:
    if regeneration_job is None:
        raise HTTPException(status_code=503, detail="Regeneration job not initialized")
    return regeneration_job


def get_regeneration_scheduler() -> RegenerationScheduler | None:
    """The scheduler is optional; ``None`` when nightly regeneration is disabled."""
    return regeneration_scheduler
