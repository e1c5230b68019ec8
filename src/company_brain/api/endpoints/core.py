"""Core API endpoints for Company Brain."""

from fastapi import APIRouter

from company_brain import __version__
from company_brain.core.config import settings
from company_brain.domain.models.utils import utc_now

router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint with application status."""
    return {
        "message": "Company Brain API",
        "version": __version__,
        "status": "running",
        "embedding_provider": settings.embedding_provider,
        "embedding_dimensions": settings.embedding_dimensions,
    }


@router.get("/health", operation_id="health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": utc_now().isoformat()}
