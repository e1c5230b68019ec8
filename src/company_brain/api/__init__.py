"""API module."""

from fastapi import APIRouter

from .endpoints import admin, embeddings, search

router = APIRouter()

# Include endpoint routers
router.include_router(search.router)
router.include_router(embeddings.router)
router.include_router(admin.router)
