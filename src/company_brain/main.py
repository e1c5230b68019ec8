"""Company Brain FastAPI application.

Wires the embedding client, Neo4j repositories and services into the API
and runs the nightly regeneration scheduler for the application lifetime.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import logfire
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from company_brain import __version__
from company_brain.api import dependencies
from company_brain.api import router as api_router
from company_brain.api.endpoints import core
from company_brain.core.config import Settings, settings
from company_brain.core.handlers import register_exception_handlers
from company_brain.core.logging import get_logger, setup_logging
from company_brain.infrastructure.embeddings.factory import create_embedding_client
from company_brain.infrastructure.neo4j.driver import create_neo4j_driver, ensure_schema
from company_brain.infrastructure.repositories import Neo4jEmbeddingRepository, Neo4jSourceRepository
from company_brain.services import EmbeddingClient, EmbeddingRepository, SourceRepository
from company_brain.services.embedding_store import EmbeddingStore
from company_brain.services.indexing_service import IndexingService
from company_brain.services.regeneration_jobs import RegenerationJob, RegenerationScheduler
from company_brain.services.search_service import SimilaritySearchService

logfire.configure(
    service_name="company-brain",
    send_to_logfire="if-token-present",
    token=settings.logfire_token.get_secret_value() if settings.logfire_token else None,
)
setup_logging(debug=settings.debug, json_logs=settings.json_logs)
logger = get_logger(__name__)


def configure_services(
    client: EmbeddingClient,
    embeddings: EmbeddingRepository,
    sources: SourceRepository,
    config: Settings | None = None,
) -> RegenerationJob:
    """Build the services on top of the given collaborators and publish them to the API."""
    config = config or settings

    store = EmbeddingStore(client, embeddings, dimensions=config.embedding_dimensions)
    indexer = IndexingService(store, chunk_size=config.chunk_max_size)
    job = RegenerationJob(sources, indexer)

    dependencies.embedding_store = store
    dependencies.indexing_service = indexer
    dependencies.source_repository = sources
    dependencies.regeneration_job = job
    dependencies.search_service = SimilaritySearchService(
        client,
        embeddings,
        dimensions=config.embedding_dimensions,
        default_threshold=config.search_default_threshold,
        default_limit=config.search_default_limit,
    )
    return job


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Application lifecycle: database, embedding client, services, scheduler."""
    logger.info("Starting Company Brain", version=__version__)

    async with create_neo4j_driver() as driver:
        await ensure_schema(driver, dimensions=settings.embedding_dimensions)

        client = create_embedding_client()
        job = configure_services(client, Neo4jEmbeddingRepository(driver), Neo4jSourceRepository(driver))

        scheduler: RegenerationScheduler | None = None
        if settings.regeneration_enabled:
            scheduler = RegenerationScheduler(
                job, hour=settings.regeneration_hour, minute=settings.regeneration_minute
            )
            await scheduler.start()
            dependencies.regeneration_scheduler = scheduler
        else:
            logger.info("Nightly regeneration disabled by configuration")

        logger.info("Company Brain started")
        try:
            yield
        finally:
            logger.info("Shutting down Company Brain")
            if scheduler:
                await scheduler.shutdown()
            await client.aclose()
            dependencies.regeneration_scheduler = None

    logger.info("Company Brain shutdown complete")


# Create FastAPI app with lifespan management
app = FastAPI(
    title="Company Brain API",
    description="Embedding storage and similarity search over company and project knowledge",
    version=__version__,
    lifespan=lifespan,
)

# Enable FastAPI instrumentation for request tracing
logfire.instrument_fastapi(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(api_router, prefix="/api/v1")
app.include_router(core.router)


if __name__ == "__main__":
    uvicorn.run("company_brain.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info", access_log=True)
