"""Shared fixtures: a deterministic embedding client and in-memory repositories.

No test touches the network or a Neo4j server.
"""

import os
import re
import zlib

os.environ.setdefault("LOGFIRE_SEND_TO_LOGFIRE", "false")
os.environ.setdefault("REGENERATION_ENABLED", "false")

import pytest

from company_brain.core.errors import ProviderError
from company_brain.domain.models import (
    BrainDocument,
    CompanyBrain,
    Project,
    ProjectDocument,
    ProjectMetadata,
)
from company_brain.infrastructure.repositories import InMemoryEmbeddingRepository, InMemorySourceRepository
from company_brain.services.embedding_store import EmbeddingStore
from company_brain.services.indexing_service import IndexingService
from company_brain.services.search_service import SimilaritySearchService

DIMS = 16


class FakeEmbeddingClient:
    """Bag-of-words hashing embedder.

    Texts sharing words get similar vectors. ``vectors`` overrides the
    embedding of exact texts; setting ``error`` makes every call raise it.
    """

    model = "fake-embedding"

    def __init__(self, dimensions: int = DIMS):
        self.dimensions = dimensions
        self.vectors: dict[str, list[float]] = {}
        self.error: Exception | None = None
        self.calls: list[tuple[str, str]] = []

    async def embed(self, text: str, *, purpose: str = "document") -> list[float]:
        self.calls.append((text, purpose))
        if self.error is not None:
            raise self.error
        if text in self.vectors:
            return list(self.vectors[text])
        vector = [0.0] * self.dimensions
        for word in re.findall(r"[a-z0-9]+", text.lower()):
            vector[zlib.crc32(word.encode()) % self.dimensions] += 1.0
        return vector

    def fail_with(self, message: str = "Gemini API error: 503") -> None:
        self.error = ProviderError(message=message, details={"source": "fake", "operation": "embed"})

    async def aclose(self) -> None:
        return None


@pytest.fixture
def fake_client() -> FakeEmbeddingClient:
    return FakeEmbeddingClient()


@pytest.fixture
def embedding_repo() -> InMemoryEmbeddingRepository:
    return InMemoryEmbeddingRepository()


@pytest.fixture
def store(fake_client, embedding_repo) -> EmbeddingStore:
    return EmbeddingStore(fake_client, embedding_repo, dimensions=DIMS)


@pytest.fixture
def search_service(fake_client, embedding_repo) -> SimilaritySearchService:
    return SimilaritySearchService(fake_client, embedding_repo, dimensions=DIMS)


@pytest.fixture
def indexer(store) -> IndexingService:
    return IndexingService(store, chunk_size=200)


@pytest.fixture
def acme_brain() -> CompanyBrain:
    return CompanyBrain(
        id="brain-acme",
        tenant_id="tenant-acme",
        company_name="Acme",
        industry="Robotics",
        core_values=["Safety", "Craft"],
        additional_context="Acme builds warehouse robots.\n\nFounded in 2012 in Lyon.",
    )


@pytest.fixture
def website_project() -> Project:
    return Project(id="proj-web", tenant_id="tenant-acme", project_name="Website Relaunch", status="active")


@pytest.fixture
def source_repo(acme_brain, website_project) -> InMemorySourceRepository:
    return InMemorySourceRepository(
        brains=[acme_brain],
        brain_documents=[
            BrainDocument(
                id="doc-handbook",
                tenant_id="tenant-acme",
                file_name="handbook.pdf",
                file_type="application/pdf",
                description="Employee handbook",
                tags=["hr", "policy"],
            ),
            BrainDocument(
                id="doc-old",
                tenant_id="tenant-acme",
                file_name="old.pdf",
                file_type="application/pdf",
                is_deleted=True,
            ),
        ],
        projects=[website_project],
        project_metadata=[
            ProjectMetadata(
                id="meta-web",
                project_id="proj-web",
                tenant_id="tenant-acme",
                project_description="Rebuild the marketing site",
                tech_stack=["Next.js", "Tailwind"],
            )
        ],
        project_documents=[
            ProjectDocument(
                id="pdoc-brief",
                project_id="proj-web",
                tenant_id="tenant-acme",
                file_name="brief.docx",
                file_type="application/msword",
                description="Creative brief",
            ),
        ],
    )
