"""Neo4j repository behaviour against a scripted session; no database needed."""

from datetime import UTC, datetime

import pytest
from neo4j.exceptions import ServiceUnavailable

from company_brain.core.errors import PersistenceError
from company_brain.domain.models import ContentType, EmbeddingRecord, EmbeddingScope, Project
from company_brain.infrastructure.neo4j.queries import EmbeddingQueries
from company_brain.infrastructure.repositories.embedding import (
    Neo4jEmbeddingRepository,
    properties_to_record,
    record_to_properties,
)
from company_brain.infrastructure.repositories.sources import Neo4jSourceRepository


class FakeResult:
    def __init__(self, rows):
        self.rows = rows

    async def data(self):
        return self.rows

    async def single(self):
        return self.rows[0] if self.rows else None

    async def consume(self):
        return None


class FakeSession:
    def __init__(self, rows=None, error: Exception | None = None):
        self.rows = rows or []
        self.error = error
        self.runs: list[tuple[str, dict]] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return None

    async def run(self, query, **params):
        self.runs.append((query, params))
        if self.error is not None:
            raise self.error
        return FakeResult(self.rows)


class FakeDriver:
    def __init__(self, session: FakeSession):
        self._session = session

    def session(self):
        return self._session


def _record(**kwargs) -> EmbeddingRecord:
    defaults = {
        "scope": EmbeddingScope.PROJECT,
        "tenant_id": "t1",
        "scope_id": "p1",
        "content_type": ContentType.DOCUMENT,
        "content_id": "d1",
        "content": "File: brief.docx",
        "metadata": {"category": "brief"},
        "embedding": [1.0, 0.0],
        "created_at": datetime(2024, 5, 1, tzinfo=UTC),
    }
    return EmbeddingRecord(**{**defaults, **kwargs})


def test_properties_are_neo4j_safe_and_reversible():
    record = _record(scope=EmbeddingScope.COMPANY, scope_id=None)
    props = record_to_properties(record)

    assert "scope_id" not in props
    assert props["metadata"] == '{"category": "brief"}'
    assert isinstance(props["created_at"], float)

    restored = properties_to_record(EmbeddingScope.COMPANY, props)
    assert restored.model_dump(exclude={"updated_at"}) == record.model_dump(exclude={"updated_at"})


def test_rank_query_orders_by_similarity_then_recency():
    query = EmbeddingQueries.rank(EmbeddingScope.PROJECT, "e.tenant_id = $p_0", limited=True)
    assert "MATCH (e:ProjectEmbedding)" in query
    assert "gds.similarity.cosine(e.embedding, $query_embedding)" in query
    assert "ORDER BY similarity DESC, node.created_at DESC" in query
    assert "LIMIT $limit" in query


async def test_rank_applies_metadata_filters_after_query():
    rows = [
        {"node": record_to_properties(_record(content_id="d1", metadata={"category": "memo"})), "similarity": 0.9},
        {"node": record_to_properties(_record(content_id="d2")), "similarity": 0.8},
    ]
    session = FakeSession(rows)
    repo = Neo4jEmbeddingRepository(FakeDriver(session))

    ranked = await repo.rank(
        EmbeddingScope.PROJECT,
        [1.0, 0.0],
        filters={"tenant_id": "t1"},
        metadata_filters={"category": "brief"},
        limit=1,
    )

    assert [(r.content_id, s) for r, s in ranked] == [("d2", 0.8)]
    query, params = session.runs[0]
    assert "LIMIT" not in query
    assert params["p_0"] == "t1"


async def test_driver_failures_become_persistence_errors():
    repo = Neo4jEmbeddingRepository(FakeDriver(FakeSession(error=ServiceUnavailable("connection refused"))))
    with pytest.raises(PersistenceError):
        await repo.count(EmbeddingScope.COMPANY, {"tenant_id": "t1"})


async def test_delete_requires_filters():
    repo = Neo4jEmbeddingRepository(FakeDriver(FakeSession()))
    with pytest.raises(ValueError):
        await repo.delete_where(EmbeddingScope.COMPANY, {})


async def test_brain_documents_of_every_tenant_when_no_tenant_given():
    session = FakeSession()
    repo = Neo4jSourceRepository(FakeDriver(session))

    await repo.list_brain_documents(include_deleted=True)

    query, params = session.runs[0]
    assert "$tenant_id IS NULL" in query
    assert params == {"tenant_id": None, "include_deleted": True}


async def test_get_project_returns_first_row_or_none():
    session = FakeSession([{"row": {"id": "proj-web", "tenant_id": "t1", "project_name": "Website"}}])
    repo = Neo4jSourceRepository(FakeDriver(session))

    assert await repo.get_project("proj-web") == Project(id="proj-web", tenant_id="t1", project_name="Website")
    assert session.runs[0][1] == {"project_id": "proj-web"}
    assert await Neo4jSourceRepository(FakeDriver(FakeSession())).get_project_document("nope") is None
