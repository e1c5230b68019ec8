"""Neo4j-backed embedding repository.

Records of each scope live on their own label (``CompanyEmbedding``,
``ProjectEmbedding``). Neo4j properties cannot hold maps, so the metadata bag
is stored as a JSON string; timestamps are stored as epoch seconds.
"""

import json
from collections.abc import Sequence
from typing import Any

from neo4j import AsyncDriver, AsyncManagedTransaction, AsyncSession
from neo4j.exceptions import ClientError, DriverError, Neo4jError

from company_brain.core.base import DatabaseErrorDetails, ErrorLevel
from company_brain.core.decorators import with_error_handling, with_session
from company_brain.core.errors import PersistenceError, RankingUnavailableError
from company_brain.core.logging import get_logger
from company_brain.domain.filters import matches_metadata
from company_brain.domain.models import EmbeddingKey, EmbeddingRecord, EmbeddingScope
from company_brain.domain.models.utils import from_epoch
from company_brain.infrastructure.neo4j.filter_compiler import compile_filters
from company_brain.infrastructure.neo4j.queries import GDS_COSINE, EmbeddingQueries

logger = get_logger(__name__)

RANKING_HINT = (
    f"Install the Neo4j Graph Data Science plugin so that {GDS_COSINE}() is available, "
    "then restart the database."
)


def record_to_properties(record: EmbeddingRecord) -> dict[str, Any]:
    """Convert to a Neo4j-compatible property dict (no nulls, no maps)."""
    props: dict[str, Any] = {
        "id": str(record.id),
        "tenant_id": record.tenant_id,
        "scope_id": record.scope_id,
        "content_type": record.content_type.value,
        "content_id": record.content_id,
        "content": record.content,
        "metadata": json.dumps(record.metadata, default=str),
        "embedding": record.embedding,
        "created_at": record.created_at.timestamp(),
        "updated_at": record.updated_at.timestamp(),
    }
    return {key: value for key, value in props.items() if value is not None}


def properties_to_record(scope: EmbeddingScope, props: dict[str, Any]) -> EmbeddingRecord:
    data = dict(props)
    data["scope"] = scope
    data["metadata"] = json.loads(data.get("metadata") or "{}")
    for field in ("created_at", "updated_at"):
        if isinstance(data.get(field), int | float):
            data[field] = from_epoch(data[field])
    return EmbeddingRecord.model_validate(data)


def _key_filters(key: EmbeddingKey) -> dict[str, Any]:
    return {
        "tenant_id": key.tenant_id,
        "scope_id": key.scope_id,
        "content_type": key.content_type.value,
        "content_id": key.content_id,
    }


class Neo4jEmbeddingRepository:
    """Embedding storage and cosine ranking in Neo4j."""

    def __init__(self, driver: AsyncDriver):
        self.driver = driver

    def _error(self, e: Exception, scope: EmbeddingScope, operation: str) -> PersistenceError:
        details = DatabaseErrorDetails(
            source="neo4j_embedding_repository",
            operation=operation,
            service_name="neo4j",
            query_type=operation,
            table=scope.value,
        )
        if isinstance(e, ClientError) and "Unknown function" in (e.message or ""):
            return RankingUnavailableError(
                message=f"Similarity function {GDS_COSINE} is not available in the database",
                hint=RANKING_HINT,
                details=details,
            )
        return PersistenceError(message=f"Neo4j {operation} failed: {e!s}", details=details)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    @with_session()
    async def insert(self, session: AsyncSession, records: Sequence[EmbeddingRecord]) -> None:
        by_scope: dict[EmbeddingScope, list[dict[str, Any]]] = {}
        for record in records:
            by_scope.setdefault(record.scope, []).append(record_to_properties(record))

        for scope, rows in by_scope.items():
            try:
                result = await session.run(EmbeddingQueries.insert(scope), rows=rows)
                await result.consume()
            except (Neo4jError, DriverError) as e:
                raise self._error(e, scope, "insert") from e
            logger.debug("Inserted embeddings", scope=scope.value, count=len(rows))

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    @with_session()
    async def replace(self, session: AsyncSession, key: EmbeddingKey, records: Sequence[EmbeddingRecord]) -> int:
        condition, params = compile_filters(_key_filters(key))
        rows = [record_to_properties(record) for record in records]

        async def _replace(tx: AsyncManagedTransaction) -> int:
            result = await tx.run(EmbeddingQueries.delete_where(key.scope, condition), **params)
            row = await result.single()
            if rows:
                created = await tx.run(EmbeddingQueries.insert(key.scope), rows=rows)
                await created.consume()
            return row["deleted"] if row else 0

        try:
            deleted = await session.execute_write(_replace)
        except (Neo4jError, DriverError) as e:
            raise self._error(e, key.scope, "replace") from e

        logger.debug(
            "Replaced embeddings",
            scope=key.scope.value,
            content_type=key.content_type.value,
            content_id=key.content_id,
            deleted=deleted,
            inserted=len(rows),
        )
        return deleted

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    @with_session()
    async def delete_where(self, session: AsyncSession, scope: EmbeddingScope, filters: dict[str, Any]) -> int:
        if not filters:
            raise ValueError("Refusing to delete without filters")
        condition, params = compile_filters(filters)
        try:
            result = await session.run(EmbeddingQueries.delete_where(scope, condition), **params)
            row = await result.single()
        except (Neo4jError, DriverError) as e:
            raise self._error(e, scope, "delete") from e
        return row["deleted"] if row else 0

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    @with_session()
    async def rank(
        self,
        session: AsyncSession,
        scope: EmbeddingScope,
        query_embedding: Sequence[float],
        *,
        filters: dict[str, Any],
        metadata_filters: dict[str, Any] | None = None,
        threshold: float | None = None,
        limit: int | None = None,
    ) -> list[tuple[EmbeddingRecord, float]]:
        condition, params = compile_filters(filters)
        # Metadata lives in a JSON string, so those filters run after ranking
        limited = limit is not None and not metadata_filters
        query = EmbeddingQueries.rank(scope, condition, limited=limited)

        try:
            result = await session.run(
                query,
                query_embedding=list(query_embedding),
                threshold=threshold,
                limit=limit,
                **params,
            )
            rows = await result.data()
        except (Neo4jError, DriverError) as e:
            raise self._error(e, scope, "rank") from e

        ranked: list[tuple[EmbeddingRecord, float]] = []
        for row in rows:
            record = properties_to_record(scope, row["node"])
            if metadata_filters and not matches_metadata(record.metadata, metadata_filters):
                continue
            ranked.append((record, float(row["similarity"])))
            if limit is not None and len(ranked) >= limit:
                break
        return ranked

    @with_session()
    async def count(self, session: AsyncSession, scope: EmbeddingScope, filters: dict[str, Any] | None = None) -> int:
        condition, params = compile_filters(filters)
        try:
            result = await session.run(EmbeddingQueries.count(scope, condition), **params)
            row = await result.single()
        except (Neo4jError, DriverError) as e:
            raise self._error(e, scope, "count") from e
        return row["total"] if row else 0
