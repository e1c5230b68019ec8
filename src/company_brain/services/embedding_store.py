"""Embedding Store: embeds content and keeps the embedding tables current."""

import asyncio
from collections import Counter
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any

from company_brain.core.base import ErrorLevel
from company_brain.core.decorators import with_error_handling
from company_brain.core.errors import ConfigurationError, ProviderError, ValidationError
from company_brain.core.logging import get_logger
from company_brain.domain.models import (
    ContentType,
    EmbeddingKey,
    EmbeddingRecord,
    EmbeddingScope,
    StoreResult,
)
from company_brain.services import EmbeddingClient, EmbeddingRepository

logger = get_logger(__name__)


class EmbeddingStore:
    """Writes and deletes embedding records.

    Embedding failures are reported through ``StoreResult`` rather than
    raised, so an application save never fails because the provider did.
    Persistence failures propagate.
    """

    def __init__(self, client: EmbeddingClient, repository: EmbeddingRepository, dimensions: int):
        self.client = client
        self.repository = repository
        self.dimensions = dimensions
        self._locks: dict[EmbeddingKey, asyncio.Lock] = {}
        self._lock_users: Counter[EmbeddingKey] = Counter()

    @asynccontextmanager
    async def _key_lock(self, key: EmbeddingKey) -> AsyncIterator[None]:
        """Serialise refreshes of one key; the lock is dropped when its last user leaves."""
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    def check_dimensions(self, vector: Sequence[float]) -> None:
        if len(vector) != self.dimensions:
            raise ValidationError(
                message=f"Embedding has {len(vector)} dimensions, expected {self.dimensions}",
                details={"source": "embedding_store", "operation": "check_dimensions"},
            )

    async def _embed(self, content: str) -> list[float]:
        return await self.client.embed(content, purpose="document")

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def store(self, record: EmbeddingRecord) -> StoreResult:
        """Insert one record, embedding its content first when no vector is attached.

        Does not remove earlier records for the same key; use ``refresh`` for that.
        """
        if record.embedding is not None:
            self.check_dimensions(record.embedding)
        else:
            try:
                embedding = await self._embed(record.content)
            except (ConfigurationError, ProviderError) as e:
                logger.warning(
                    "Embedding unavailable, record not stored",
                    scope=record.scope.value,
                    content_type=record.content_type.value,
                    content_id=record.content_id,
                    error=e.message,
                )
                return StoreResult.embedding_unavailable(e.message, e.code.value)
            record = record.model_copy(update={"embedding": embedding})

        await self.repository.insert([record])
        logger.info(
            "Stored embedding",
            scope=record.scope.value,
            tenant_id=record.tenant_id,
            content_type=record.content_type.value,
            content_id=record.content_id,
        )
        return StoreResult.stored([record])

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def refresh(self, key: EmbeddingKey, contents: Sequence[tuple[str, dict[str, Any]]]) -> StoreResult:
        """Make ``contents`` the only records under ``key``.

        Every piece is embedded before anything is written; if any embedding
        fails the existing records are left untouched. An empty ``contents``
        clears the key.
        """
        async with self._key_lock(key):
            records: list[EmbeddingRecord] = []
            for content, metadata in contents:
                try:
                    embedding = await self._embed(content)
                except (ConfigurationError, ProviderError) as e:
                    logger.warning(
                        "Embedding unavailable, keeping previous records",
                        scope=key.scope.value,
                        content_type=key.content_type.value,
                        content_id=key.content_id,
                        error=e.message,
                    )
                    return StoreResult.embedding_unavailable(e.message, e.code.value)
                records.append(
                    EmbeddingRecord(
                        scope=key.scope,
                        tenant_id=key.tenant_id,
                        scope_id=key.scope_id,
                        content_type=key.content_type,
                        content_id=key.content_id,
                        content=content,
                        metadata=metadata,
                        embedding=embedding,
                    )
                )

            removed = await self.repository.replace(key, records)

        logger.info(
            "Refreshed embeddings",
            scope=key.scope.value,
            tenant_id=key.tenant_id,
            content_type=key.content_type.value,
            content_id=key.content_id,
            removed=removed,
            stored=len(records),
        )
        return StoreResult.stored(records)

    async def _delete(self, scope: EmbeddingScope, filters: dict[str, Any]) -> int:
        deleted = await self.repository.delete_where(scope, filters)
        logger.info("Deleted embeddings", scope=scope.value, filters=filters, deleted=deleted)
        return deleted

    async def delete_by_scope(self, tenant_id: str, scope_id: str) -> int:
        """Remove every project-scope record of one project."""
        return await self._delete(EmbeddingScope.PROJECT, {"tenant_id": tenant_id, "scope_id": scope_id})

    async def delete_by_type(
        self,
        tenant_id: str,
        scope_id: str | None,
        content_type: ContentType,
        scope: EmbeddingScope | None = None,
    ) -> int:
        """Remove every record of one content type within a company or project.

        The scope is inferred from ``scope_id`` unless given.
        """
        if scope is None:
            scope = EmbeddingScope.PROJECT if scope_id else EmbeddingScope.COMPANY
        filters: dict[str, Any] = {"tenant_id": tenant_id, "content_type": content_type.value}
        if scope is EmbeddingScope.PROJECT and scope_id is not None:
            filters["scope_id"] = scope_id
        return await self._delete(scope, filters)

    async def delete_by_content_id(self, scope: EmbeddingScope, content_id: str) -> int:
        """Remove the records built from one source row."""
        return await self._delete(scope, {"content_id": content_id})

    async def delete_by_tenant(self, tenant_id: str, scope: EmbeddingScope | None = None) -> int:
        """Remove a tenant's records from one scope, or from both."""
        scopes = [scope] if scope else list(EmbeddingScope)
        deleted = 0
        for target in scopes:
            deleted += await self._delete(target, {"tenant_id": tenant_id})
        return deleted
