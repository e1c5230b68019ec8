"""Similarity search over stored embeddings."""

from collections.abc import Sequence
from typing import Any

from company_brain.core.base import ValidationErrorDetails
from company_brain.core.constants import SEARCH_LIMIT_DEFAULT, SIMILARITY_THRESHOLD_DEFAULT
from company_brain.core.errors import ConfigurationError, PersistenceError, ProviderError, ValidationError
from company_brain.core.logging import get_logger
from company_brain.domain.filters import split_filter
from company_brain.domain.models import ContentType, EmbeddingScope, SearchMatch
from company_brain.services import EmbeddingClient, EmbeddingRepository

logger = get_logger(__name__)


class SimilaritySearchService:
    """Ranks stored records by cosine similarity to a query.

    Covers company brain search (company scope), per-project search
    (project scope with ``scope_id``) and cross-project search within a
    company (project scope without ``scope_id``). Every query is scoped to
    one tenant.
    """

    def __init__(
        self,
        client: EmbeddingClient,
        repository: EmbeddingRepository,
        dimensions: int,
        default_threshold: float = SIMILARITY_THRESHOLD_DEFAULT,
        default_limit: int = SEARCH_LIMIT_DEFAULT,
    ):
        self.client = client
        self.repository = repository
        self.dimensions = dimensions
        self.default_threshold = default_threshold
        self.default_limit = default_limit

    async def search(
        self,
        tenant_id: str,
        query: str,
        threshold: float | None = None,
        limit: int | None = None,
        scope: EmbeddingScope = EmbeddingScope.COMPANY,
        scope_id: str | None = None,
        content_type: ContentType | None = None,
    ) -> list[SearchMatch]:
        """Natural-language search for interactive callers.

        Returns [] and logs when the query cannot be embedded or the ranking
        query fails; nothing but a malformed request is raised.

        Raises:
            ValidationError: Blank tenant or non-positive limit
        """
        if not tenant_id:
            raise ValidationError("tenant_id is required", ValidationErrorDetails(
                source="search_service", operation="search", field="tenant_id", constraint="non-empty"
            ))
        threshold = self.default_threshold if threshold is None else threshold
        limit = self.default_limit if limit is None else limit
        if limit <= 0:
            raise ValidationError("limit must be positive", ValidationErrorDetails(
                source="search_service", operation="search", field="limit", actual_value=limit, constraint="> 0"
            ))

        try:
            query_embedding = await self.client.embed(query, purpose="query")
        except (ConfigurationError, ProviderError, ValidationError) as e:
            logger.error(
                "Search query could not be embedded, returning no results",
                tenant_id=tenant_id,
                scope=scope.value,
                error=e.message,
                error_code=e.code.value,
            )
            return []

        filters: dict[str, Any] = {"tenant_id": tenant_id}
        if scope_id is not None:
            filters["scope_id"] = scope_id
        if content_type is not None:
            filters["content_type"] = content_type.value

        try:
            ranked = await self.repository.rank(
                scope, query_embedding, filters=filters, threshold=threshold, limit=limit
            )
        except PersistenceError as e:
            logger.error(
                "Similarity ranking failed, returning no results",
                tenant_id=tenant_id,
                scope=scope.value,
                scope_id=scope_id,
                error=e.message,
                error_code=e.code.value,
            )
            return []

        logger.info(
            "Search complete",
            tenant_id=tenant_id,
            scope=scope.value,
            scope_id=scope_id,
            threshold=threshold,
            matches=len(ranked),
        )
        return [SearchMatch.from_record(record, similarity) for record, similarity in ranked]

    async def match(
        self,
        scope: EmbeddingScope,
        query_embedding: Sequence[float],
        match_count: int,
        filter: dict[str, Any] | None = None,
    ) -> list[SearchMatch]:
        """Rank by a caller-supplied vector, best ``match_count`` first, no threshold."""
        if not query_embedding:
            raise ValidationError("query_embedding must be a non-empty array", ValidationErrorDetails(
                source="search_service", operation="match", field="query_embedding", constraint="non-empty"
            ))
        if len(query_embedding) != self.dimensions:
            raise ValidationError(
                f"query_embedding has {len(query_embedding)} dimensions, expected {self.dimensions}",
                ValidationErrorDetails(
                    source="search_service",
                    operation="match",
                    field="query_embedding",
                    actual_value=len(query_embedding),
                    constraint=f"length == {self.dimensions}",
                ),
            )
        if match_count <= 0:
            raise ValidationError("match_count must be a positive integer", ValidationErrorDetails(
                source="search_service", operation="match", field="match_count", actual_value=match_count
            ))

        columns, metadata = split_filter(filter)
        ranked = await self.repository.rank(
            scope,
            query_embedding,
            filters=columns,
            metadata_filters=metadata or None,
            limit=match_count,
        )
        return [SearchMatch.from_record(record, similarity) for record, similarity in ranked]
