"""Similarity search endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from company_brain.api.dependencies import get_search_service
from company_brain.core.base import ValidationErrorDetails
from company_brain.core.errors import ValidationError
from company_brain.core.logging import get_logger
from company_brain.domain.models import ContentType, EmbeddingScope, SearchMatch
from company_brain.services.search_service import SimilaritySearchService

logger = get_logger(__name__)

router = APIRouter(tags=["search"])

VALID_TABLES = [scope.value for scope in EmbeddingScope]


class MatchDocumentsResponse(BaseModel):
    matches: list[SearchMatch]


class SearchRequest(BaseModel):
    tenant_id: str = Field(min_length=1)
    query: str
    threshold: float | None = Field(default=None, ge=-1.0, le=1.0)
    limit: int | None = Field(default=None, gt=0)
    scope: EmbeddingScope = EmbeddingScope.COMPANY
    scope_id: str | None = None
    content_type: ContentType | None = None


class SearchResponse(BaseModel):
    matches: list[SearchMatch]
    count: int


def _invalid(message: str, field: str, value: Any = None) -> ValidationError:
    return ValidationError(
        message,
        ValidationErrorDetails(source="match_documents", operation="validate", field=field, actual_value=value),
    )


def parse_match_request(body: Any) -> tuple[EmbeddingScope, list[float], int, dict[str, Any]]:
    """Validate a raw match-documents body.

    Raises:
        ValidationError: Missing or invalid table, query_embedding, match_count or filter
    """
    if not isinstance(body, dict):
        raise _invalid("Request body must be a JSON object", "body")

    table = body.get("table")
    if not table:
        raise _invalid("Missing required field: table", "table")
    try:
        scope = EmbeddingScope.parse(table) if isinstance(table, str) else None
    except ValueError:
        scope = None
    if scope is None:
        raise _invalid(f"Invalid table name. Must be one of: {', '.join(VALID_TABLES)}", "table", table)

    embedding = body.get("query_embedding")
    if (
        not isinstance(embedding, list)
        or not embedding
        or not all(isinstance(v, int | float) and not isinstance(v, bool) for v in embedding)
    ):
        raise _invalid("Missing or invalid query_embedding array", "query_embedding")

    match_count = body.get("match_count")
    if not isinstance(match_count, int) or isinstance(match_count, bool) or match_count < 1:
        raise _invalid("match_count must be a positive integer", "match_count", match_count)

    filter_ = body.get("filter") or {}
    if not isinstance(filter_, dict):
        raise _invalid("filter must be an object", "filter", filter_)

    return scope, [float(v) for v in embedding], match_count, filter_


@router.post("/match-documents", response_model=MatchDocumentsResponse, operation_id="match_documents")
async def match_documents(
    body: Any = Body(...),
    service: SimilaritySearchService = Depends(get_search_service),
) -> MatchDocumentsResponse:
    """Rank stored records against a precomputed query embedding."""
    scope, embedding, match_count, filter_ = parse_match_request(body)
    logger.info("match-documents request", table=scope.value, match_count=match_count, filter=filter_)
    matches = await service.match(scope, embedding, match_count, filter_)
    logger.info("match-documents complete", matches=len(matches))
    return MatchDocumentsResponse(matches=matches)


@router.post("/search", response_model=SearchResponse, operation_id="search")
async def search(
    request: SearchRequest,
    service: SimilaritySearchService = Depends(get_search_service),
) -> SearchResponse:
    """Natural-language search; an embedding outage yields no matches rather than an error."""
    matches = await service.search(
        tenant_id=request.tenant_id,
        query=request.query,
        threshold=request.threshold,
        limit=request.limit,
        scope=request.scope,
        scope_id=request.scope_id,
        content_type=request.content_type,
    )
    return SearchResponse(matches=matches, count=len(matches))
