"""Checks shared by every embedding provider client."""

from typing import Any

from company_brain.core.base import AIServiceErrorDetails, ErrorCode
from company_brain.core.errors import ConfigurationError, ProviderError, ValidationError


def require_api_key(api_key: str, provider: str, setting: str) -> None:
    if not api_key:
        raise ConfigurationError(
            message=f"{provider} API key not configured",
            details={
                "source": f"{provider.lower()}_embedding",
                "operation": "embed",
                "setting": setting,
            },
        )


def require_text(text: str, provider: str) -> None:
    if not text or not text.strip():
        raise ValidationError(
            message="Cannot embed empty text",
            details={"source": f"{provider.lower()}_embedding", "operation": "embed", "field": "text"},
        )


def checked_vector(values: Any, *, provider: str, model: str, dimensions: int, endpoint: str | None) -> list[float]:
    """Validate a provider vector: a non-empty list of numbers of the configured length."""
    if not isinstance(values, list) or not values or not all(isinstance(v, int | float) for v in values):
        raise ProviderError(
            message=f"{provider} returned a malformed embedding payload",
            details=AIServiceErrorDetails(
                source=f"{provider.lower()}_embedding",
                operation="embed",
                service_name=provider,
                endpoint=endpoint,
                status_code=200,
                model_name=model,
            ),
        )
    if len(values) != dimensions:
        raise ProviderError(
            message=f"{provider} returned {len(values)} dimensions, expected {dimensions}",
            code=ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
            details=AIServiceErrorDetails(
                source=f"{provider.lower()}_embedding",
                operation="embed",
                service_name=provider,
                endpoint=endpoint,
                status_code=200,
                model_name=model,
                expected_dimensions=dimensions,
                actual_dimensions=len(values),
            ),
        )
    return [float(v) for v in values]
