"""Voyage AI embedding service."""

from typing import Any

import voyageai
import voyageai.error

from company_brain.core.base import AIServiceErrorDetails
from company_brain.core.config import settings
from company_brain.core.errors import ProviderError
from company_brain.core.logging import get_logger
from company_brain.infrastructure.embeddings.base import checked_vector, require_api_key, require_text
from company_brain.services import EmbeddingPurpose

logger = get_logger(__name__)


class VoyageEmbeddingService:
    """Voyage AI embedding service implementation.

    Set ``EMBEDDING_DIMENSIONS`` to the model's output size (1024 for
    voyage-3); vectors of any other length are rejected.
    """

    provider = "Voyage AI"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        dimensions: int | None = None,
        timeout: float | None = None,
        client: Any | None = None,
    ) -> None:
        """Initialize the Voyage embedding service.

        Args:
            api_key: Overrides ``settings.voyage_api_key``
            model: Overrides ``settings.voyage_model``
            dimensions: Vector length to enforce
            timeout: Seconds before an outbound call is abandoned
            client: Pre-built ``voyageai.AsyncClient`` (tests inject a stub)
        """
        self.api_key = api_key if api_key is not None else settings.voyage_api_key.get_secret_value()
        self.model = model or settings.voyage_model
        self.dimensions = dimensions or settings.embedding_dimensions
        # voyageai client doesn't expose a public type, so we use Any here
        self.client: Any = client
        if self.client is None and self.api_key:
            self.client = voyageai.AsyncClient(
                api_key=self.api_key,
                max_retries=0,
                timeout=timeout or settings.embedding_timeout_seconds,
            )

    def _details(self, status_code: int | None) -> AIServiceErrorDetails:
        return AIServiceErrorDetails(
            source="voyage_embedding",
            operation="embed",
            service_name=self.provider,
            endpoint="/embeddings",
            status_code=status_code,
            model_name=self.model,
        )

    async def embed(self, text: str, *, purpose: EmbeddingPurpose = "document") -> list[float]:
        require_api_key(self.api_key, self.provider, "VOYAGE_API_KEY")
        require_text(text, self.provider)

        try:
            response = await self.client.embed(texts=[text], model=self.model, input_type=purpose)
        except voyageai.error.VoyageError as e:
            status_code = getattr(e, "http_status", None)
            logger.warning("Voyage embedding request failed", status_code=status_code, error=e)
            raise ProviderError(
                message=f"Voyage API error: {e!s}",
                details=self._details(status_code),
            ) from e

        embeddings = getattr(response, "embeddings", None)
        if not embeddings:
            raise ProviderError(
                message="Voyage returned no embeddings",
                details=self._details(200),
            )

        return checked_vector(
            embeddings[0],
            provider=self.provider,
            model=self.model,
            dimensions=self.dimensions,
            endpoint="/embeddings",
        )

    async def aclose(self) -> None:
        # voyageai.AsyncClient holds no connection that needs closing
        return None
