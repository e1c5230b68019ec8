"""Google Gemini embedding client over plain HTTP."""

import time

import httpx

from company_brain.core.base import AIServiceErrorDetails
from company_brain.core.config import settings
from company_brain.core.errors import ProviderError
from company_brain.core.logging import get_logger
from company_brain.infrastructure.embeddings.base import checked_vector, require_api_key, require_text
from company_brain.services import EmbeddingPurpose

logger = get_logger(__name__)

_TASK_TYPES = {
    "document": "RETRIEVAL_DOCUMENT",
    "query": "RETRIEVAL_QUERY",
}


class GeminiEmbeddingService:
    """Calls ``models/{model}:embedContent`` once per text.

    No retries and no caching: one outbound request per ``embed`` call. A
    missing key is only reported when ``embed`` is called, so the service
    can start without credentials.
    """

    provider = "Gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        dimensions: int | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Gemini embedding client.

        Args:
            api_key: Overrides ``settings.gemini_api_key``
            model: Overrides ``settings.gemini_embedding_model``
            dimensions: Vector length to request and enforce
            base_url: Overrides ``settings.gemini_base_url``
            timeout: Seconds before an outbound call is abandoned
            transport: Custom httpx transport (tests use ``httpx.MockTransport``)
        """
        self.api_key = api_key if api_key is not None else settings.gemini_api_key.get_secret_value()
        self.model = model or settings.gemini_embedding_model
        self.dimensions = dimensions or settings.embedding_dimensions
        self.client = httpx.AsyncClient(
            base_url=base_url or settings.gemini_base_url,
            timeout=timeout or settings.embedding_timeout_seconds,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return f"/models/{self.model}:embedContent"

    def _details(self, status_code: int | None, latency_ms: float | None = None) -> AIServiceErrorDetails:
        return AIServiceErrorDetails(
            source="gemini_embedding",
            operation="embed",
            service_name=self.provider,
            endpoint=self.endpoint,
            status_code=status_code,
            latency_ms=latency_ms,
            model_name=self.model,
        )

    async def embed(self, text: str, *, purpose: EmbeddingPurpose = "document") -> list[float]:
        require_api_key(self.api_key, self.provider, "GEMINI_API_KEY")
        require_text(text, self.provider)

        payload = {
            "model": f"models/{self.model}",
            "content": {"parts": [{"text": text}]},
            "taskType": _TASK_TYPES[purpose],
            "outputDimensionality": self.dimensions,
        }

        started = time.perf_counter()
        try:
            response = await self.client.post(
                self.endpoint,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
            )
        except httpx.HTTPError as e:
            raise ProviderError(
                message=f"Gemini request failed: {e!s}",
                details=self._details(status_code=None),
            ) from e
        latency_ms = (time.perf_counter() - started) * 1000

        if not response.is_success:
            logger.warning(
                "Gemini embedding request rejected",
                status_code=response.status_code,
                latency_ms=round(latency_ms, 1),
            )
            raise ProviderError(
                message=f"Gemini API error: {response.status_code}",
                details=self._details(response.status_code, latency_ms),
            )

        try:
            values = response.json()["embedding"]["values"]
        except (ValueError, KeyError, TypeError) as e:
            raise ProviderError(
                message="Gemini returned a malformed embedding payload",
                details=self._details(response.status_code, latency_ms),
            ) from e

        return checked_vector(
            values,
            provider=self.provider,
            model=self.model,
            dimensions=self.dimensions,
            endpoint=self.endpoint,
        )

    async def aclose(self) -> None:
        await self.client.aclose()
