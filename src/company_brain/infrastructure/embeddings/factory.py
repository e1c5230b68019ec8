"""Construction of the configured embedding client.

Callers only ever see the ``EmbeddingClient`` protocol, so switching provider
(and with it the vector length) is a configuration change.
"""

from __future__ import annotations

from company_brain.core.config import Settings, settings
from company_brain.core.constants import MODEL_DIMENSIONS
from company_brain.core.errors import ConfigurationError
from company_brain.core.logging import get_logger
from company_brain.infrastructure.embeddings.gemini import GeminiEmbeddingService
from company_brain.infrastructure.embeddings.voyage import VoyageEmbeddingService
from company_brain.services import EmbeddingClient

logger = get_logger(__name__)


def create_embedding_client(config: Settings | None = None) -> EmbeddingClient:
    """Build the embedding client selected by ``embedding_provider``.

    Raises:
        ConfigurationError: If the provider name is unknown
    """
    config = config or settings

    client: EmbeddingClient
    if config.embedding_provider == "gemini":
        client = GeminiEmbeddingService(
            api_key=config.gemini_api_key.get_secret_value(),
            model=config.gemini_embedding_model,
            dimensions=config.embedding_dimensions,
            base_url=config.gemini_base_url,
            timeout=config.embedding_timeout_seconds,
        )
    elif config.embedding_provider == "voyage":
        client = VoyageEmbeddingService(
            api_key=config.voyage_api_key.get_secret_value(),
            model=config.voyage_model,
            dimensions=config.embedding_dimensions,
            timeout=config.embedding_timeout_seconds,
        )
    else:
        raise ConfigurationError(
            message=f"Unknown embedding provider '{config.embedding_provider}'",
            details={"source": "embedding_factory", "operation": "create_embedding_client"},
        )

    native = MODEL_DIMENSIONS.get(client.model)
    if native is not None and native != config.embedding_dimensions and config.embedding_provider == "voyage":
        logger.warning(
            "Configured dimensions differ from the model's output size; every embed call will fail",
            model=client.model,
            model_dimensions=native,
            embedding_dimensions=config.embedding_dimensions,
        )
    if not config.active_api_key:
        logger.warning("Embedding API key not configured; embedding calls will be refused", provider=config.embedding_provider)  # noqa: E501

    logger.info("Embedding client ready", provider=config.embedding_provider, model=client.model, dimensions=config.embedding_dimensions)  # noqa: E501
    return client
