"""Gemini (httpx MockTransport) and Voyage (stubbed SDK client) embedding clients."""

import json
from types import SimpleNamespace

import httpx
import pytest
import voyageai.error

from company_brain.core.base import ErrorCode
from company_brain.core.config import Settings
from company_brain.core.errors import ConfigurationError, ProviderError, ValidationError
from company_brain.infrastructure.embeddings.factory import create_embedding_client
from company_brain.infrastructure.embeddings.gemini import GeminiEmbeddingService
from company_brain.infrastructure.embeddings.voyage import VoyageEmbeddingService

_DIMS = 4


def _gemini(handler, api_key: str = "test-key") -> GeminiEmbeddingService:
    return GeminiEmbeddingService(
        api_key=api_key,
        model="text-embedding-004",
        dimensions=_DIMS,
        base_url="https://gemini.test/v1beta",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


def _ok(values):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"embedding": {"values": values}})

    return handler


# ---------------------------------------------------------------------------
# Gemini
# ---------------------------------------------------------------------------


async def test_gemini_sends_one_request_and_returns_vector():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"embedding": {"values": [0.1, 0.2, 0.3, 0.4]}})

    client = _gemini(handler)
    vector = await client.embed("hello world", purpose="query")

    assert vector == [0.1, 0.2, 0.3, 0.4]
    assert len(seen) == 1
    request = seen[0]
    assert request.url.path == "/v1beta/models/text-embedding-004:embedContent"
    assert request.headers["x-goog-api-key"] == "test-key"
    body = json.loads(request.content)
    assert body["content"] == {"parts": [{"text": "hello world"}]}
    assert body["taskType"] == "RETRIEVAL_QUERY"
    assert body["outputDimensionality"] == _DIMS
    await client.aclose()


async def test_gemini_missing_key_is_configuration_error():
    client = _gemini(_ok([0.0] * _DIMS), api_key="")
    with pytest.raises(ConfigurationError):
        await client.embed("hello")


async def test_gemini_rejects_blank_text():
    client = _gemini(_ok([0.0] * _DIMS))
    with pytest.raises(ValidationError):
        await client.embed("   ")


async def test_gemini_non_success_status_is_provider_error():
    client = _gemini(lambda request: httpx.Response(429, json={"error": {"message": "quota"}}))
    with pytest.raises(ProviderError) as exc_info:
        await client.embed("hello")
    assert exc_info.value.status_code == 429


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"embedding": {}}),
        httpx.Response(200, json={"embedding": {"values": ["a", "b", "c", "d"]}}),
        httpx.Response(200, json={"embedding": {"values": []}}),
    ],
)
async def test_gemini_malformed_body_is_provider_error(response):
    client = _gemini(lambda request: response)
    with pytest.raises(ProviderError):
        await client.embed("hello")


async def test_gemini_wrong_length_is_dimension_mismatch():
    client = _gemini(_ok([0.1, 0.2]))
    with pytest.raises(ProviderError) as exc_info:
        await client.embed("hello")
    assert exc_info.value.code is ErrorCode.EMBEDDING_DIMENSION_MISMATCH


async def test_gemini_transport_failure_is_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    client = _gemini(handler)
    with pytest.raises(ProviderError):
        await client.embed("hello")


# ---------------------------------------------------------------------------
# Voyage
# ---------------------------------------------------------------------------


class StubVoyageClient:
    def __init__(self, embeddings=None, error: Exception | None = None):
        self.embeddings = embeddings
        self.error = error
        self.calls: list[dict] = []

    async def embed(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(embeddings=self.embeddings)


async def test_voyage_passes_input_type_and_returns_vector():
    stub = StubVoyageClient(embeddings=[[1, 2, 3, 4]])
    client = VoyageEmbeddingService(api_key="vk", model="voyage-3", dimensions=_DIMS, client=stub)

    assert await client.embed("hello", purpose="query") == [1.0, 2.0, 3.0, 4.0]
    assert stub.calls == [{"texts": ["hello"], "model": "voyage-3", "input_type": "query"}]


async def test_voyage_sdk_error_is_provider_error():
    stub = StubVoyageClient(error=voyageai.error.VoyageError("service unavailable"))
    client = VoyageEmbeddingService(api_key="vk", dimensions=_DIMS, client=stub)
    with pytest.raises(ProviderError):
        await client.embed("hello")


async def test_voyage_empty_response_is_provider_error():
    client = VoyageEmbeddingService(api_key="vk", dimensions=_DIMS, client=StubVoyageClient(embeddings=[]))
    with pytest.raises(ProviderError):
        await client.embed("hello")


async def test_voyage_missing_key_is_configuration_error():
    client = VoyageEmbeddingService(api_key="", dimensions=_DIMS)
    with pytest.raises(ConfigurationError):
        await client.embed("hello")


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def test_factory_builds_configured_provider():
    gemini = create_embedding_client(Settings(embedding_provider="gemini", gemini_api_key="k"))
    assert isinstance(gemini, GeminiEmbeddingService)
    assert gemini.dimensions == 768

    voyage = create_embedding_client(
        Settings(embedding_provider="voyage", voyage_api_key="k", embedding_dimensions=1024)
    )
    assert isinstance(voyage, VoyageEmbeddingService)
    assert voyage.dimensions == 1024
