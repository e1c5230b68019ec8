import json
import logging

from fastapi import Request

from company_brain.core.base import ApplicationError, ErrorCode, ErrorLevel
from company_brain.core.error_context import ErrorContext
from company_brain.core.errors import (
    ConfigurationError,
    PersistenceError,
    ProviderError,
    RankingUnavailableError,
    ValidationError,
)
from company_brain.core.handlers import (
    application_error_handler,
    persistence_error_handler,
    validation_error_handler,
)


def test_taxonomy_codes_and_levels():
    assert ConfigurationError("no key").code is ErrorCode.CONFIG_MISSING
    assert ConfigurationError("no key").level is ErrorLevel.WARNING
    assert ProviderError("bad gateway").code is ErrorCode.EMBEDDING_FAILED
    assert PersistenceError("down").code is ErrorCode.DB_QUERY
    assert ValidationError("bad").code is ErrorCode.INVALID_REQUEST


def test_ranking_unavailable_is_a_persistence_error_with_hint():
    error = RankingUnavailableError("missing function", hint="install GDS")
    assert isinstance(error, PersistenceError)
    assert error.code is ErrorCode.DB_FUNCTION_MISSING
    assert error.hint == "install GDS"


def test_dict_details_become_error_details():
    error = ApplicationError(
        "boom", ErrorCode.PROCESSING_FAILED, details={"source": "store", "operation": "refresh"}
    )
    assert error.details.source == "store"
    assert error.details.operation == "refresh"


def test_error_context_flattens_details():
    error = ProviderError("Gemini API error: 500", details={"source": "gemini_embedding", "operation": "embed"})
    flat = ErrorContext(error, function="embed").to_dict()
    assert flat["error_code"] == ErrorCode.EMBEDDING_FAILED.value
    assert flat["details.source"] == "gemini_embedding"
    assert flat["context.function"] == "embed"


def test_dimension_mismatch_at_startup_is_an_invalid_configuration():
    error = ConfigurationError("index holds 1024-dimension vectors", code=ErrorCode.CONFIG_INVALID)
    assert error.code is ErrorCode.CONFIG_INVALID
    assert error.details.source == "unknown"


def test_error_context_for_plain_exception_has_no_code():
    ctx = ErrorContext(RuntimeError("socket closed"), path="/api/v1/search")
    assert ctx.code is None
    assert ctx.level() is ErrorLevel.ERROR
    assert ctx.to_response() == {"error": "socket closed", "trace_id": ctx.trace_id}
    assert ctx.to_dict()["context.path"] == "/api/v1/search"


def test_error_context_logs_at_the_error_level():
    calls = []

    class RecordingLogger:
        def log(self, level, event, **kw):
            calls.append((level, event, kw))

    ErrorContext(ConfigurationError("GEMINI_API_KEY is not set")).log(RecordingLogger(), "Embedding unavailable")
    level, event, kw = calls[0]
    assert level == logging.WARNING
    assert event == "Embedding unavailable"
    assert kw["error_context"]["error_code"] == ErrorCode.CONFIG_MISSING.value


def _request(path: str) -> Request:
    return Request({"type": "http", "method": "POST", "path": path, "headers": [], "query_string": b""})


async def test_handlers_shape_error_bodies():
    rejected = await validation_error_handler(_request("/api/v1/match-documents"), ValidationError("bad table"))
    assert rejected.status_code == 400
    assert json.loads(rejected.body) == {"error": "bad table"}

    missing = await persistence_error_handler(
        _request("/api/v1/match-documents"), RankingUnavailableError("no cosine", hint="install GDS")
    )
    body = json.loads(missing.body)
    assert missing.status_code == 500
    assert body["hint"] == "install GDS"
    assert body["error_code"] == ErrorCode.DB_FUNCTION_MISSING.value

    failed = await application_error_handler(_request("/api/v1/search"), ConfigurationError("no key"))
    assert failed.status_code == 500
    assert json.loads(failed.body)["error_code"] == ErrorCode.CONFIG_MISSING.value
