"""Error levels, codes and structured details shared by every application error."""

import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from logfire.integrations.pydantic import PluginSettings
from pydantic import BaseModel, ConfigDict, Field, field_serializer


class ErrorLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_logging_level(self) -> int:
        """Stdlib logging level with the same name."""
        return logging.getLevelNamesMapping()[self.name]


class ErrorCode(str, Enum):
    """Stable codes carried in logs and error responses."""

    # Requests (1xxx)
    INVALID_REQUEST = "1001"
    PROCESSING_FAILED = "1004"

    # Configuration (2xxx)
    CONFIG_MISSING = "2001"
    CONFIG_INVALID = "2002"

    # Persistence (3xxx)
    DB_CONNECTION = "3001"
    DB_QUERY = "3002"
    DB_FUNCTION_MISSING = "3006"

    # Embedding provider (4xxx)
    EMBEDDING_FAILED = "4003"
    EMBEDDING_DIMENSION_MISMATCH = "4004"


class ErrorDetails(BaseModel, plugin_settings=PluginSettings(logfire={"record": "all"})):
    """Where an error happened; extra keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    source: str = Field(description="Component or module where the error occurred")
    operation: str = Field(description="Operation being performed when the error occurred")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_serializer("timestamp")
    def serialize_timestamp(self, timestamp: datetime) -> str:
        return timestamp.isoformat()


class ValidationErrorDetails(ErrorDetails):
    field: str | None = Field(None, description="Request field that failed validation")
    actual_value: Any = Field(None, description="Value that failed validation")
    constraint: str | None = Field(None, description="Constraint that was violated")


class ServiceErrorDetails(ErrorDetails):
    """Details for a failed call to an external service"""

    service_name: str = Field(description="Name of the service that failed")
    endpoint: str | None = Field(None, description="Service endpoint that was called")
    status_code: int | None = Field(None, description="HTTP or service status code")
    latency_ms: float | None = Field(None, description="Response time in milliseconds")


class DatabaseErrorDetails(ServiceErrorDetails):
    query_type: str | None = Field(None, description="Type of query (rank, insert, delete, etc.)")
    table: str | None = Field(None, description="Logical embedding table (scope) involved")


class AIServiceErrorDetails(ServiceErrorDetails):
    model_name: str | None = Field(None, description="Embedding model name")
    expected_dimensions: int | None = Field(None, description="Configured vector length")
    actual_dimensions: int | None = Field(None, description="Vector length the provider returned")


def coerce_details(details: ErrorDetails | dict[str, Any] | None) -> ErrorDetails:
    """Accept a details model, a plain dict (``source``/``operation`` keys optional) or nothing."""
    if isinstance(details, ErrorDetails):
        return details
    fields = dict(details or {})
    fields.setdefault("source", "unknown")
    fields.setdefault("operation", "unknown")
    return ErrorDetails(**fields)


class ApplicationError(Exception):
    """Base class for all application errors"""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        level: ErrorLevel = ErrorLevel.ERROR,
        details: ErrorDetails | dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.level = level
        self.details = coerce_details(details)
        super().__init__(message)
