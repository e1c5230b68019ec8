"""Trace-tagged view of an error for logs and HTTP bodies."""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from structlog.typing import FilteringBoundLogger

from .base import ApplicationError, ErrorLevel


class ErrorContext:
    """One error plus where it surfaced (function, request path, ...)."""

    def __init__(self, error: Exception, trace_id: str | None = None, **context: Any):
        self.error = error
        self.trace_id = trace_id or str(uuid4())
        self.timestamp = datetime.now(UTC)
        self.context = context

    @property
    def code(self) -> str | None:
        return self.error.code.value if isinstance(self.error, ApplicationError) else None

    def level(self, default: ErrorLevel = ErrorLevel.ERROR) -> ErrorLevel:
        return self.error.level if isinstance(self.error, ApplicationError) else default

    def details(self) -> dict[str, Any]:
        if isinstance(self.error, ApplicationError):
            return self.error.details.model_dump(mode="json")
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Flat event fields; details and context keys are prefixed so they cannot clash."""
        flat: dict[str, Any] = {
            "error_type": type(self.error).__name__,
            "error_message": str(self.error),
            "error_code": self.code,
            "trace_id": self.trace_id,
            "timestamp": self.timestamp.isoformat(),
        }
        flat.update({f"details.{key}": value for key, value in self.details().items()})
        flat.update({f"context.{key}": value for key, value in self.context.items()})
        return flat

    def log(
        self,
        logger: FilteringBoundLogger,
        event: str,
        default_level: ErrorLevel = ErrorLevel.ERROR,
        exc_info: bool = False,
    ) -> None:
        logger.log(
            self.level(default_level).to_logging_level(),
            event,
            error_context=self.to_dict(),
            exc_info=exc_info,
        )

    def to_response(self) -> dict[str, Any]:
        """Body for an HTTP error response."""
        body: dict[str, Any] = {"error": str(self.error), "trace_id": self.trace_id}
        if self.code is not None:
            body["error_code"] = self.code
            body["details"] = self.details()
        return body
