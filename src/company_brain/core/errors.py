"""Specific error types for the Company Brain application."""

from .base import (
    AIServiceErrorDetails,
    ApplicationError,
    DatabaseErrorDetails,
    ErrorCode,
    ErrorDetails,
    ErrorLevel,
    ServiceErrorDetails,
    ValidationErrorDetails,
)


class ConfigurationError(ApplicationError):
    """A required credential or setting is missing or does not fit the deployment.

    Fatal to the operation that needed it, never to the process.
    """

    def __init__(
        self,
        message: str,
        details: ErrorDetails | dict | None = None,
        code: ErrorCode = ErrorCode.CONFIG_MISSING,
    ):
        super().__init__(
            message=message,
            code=code,
            level=ErrorLevel.WARNING,
            details=details,
        )


class ProviderError(ApplicationError):
    """The embedding provider answered with a non-2xx status or an unusable body."""

    def __init__(
        self,
        message: str,
        details: AIServiceErrorDetails | ServiceErrorDetails | dict | None = None,
        code: ErrorCode = ErrorCode.EMBEDDING_FAILED,
    ):
        super().__init__(
            message=message,
            code=code,
            level=ErrorLevel.ERROR,
            details=details
            or ServiceErrorDetails(
                source="embedding_client",
                operation="embed",
                service_name="unknown",
            ),
        )

    @property
    def status_code(self) -> int | None:
        return getattr(self.details, "status_code", None)


class PersistenceError(ApplicationError):
    """A read or write against the embedding tables failed."""

    def __init__(
        self,
        message: str,
        details: DatabaseErrorDetails | dict | None = None,
        code: ErrorCode = ErrorCode.DB_QUERY,
    ):
        super().__init__(
            message=message,
            code=code,
            level=ErrorLevel.ERROR,
            details=details,
        )


class RankingUnavailableError(PersistenceError):
    """The similarity function used for ranking is not provisioned in the database."""

    def __init__(
        self,
        message: str,
        hint: str,
        details: DatabaseErrorDetails | dict | None = None,
    ):
        super().__init__(message=message, details=details, code=ErrorCode.DB_FUNCTION_MISSING)
        self.hint = hint


class ValidationError(ApplicationError):
    """Bad request shape or an invariant-breaking record."""

    def __init__(self, message: str, details: ValidationErrorDetails | dict | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_REQUEST,
            level=ErrorLevel.WARNING,
            details=details,
        )
