"""FastAPI exception handlers for application errors"""

from typing import cast

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .base import ApplicationError
from .error_context import ErrorContext
from .errors import PersistenceError, RankingUnavailableError, ValidationError
from .logging import get_logger

logger = get_logger(__name__)


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = cast(ValidationError, exc)
    logger.warning("Rejected request", path=request.url.path, error=error.message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": error.message})


async def persistence_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = cast(PersistenceError, exc)
    ctx = ErrorContext(error, path=request.url.path)
    ctx.log(logger, "Persistence failure")
    body = ctx.to_response() | {"error": error.message}
    if isinstance(error, RankingUnavailableError):
        body["hint"] = error.hint
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


async def application_error_handler(request: Request, exc: Exception) -> JSONResponse:
    ctx = ErrorContext(cast(ApplicationError, exc), path=request.url.path)
    ctx.log(logger, "Unhandled application error")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=ctx.to_response())


def register_exception_handlers(app: FastAPI) -> None:
    """Map the error taxonomy onto HTTP responses."""
    # Most specific first; Starlette walks the MRO so order only matters for readability
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)
    app.add_exception_handler(ApplicationError, application_error_handler)
