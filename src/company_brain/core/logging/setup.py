"""structlog configuration.

Logfire itself is configured in ``company_brain.main``. Records from our own
loggers and from the libraries we drive (neo4j, httpx, apscheduler) share one
processor chain and are forwarded to Logfire before rendering.
"""

import logging
import sys

import logfire
import structlog
from structlog.processors import CallsiteParameter, CallsiteParameterAdder
from structlog.types import EventDict, Processor, WrappedLogger
from structlog.typing import FilteringBoundLogger

QUIET_LIBRARIES = {"neo4j": logging.WARNING, "httpx": logging.WARNING, "apscheduler": logging.INFO}


def add_error_type(
    _logger: WrappedLogger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Replace an exception passed as ``error`` with its message and add ``error_type``."""
    error = event_dict.get("error")
    if isinstance(error, BaseException):
        event_dict["error_type"] = type(error).__name__
        event_dict["error"] = str(error)
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        CallsiteParameterAdder(
            parameters=[
                CallsiteParameter.MODULE,
                CallsiteParameter.FUNC_NAME,
                CallsiteParameter.LINENO,
            ]
        ),
        add_error_type,
        structlog.processors.StackInfoRenderer(),
    ]


def _renderer(json_logs: bool) -> Processor:
    if json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging(debug: bool = False, json_logs: bool = False) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        debug: Emit DEBUG records when True, INFO and above otherwise
        json_logs: One JSON object per line instead of the console renderer
    """
    level = logging.DEBUG if debug else logging.INFO
    shared = _shared_processors()

    structlog.configure(
        processors=[
            *shared,
            structlog.dev.set_exc_info,
            *([structlog.processors.format_exc_info] if json_logs else []),
            # Must run before the renderer turns the event into a string
            logfire.StructlogProcessor(),
            _renderer(json_logs),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(json_logs),
            foreign_pre_chain=shared,
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    for name, library_level in QUIET_LIBRARIES.items():
        logging.getLogger(name).setLevel(max(level, library_level))


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Structured logger for ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)
