"""Structured logging module.

structlog for the API, Logfire as the sink (see ``setup.setup_logging``).
"""

from .context import (
    clear_log_context,
    get_log_context,
    log_context,
)
from .setup import get_logger, setup_logging

__all__ = [
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "log_context",
    "setup_logging",
]
