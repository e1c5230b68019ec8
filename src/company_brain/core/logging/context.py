"""Request- and job-scoped logging context.

Values bound here are merged into every structlog event emitted from the same
task (``merge_contextvars`` is the first processor in ``setup_logging``), so a
sweep or request only has to name its tenant once.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog


def get_log_context() -> dict[str, Any]:
    """Return a copy of the context bound to the current task."""
    return dict(structlog.contextvars.get_contextvars())


def clear_log_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Bind ``values`` for the duration of the block, restoring previous values after.

    Example:
        with log_context(tenant_id=brain.tenant_id, project_id=project.id):
            await indexing.index_project_metadata(metadata, project)
    """
    previous = structlog.contextvars.get_contextvars()
    structlog.contextvars.bind_contextvars(**values)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*values.keys())
        restored = {key: previous[key] for key in values if key in previous}
        if restored:
            structlog.contextvars.bind_contextvars(**restored)
