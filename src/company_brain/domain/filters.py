"""Normalisation of caller-supplied search filters.

Keys naming a record column filter that column; every other key must equal
the value stored under the same key in the record's metadata bag.
"""

from enum import Enum
from typing import Any

FILTERABLE_COLUMNS = frozenset({"tenant_id", "scope_id", "content_type", "content_id"})

COLUMN_ALIASES = {
    "company_id": "tenant_id",
    "user_id": "tenant_id",
    "project_id": "scope_id",
}


def split_filter(raw: dict[str, Any] | None) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return ``(column_filters, metadata_filters)`` for a raw filter mapping."""
    columns: dict[str, Any] = {}
    metadata: dict[str, Any] = {}
    for key, value in (raw or {}).items():
        column = COLUMN_ALIASES.get(key, key)
        if column in FILTERABLE_COLUMNS:
            columns[column] = value.value if isinstance(value, Enum) else value
        else:
            metadata[key] = value
    return columns, metadata


def matches_metadata(metadata: dict[str, Any], metadata_filters: dict[str, Any]) -> bool:
    return all(metadata.get(key) == value for key, value in metadata_filters.items())
