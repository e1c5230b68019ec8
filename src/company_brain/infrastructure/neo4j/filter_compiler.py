"""Safe filter compilation for Cypher queries.

Field names are interpolated into the query text, so only whitelisted record
columns are accepted; values always travel as parameters.
"""

from __future__ import annotations

from typing import Any

from company_brain.domain.filters import FILTERABLE_COLUMNS

_OPS = {
    "ne": "<>",
    "in": "IN",
}


def compile_filters(
    filters: dict[str, Any] | None,
    alias: str = "e",
    prefix: str = "p",
) -> tuple[str, dict[str, Any]]:
    """Compile a column filter mapping into a WHERE condition and parameters.

    Args:
        filters: Mapping of column to value. Supports:
            - Simple equality: {"content_type": "document"}
            - Null checks: {"content_id": None}
            - Operators: {"content_type__in": ["document", "document_chunk"]}
        alias: Node alias used in the query
        prefix: Parameter name prefix

    Returns:
        Tuple of (condition without the WHERE keyword, parameters dict); the
        condition is "true" when there is nothing to filter on

    Raises:
        ValueError: If a field is not a filterable column or the operator is unknown

    Examples:
        >>> compile_filters({"tenant_id": "t1", "scope_id": None})
        ("e.tenant_id = $p_0 AND e.scope_id IS NULL", {"p_0": "t1"})
    """
    if not filters:
        return "true", {}

    clauses: list[str] = []
    params: dict[str, Any] = {}

    for idx, (key, value) in enumerate(filters.items()):
        field, _, op = key.partition("__")
        if field not in FILTERABLE_COLUMNS:
            raise ValueError(f"Cannot filter on '{field}'")
        param = f"{prefix}_{idx}"

        if not op:
            if value is None:
                clauses.append(f"{alias}.{field} IS NULL")
                continue
            clauses.append(f"{alias}.{field} = ${param}")
        elif op in _OPS:
            clauses.append(f"{alias}.{field} {_OPS[op]} ${param}")
        else:
            raise ValueError(f"Unknown filter operator '{op}'")
        params[param] = value

    return " AND ".join(clauses), params
