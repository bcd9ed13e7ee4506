"""Where-filter algebra shared by every record store.

A where filter is a plain dict:

    {"name": "Lamp"}                      equality
    {"tenant_id": None}                   IS NULL
    {"price": {"gte": 10, "lt": 20}}      comparison operators
    {"status": {"in": ["NEW", "PAID"]}}   membership
    {"name": {"contains": "amp"}}         substring
    {"status": {"not": "CANCELLED"}}      inequality
    {"AND": [...], "OR": [...], "NOT": {...}}

Field clauses at the same level are ANDed. Tenant scoping relies on the
fact that ``{"AND": [caller_where, scope]}`` can only ever narrow the
caller's filter, whatever the caller put in it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

TENANT_FIELD = "tenant_id"

LOGICAL_KEYS = frozenset({"AND", "OR", "NOT"})
FIELD_OPERATORS = frozenset(
    {"equals", "not", "in", "not_in", "lt", "lte", "gt", "gte", "contains"}
)


class InvalidFilterError(ValueError):
    """Raised when a where filter uses an unknown operator or shape."""

    pass


def and_(*wheres: Mapping[str, Any] | None) -> dict[str, Any]:
    """Combine filters so that a record must satisfy all of them.

    Empty filters are dropped; a single remaining filter is returned as a
    copy rather than wrapped.
    """
    parts = [dict(where) for where in wheres if where]
    if not parts:
        return {}
    if len(parts) == 1:
        return parts[0]
    return {"AND": parts}


def tenant_scope(tenant_id: str | None, allow_null: bool) -> dict[str, Any]:
    """Build the scope filter for a tenant.

    Args:
        tenant_id: The bound tenant, or None for "shared rows only"
        allow_null: Whether null-tenant rows (shared defaults) are visible

    Returns:
        ``{"tenant_id": T}``, or ``{"OR": [{"tenant_id": T}, {"tenant_id": None}]}``
        for allow-null models
    """
    if tenant_id is None:
        return {TENANT_FIELD: None}
    if allow_null:
        return {"OR": [{TENANT_FIELD: tenant_id}, {TENANT_FIELD: None}]}
    return {TENANT_FIELD: tenant_id}


def is_operator_clause(value: Any) -> bool:
    """Return True for ``{"gte": 1}``-style field clauses."""
    return (
        isinstance(value, Mapping)
        and len(value) > 0
        and all(key in FIELD_OPERATORS for key in value)
    )


def matches(record: Mapping[str, Any], where: Mapping[str, Any] | None) -> bool:
    """Evaluate a where filter against an in-memory record.

    Raises:
        InvalidFilterError: If the filter is malformed
    """
    if not where:
        return True

    for key, value in where.items():
        if key == "AND":
            if not all(matches(record, sub) for sub in _as_list(value, key)):
                return False
        elif key == "OR":
            if not any(matches(record, sub) for sub in _as_list(value, key)):
                return False
        elif key == "NOT":
            if any(matches(record, sub) for sub in _as_list(value, key)):
                return False
        elif is_operator_clause(value):
            if not _field_matches(record.get(key), value):
                return False
        elif isinstance(value, Mapping):
            raise InvalidFilterError(f"Unknown operator in clause for '{key}': {value}")
        elif record.get(key) != value:
            return False

    return True


def _as_list(value: Any, key: str) -> list[Mapping[str, Any]]:
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
        return list(value)
    raise InvalidFilterError(f"'{key}' expects a filter or a list of filters")


def _field_matches(actual: Any, clause: Mapping[str, Any]) -> bool:
    for operator, expected in clause.items():
        if operator == "equals" and actual != expected:
            return False
        if operator == "not" and actual == expected:
            return False
        if operator == "in" and actual not in expected:
            return False
        if operator == "not_in" and actual in expected:
            return False
        if operator == "contains":
            if actual is None or str(expected) not in str(actual):
                return False
        if operator in ("lt", "lte", "gt", "gte"):
            if actual is None or not _compare(actual, operator, expected):
                return False
    return True


def _compare(actual: Any, operator: str, expected: Any) -> bool:
    if operator == "lt":
        return actual < expected
    if operator == "lte":
        return actual <= expected
    if operator == "gt":
        return actual > expected
    return actual >= expected
