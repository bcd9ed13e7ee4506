"""The generic CRUD surface every record store exposes.

All data access is expressed as a ``StorageOperation``: a model (record
collection) name, an ``Action`` and its arguments. Stores execute
operations; adapters such as the tenant-scoping interceptor rewrite them
before delegating. Keeping the surface this small is what makes the
scoping logic testable without a database.

Arguments by action:
    find_many:   where, order_by, skip, take
    find_first:  where, order_by
    find_unique: where
    count:       where
    aggregate:   where, aggregate  ({"sum": [...], "avg": [...], "min": [...],
                                      "max": [...], "count": True})
    group_by:    by, where, aggregate
    create:      data
    create_many: data (list)
    upsert:      where, create, update
    update:      where, data
    update_many: where, data
    delete:      where
    delete_many: where
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable


class Action(StrEnum):
    """Operations of the generic CRUD surface."""

    FIND_MANY = "find_many"
    FIND_FIRST = "find_first"
    FIND_UNIQUE = "find_unique"
    COUNT = "count"
    AGGREGATE = "aggregate"
    GROUP_BY = "group_by"
    CREATE = "create"
    CREATE_MANY = "create_many"
    UPSERT = "upsert"
    UPDATE = "update"
    UPDATE_MANY = "update_many"
    DELETE = "delete"
    DELETE_MANY = "delete_many"


@dataclass(frozen=True)
class StorageOperation:
    """One data-access call.

    Attributes:
        model: Record collection name (e.g. "products")
        action: The CRUD action
        args: Action arguments (see module docstring)
        tenant_id: Tenant the interceptor scoped this call to, for audit
            attribution; None when the call was not scoped
    """

    model: str
    action: Action
    args: dict[str, Any] = field(default_factory=dict)
    tenant_id: str | None = None

    @property
    def where(self) -> dict[str, Any]:
        return self.args.get("where") or {}


@runtime_checkable
class RecordStore(Protocol):
    """A client that executes storage operations.

    Implementations: the in-memory store, the SQLAlchemy store and the
    TenantScopedStore adapter wrapping either of them.
    """

    async def execute(self, operation: StorageOperation) -> Any:
        """Execute one operation and return its result.

        Raises:
            RecordNotFound: update/delete matched no record
            UniqueConstraintViolation: a write duplicated a unique key
            IsolationViolation: (interceptor) tenant-scoped access without
                a bound tenant
        """
        ...

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Group the operations issued inside the block atomically.

        Nested blocks join the outer transaction.
        """
        ...
