"""Tenant-scoping interceptor for record stores.

``TenantScopedStore`` wraps any RecordStore and rewrites every operation
on a tenant-scoped collection before it reaches storage, using the tenant
bound in ``shared_kernel.middleware.tenant_context``:

- create / create_many / upsert create-branch: stamp ``tenant_id`` when the
  caller did not supply one
- find_many / find_first / count / aggregate / group_by / update_many /
  delete_many: AND the tenant scope into the caller's where
- find_unique: downgraded to find_first within scope, since a globally
  unique key may belong to another tenant
- update / delete / upsert by key: "key AND tenant", so a foreign key
  yields RecordNotFound instead of touching another tenant's row

The rewrite is synchronous and happens before delegation; nothing is
batched or reordered.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from dataclasses import replace
from typing import Any, NoReturn

from shared_kernel.middleware import tenant_context
from storage.application.observability import DefaultScopingProbe, ScopingProbe
from storage.domain.filters import TENANT_FIELD, and_, tenant_scope
from storage.domain.scoping_policy import (
    DEFAULT_SCOPING_POLICY,
    ScopeMode,
    ScopingPolicy,
)
from storage.ports.exceptions import IsolationViolation
from storage.ports.operations import Action, RecordStore, StorageOperation

_CREATE_ACTIONS = frozenset({Action.CREATE, Action.CREATE_MANY})
_FILTERED_ACTIONS = frozenset(
    {
        Action.FIND_MANY,
        Action.FIND_FIRST,
        Action.FIND_UNIQUE,
        Action.COUNT,
        Action.AGGREGATE,
        Action.GROUP_BY,
        Action.UPDATE,
        Action.UPDATE_MANY,
        Action.DELETE,
        Action.DELETE_MANY,
    }
)
_DATA_UPDATE_ACTIONS = frozenset({Action.UPDATE, Action.UPDATE_MANY})


class TenantScopedStore:
    """RecordStore adapter enforcing per-tenant row visibility."""

    def __init__(
        self,
        inner: RecordStore,
        policy: ScopingPolicy = DEFAULT_SCOPING_POLICY,
        probe: ScopingProbe | None = None,
    ) -> None:
        self._inner = inner
        self._policy = policy
        self._probe = probe or DefaultScopingProbe()

    @property
    def policy(self) -> ScopingPolicy:
        return self._policy

    async def execute(self, operation: StorageOperation) -> Any:
        """Scope the operation, then delegate it to the wrapped store."""
        return await self._inner.execute(self.scope(operation))

    def transaction(self) -> AbstractAsyncContextManager[None]:
        return self._inner.transaction()

    def scope(self, operation: StorageOperation) -> StorageOperation:
        """Return the tenant-scoped rewrite of an operation.

        Pure with respect to storage: useful on its own for tests and
        audits of the rewrite policy.

        Raises:
            IsolationViolation: For a strict model with no bound tenant, or a
                write that names a tenant other than the bound one
        """
        mode = self._policy.mode_for(operation.model)
        if mode is None:
            return operation

        reason = tenant_context.bypass_reason()
        if reason is not None:
            self._probe.scoping_bypassed(
                model=operation.model, action=operation.action.value, reason=reason
            )
            return operation

        tenant_id = tenant_context.current()
        if tenant_id is None and mode is ScopeMode.STRICT:
            self._refuse(operation, "no tenant bound", tenant_id)

        allow_null = mode is ScopeMode.ALLOW_NULL
        args = dict(operation.args)
        action = operation.action

        if action in _CREATE_ACTIONS:
            args["data"] = self._stamp(operation, args.get("data"), tenant_id)
        elif action is Action.UPSERT:
            args["create"] = self._stamp(operation, args.get("create"), tenant_id)
            self._check_reassignment(operation, args.get("update"), tenant_id)
            args["where"] = and_(args.get("where"), tenant_scope(tenant_id, allow_null))
        elif action in _FILTERED_ACTIONS:
            if action in _DATA_UPDATE_ACTIONS:
                self._check_reassignment(operation, args.get("data"), tenant_id)
            if action is Action.FIND_UNIQUE:
                action = Action.FIND_FIRST
            args["where"] = and_(args.get("where"), tenant_scope(tenant_id, allow_null))

        if tenant_id is None:
            self._probe.operation_scoped_to_shared(
                model=operation.model, action=operation.action.value
            )
        else:
            self._probe.operation_scoped(
                model=operation.model,
                action=operation.action.value,
                tenant_id=tenant_id,
            )

        return replace(operation, action=action, args=args, tenant_id=tenant_id)

    def _stamp(
        self,
        operation: StorageOperation,
        data: Any,
        tenant_id: str | None,
    ) -> Any:
        if data is None:
            return data
        if isinstance(data, list):
            return [self._stamp_one(operation, item, tenant_id) for item in data]
        return self._stamp_one(operation, data, tenant_id)

    def _stamp_one(
        self,
        operation: StorageOperation,
        item: dict[str, Any],
        tenant_id: str | None,
    ) -> dict[str, Any]:
        supplied = item.get(TENANT_FIELD)
        if supplied is None:
            return {**item, TENANT_FIELD: tenant_id}
        if supplied != tenant_id:
            self._refuse(operation, "write names a different tenant", tenant_id)
        return dict(item)

    def _check_reassignment(
        self,
        operation: StorageOperation,
        data: dict[str, Any] | None,
        tenant_id: str | None,
    ) -> None:
        if not data or TENANT_FIELD not in data:
            return
        if data[TENANT_FIELD] != tenant_id:
            self._refuse(operation, "update moves rows to another tenant", tenant_id)

    def _refuse(
        self,
        operation: StorageOperation,
        reason: str,
        tenant_id: str | None,
    ) -> NoReturn:
        self._probe.isolation_violation(
            model=operation.model,
            action=operation.action.value,
            reason=reason,
            tenant_id=tenant_id,
        )
        raise IsolationViolation(
            f"Refused {operation.action.value} on '{operation.model}': {reason}",
            model=operation.model,
        )
