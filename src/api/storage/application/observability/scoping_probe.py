"""Domain probe for tenant scoping decisions.

Every rewritten call is attributable: ``operation_scoped`` records the
tenant id the interceptor actually applied. Isolation violations are
logged at critical level because they always indicate a defect.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ScopingProbe(Protocol):
    """Domain probe for the tenant-scoping interceptor."""

    def operation_scoped(self, model: str, action: str, tenant_id: str) -> None:
        """Record that a call was constrained to a tenant."""
        ...

    def operation_scoped_to_shared(self, model: str, action: str) -> None:
        """Record that a call ran without a tenant and saw shared rows only."""
        ...

    def scoping_bypassed(self, model: str, action: str, reason: str) -> None:
        """Record that a call ran under an explicit platform bypass."""
        ...

    def isolation_violation(
        self, model: str, action: str, reason: str, tenant_id: str | None
    ) -> None:
        """Record a tenant-scoped call that had to be refused."""
        ...

    def with_context(self, context: ObservationContext) -> ScopingProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultScopingProbe:
    """Default implementation of ScopingProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultScopingProbe:
        """Create a new probe with observation context bound."""
        return DefaultScopingProbe(logger=self._logger, context=context)

    def operation_scoped(self, model: str, action: str, tenant_id: str) -> None:
        """Record that a call was constrained to a tenant."""
        self._logger.debug(
            "storage_operation_scoped",
            model=model,
            action=action,
            applied_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def operation_scoped_to_shared(self, model: str, action: str) -> None:
        """Record that a call ran without a tenant and saw shared rows only."""
        self._logger.debug(
            "storage_operation_scoped_to_shared",
            model=model,
            action=action,
            **self._get_context_kwargs(),
        )

    def scoping_bypassed(self, model: str, action: str, reason: str) -> None:
        """Record that a call ran under an explicit platform bypass."""
        self._logger.info(
            "storage_scoping_bypassed",
            model=model,
            action=action,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def isolation_violation(
        self, model: str, action: str, reason: str, tenant_id: str | None
    ) -> None:
        """Record a tenant-scoped call that had to be refused."""
        self._logger.critical(
            "tenant_isolation_violation",
            model=model,
            action=action,
            reason=reason,
            bound_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )
