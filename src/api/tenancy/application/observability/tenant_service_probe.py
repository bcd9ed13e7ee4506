"""Protocol for tenant application service observability.

Defines the interface for domain probes that capture application-level
domain events for tenant registry operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantServiceProbe(Protocol):
    """Domain probe for tenant application service operations."""

    def tenant_retrieved(self, tenant_id: str) -> None:
        """Record that a tenant was retrieved."""
        ...

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a tenant was not found."""
        ...

    def tenants_listed(self, count: int, active: bool | None) -> None:
        """Record that tenants were listed."""
        ...

    def tenant_activation_changed(
        self, tenant_id: str, active: bool, actor: str | None
    ) -> None:
        """Record that a tenant was activated or deactivated."""
        ...

    def tenants_bulk_activation_changed(
        self, requested: int, updated: int, active: bool, actor: str | None
    ) -> None:
        """Record a bulk activation change."""
        ...

    def tenant_settings_updated(self, tenant_id: str, fields: list[str]) -> None:
        """Record that a tenant admin updated the tenant profile."""
        ...

    def custom_domain_conflict(self, tenant_id: str, domain: str) -> None:
        """Record that a custom domain was already taken by another tenant."""
        ...

    def with_context(self, context: ObservationContext) -> TenantServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantServiceProbe:
    """Default implementation of TenantServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantServiceProbe(logger=self._logger, context=context)

    def tenant_retrieved(self, tenant_id: str) -> None:
        self._logger.debug(
            "tenant_retrieved",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant_id: str) -> None:
        self._logger.debug(
            "tenant_not_found",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenants_listed(self, count: int, active: bool | None) -> None:
        self._logger.debug(
            "tenants_listed",
            count=count,
            active_filter=active,
            **self._get_context_kwargs(),
        )

    def tenant_activation_changed(
        self, tenant_id: str, active: bool, actor: str | None
    ) -> None:
        """Record that a tenant was activated or deactivated."""
        self._logger.info(
            "tenant_activated" if active else "tenant_deactivated",
            tenant_id=tenant_id,
            actor=actor,
            **self._get_context_kwargs(),
        )

    def tenants_bulk_activation_changed(
        self, requested: int, updated: int, active: bool, actor: str | None
    ) -> None:
        """Record a bulk activation change."""
        self._logger.info(
            "tenants_bulk_activated" if active else "tenants_bulk_deactivated",
            requested=requested,
            updated=updated,
            actor=actor,
            **self._get_context_kwargs(),
        )

    def tenant_settings_updated(self, tenant_id: str, fields: list[str]) -> None:
        self._logger.info(
            "tenant_settings_updated",
            tenant_id=tenant_id,
            fields=fields,
            **self._get_context_kwargs(),
        )

    def custom_domain_conflict(self, tenant_id: str, domain: str) -> None:
        self._logger.warning(
            "custom_domain_conflict",
            tenant_id=tenant_id,
            domain=domain,
            **self._get_context_kwargs(),
        )
