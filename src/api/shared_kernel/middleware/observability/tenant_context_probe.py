"""Domain probe for tenant context resolution.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to resolving the storefront that an
inbound request addresses (path, subdomain or custom domain).

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantContextProbe(Protocol):
    """Domain probe for tenant context resolution operations."""

    def tenant_resolved(self, tenant_id: str, source: str, identifier: str) -> None:
        """Record that a request was bound to a tenant."""
        ...

    def tenant_not_found(self, source: str, identifier: str) -> None:
        """Record that the addressed tenant does not exist."""
        ...

    def tenant_inactive(self, tenant_id: str, identifier: str) -> None:
        """Record that a deactivated tenant was addressed."""
        ...

    def no_tenant_addressed(self, host: str, path: str) -> None:
        """Record that the request addresses the platform, not a tenant."""
        ...

    def with_context(self, context: ObservationContext) -> TenantContextProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantContextProbe:
    """Default implementation of TenantContextProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantContextProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantContextProbe(logger=self._logger, context=context)

    def tenant_resolved(self, tenant_id: str, source: str, identifier: str) -> None:
        """Record that a request was bound to a tenant."""
        self._logger.debug(
            "tenant_context_resolved",
            tenant_id=tenant_id,
            source=source,
            identifier=identifier,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, source: str, identifier: str) -> None:
        """Record that the addressed tenant does not exist."""
        self._logger.warning(
            "tenant_context_tenant_not_found",
            source=source,
            identifier=identifier,
            **self._get_context_kwargs(),
        )

    def tenant_inactive(self, tenant_id: str, identifier: str) -> None:
        """Record that a deactivated tenant was addressed."""
        self._logger.warning(
            "tenant_context_tenant_inactive",
            tenant_id=tenant_id,
            identifier=identifier,
            **self._get_context_kwargs(),
        )

    def no_tenant_addressed(self, host: str, path: str) -> None:
        """Record that the request addresses the platform, not a tenant."""
        self._logger.debug(
            "tenant_context_platform_request",
            host=host,
            path=path,
            **self._get_context_kwargs(),
        )
