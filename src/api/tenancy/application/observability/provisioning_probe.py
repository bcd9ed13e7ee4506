"""Domain probe for tenant provisioning.

Step-level events (started, failed, compensated) come from the saga
probe; this probe records the business outcome of each onboarding.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ProvisioningProbe(Protocol):
    """Domain probe for the provisioning orchestrator."""

    def provisioning_started(self, subdomain: str, email: str) -> None:
        """Record that a validated onboarding request entered the saga."""
        ...

    def provisioning_rejected(self, reason: str, subdomain: str | None) -> None:
        """Record that a request was rejected before anything was created."""
        ...

    def provisioning_succeeded(
        self, tenant_id: str, subdomain: str, identity_org_id: str
    ) -> None:
        """Record that a tenant was fully provisioned."""
        ...

    def provisioning_failed(self, subdomain: str, kind: str, message: str) -> None:
        """Record that provisioning failed and was rolled back."""
        ...

    def template_resolved(self, template_slug: str, preset: str) -> None:
        """Record which catalogue template and branding preset were chosen."""
        ...

    def welcome_email_sent(self, tenant_id: str) -> None:
        """Record that the welcome email was delivered."""
        ...

    def welcome_email_failed(self, tenant_id: str, error: Exception) -> None:
        """Record that the welcome email could not be delivered."""
        ...

    def with_context(self, context: ObservationContext) -> ProvisioningProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultProvisioningProbe:
    """Default implementation of ProvisioningProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultProvisioningProbe:
        """Create a new probe with observation context bound."""
        return DefaultProvisioningProbe(logger=self._logger, context=context)

    def provisioning_started(self, subdomain: str, email: str) -> None:
        self._logger.info(
            "tenant_provisioning_started",
            subdomain=subdomain,
            email=email,
            **self._get_context_kwargs(),
        )

    def provisioning_rejected(self, reason: str, subdomain: str | None) -> None:
        self._logger.info(
            "tenant_provisioning_rejected",
            reason=reason,
            subdomain=subdomain,
            **self._get_context_kwargs(),
        )

    def provisioning_succeeded(
        self, tenant_id: str, subdomain: str, identity_org_id: str
    ) -> None:
        self._logger.info(
            "tenant_provisioned",
            tenant_id=tenant_id,
            subdomain=subdomain,
            identity_org_id=identity_org_id,
            **self._get_context_kwargs(),
        )

    def provisioning_failed(self, subdomain: str, kind: str, message: str) -> None:
        self._logger.warning(
            "tenant_provisioning_failed",
            subdomain=subdomain,
            kind=kind,
            message=message,
            **self._get_context_kwargs(),
        )

    def template_resolved(self, template_slug: str, preset: str) -> None:
        self._logger.debug(
            "tenant_template_resolved",
            template_slug=template_slug,
            preset=preset,
            **self._get_context_kwargs(),
        )

    def welcome_email_sent(self, tenant_id: str) -> None:
        self._logger.info(
            "tenant_welcome_email_sent",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def welcome_email_failed(self, tenant_id: str, error: Exception) -> None:
        self._logger.error(
            "tenant_welcome_email_failed",
            tenant_id=tenant_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
