"""Tenant application service for the Tenancy bounded context.

Handles tenant registry operations for storefront routing, platform
administrators (listing, activation) and tenant administrators (profile
and settings).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from shared_kernel.middleware import tenant_context
from shared_kernel.middleware.tenant_resolution import (
    TenantAddress,
    parse_tenant_address,
)
from storage.application.client import StorageClient
from storage.ports.exceptions import IsolationViolation
from tenancy.application.observability import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId
from tenancy.ports.exceptions import (
    CustomDomainTakenError,
    TenantNotFoundError,
    ValidationError,
)
from tenancy.ports.repositories import IAuditLogRepository, ITenantRepository

TENANT_ACTIVATED = "TENANT_ACTIVATED"
TENANT_DEACTIVATED = "TENANT_DEACTIVATED"
TENANT_BULK_ACTIVATED = "TENANT_BULK_ACTIVATED"
TENANT_BULK_DEACTIVATED = "TENANT_BULK_DEACTIVATED"
TENANT_SETTINGS_UPDATED = "TENANT_SETTINGS_UPDATED"


class TenantService:
    """Application service for the tenant registry.

    Activation changes and their audit entries are written in one storage
    transaction. Audit entries are tenant-scoped records, so each one is
    written inside ``tenant_context.bind`` for the tenant it describes.
    """

    def __init__(
        self,
        storage: StorageClient,
        tenant_repository: ITenantRepository,
        audit_log_repository: IAuditLogRepository,
        platform_domain: str,
        probe: TenantServiceProbe | None = None,
    ):
        self._storage = storage
        self._tenants = tenant_repository
        self._audit_logs = audit_log_repository
        self._platform_domain = platform_domain
        self._probe = probe or DefaultTenantServiceProbe()

    async def get_tenant(self, tenant_id: TenantId) -> Tenant:
        """Retrieve a tenant by ID.

        Raises:
            TenantNotFoundError: If the tenant does not exist
        """
        tenant = await self._tenants.get_by_id(tenant_id)
        if tenant is None:
            self._probe.tenant_not_found(tenant_id=tenant_id.value)
            raise TenantNotFoundError()

        self._probe.tenant_retrieved(tenant_id=tenant_id.value)
        return tenant

    async def resolve_tenant(
        self,
        host: str,
        path: str,
        headers: Mapping[str, str] | None = None,
    ) -> Tenant | None:
        """Find the tenant a storefront request addresses.

        Path-based routing (``/store/{subdomain}``) wins over the platform
        subdomain, which wins over a custom domain. ``X-Forwarded-Host``
        takes precedence over ``host`` when present.

        Returns:
            The tenant, or None when the request addresses no known tenant
        """
        if headers:
            forwarded = {k.lower(): v for k, v in headers.items()}.get("x-forwarded-host")
            host = forwarded or host

        address = parse_tenant_address(host, path, self._platform_domain)
        if address is None:
            return None
        return await self.find_by_address(address)

    async def find_by_address(self, address: TenantAddress) -> Tenant | None:
        if address.source == "custom_domain":
            return await self._tenants.get_by_custom_domain(address.identifier)
        return await self._tenants.get_by_subdomain(address.identifier)

    async def list_tenants(self, active: bool | None = None) -> list[Tenant]:
        """List every tenant for platform administrators, newest first."""
        tenants = await self._tenants.list_all(active=active)
        self._probe.tenants_listed(count=len(tenants), active=active)
        return tenants

    async def set_active(
        self, tenant_id: TenantId, active: bool, actor: str | None = None
    ) -> Tenant:
        """Activate or deactivate a tenant. Last write wins.

        Raises:
            TenantNotFoundError: If the tenant does not exist
        """
        async with self._storage.transaction():
            tenant = await self.get_tenant(tenant_id)
            if active:
                tenant.activate()
            else:
                tenant.deactivate()
            tenant = await self._tenants.save(tenant)
            await self._audit_activation(tenant, actor)

        self._probe.tenant_activation_changed(
            tenant_id=tenant_id.value, active=tenant.is_active, actor=actor
        )
        return tenant

    async def toggle_active(self, tenant_id: TenantId, actor: str | None = None) -> Tenant:
        """Flip a tenant's active flag.

        Raises:
            TenantNotFoundError: If the tenant does not exist
        """
        async with self._storage.transaction():
            tenant = await self.get_tenant(tenant_id)
            tenant.toggle_active()
            tenant = await self._tenants.save(tenant)
            await self._audit_activation(tenant, actor)

        self._probe.tenant_activation_changed(
            tenant_id=tenant_id.value, active=tenant.is_active, actor=actor
        )
        return tenant

    async def bulk_set_active(
        self, tenant_ids: list[str], active: bool, actor: str | None = None
    ) -> int:
        """Activate or deactivate several tenants at once.

        Unknown ids are skipped.

        Returns:
            Number of tenants updated

        Raises:
            ValidationError: If no ids were given or an id is malformed
            TenantNotFoundError: If none of the ids matched a tenant
        """
        if not tenant_ids:
            raise ValidationError("Tenant IDs are required")
        try:
            ids = [TenantId.from_string(value) for value in dict.fromkeys(tenant_ids)]
        except ValueError as e:
            raise ValidationError(str(e)) from e

        async with self._storage.transaction():
            existing = [
                tenant
                for tenant in [await self._tenants.get_by_id(tid) for tid in ids]
                if tenant is not None
            ]
            if not existing:
                raise TenantNotFoundError("No matching tenants found")

            count = await self._tenants.set_active_many(
                [tenant.id for tenant in existing], active
            )
            action = TENANT_BULK_ACTIVATED if active else TENANT_BULK_DEACTIVATED
            for tenant in existing:
                with tenant_context.bind(tenant.id.value):
                    await self._audit_logs.record(
                        action=action,
                        entity_type="tenant",
                        entity_id=tenant.id.value,
                        actor=actor,
                        details={
                            "business_name": tenant.business_name,
                            "subdomain": tenant.subdomain,
                            "batch_size": len(existing),
                        },
                    )

        self._probe.tenants_bulk_activation_changed(
            requested=len(ids), updated=count, active=active, actor=actor
        )
        return count

    async def update_settings(
        self,
        tenant_id: TenantId,
        business_name: str | None = None,
        custom_domain: str | None = None,
        settings: dict[str, Any] | None = None,
        subdomain: str | None = None,
        actor: str | None = None,
    ) -> Tenant:
        """Apply a tenant administrator's profile edits to their own tenant.

        Raises:
            IsolationViolation: If the bound tenant is not ``tenant_id``
            TenantNotFoundError: If the tenant does not exist
            ValidationError: If the edit is not allowed or invalid
            CustomDomainTakenError: If another tenant uses the custom domain
        """
        if tenant_context.current() != tenant_id.value:
            raise IsolationViolation(
                "Tenant settings can only be edited within that tenant's context",
                model="tenants",
            )

        async with self._storage.transaction():
            tenant = await self.get_tenant(tenant_id)
            tenant.update_profile(
                business_name=business_name,
                custom_domain=custom_domain,
                settings=settings,
                subdomain=subdomain,
            )
            try:
                tenant = await self._tenants.save(tenant)
            except CustomDomainTakenError:
                self._probe.custom_domain_conflict(
                    tenant_id=tenant_id.value, domain=tenant.custom_domain or ""
                )
                raise

            fields = [
                name
                for name, value in (
                    ("business_name", business_name),
                    ("custom_domain", custom_domain),
                    ("settings", settings),
                )
                if value is not None
            ]
            await self._audit_logs.record(
                action=TENANT_SETTINGS_UPDATED,
                entity_type="tenant",
                entity_id=tenant_id.value,
                actor=actor,
                details={"fields": fields},
            )

        self._probe.tenant_settings_updated(tenant_id=tenant_id.value, fields=fields)
        return tenant

    async def _audit_activation(self, tenant: Tenant, actor: str | None) -> None:
        with tenant_context.bind(tenant.id.value):
            await self._audit_logs.record(
                action=TENANT_ACTIVATED if tenant.is_active else TENANT_DEACTIVATED,
                entity_type="tenant",
                entity_id=tenant.id.value,
                actor=actor,
                details={
                    "business_name": tenant.business_name,
                    "subdomain": tenant.subdomain,
                },
            )
