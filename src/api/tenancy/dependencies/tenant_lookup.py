"""Adapter from the tenant registry to the resolution middleware's lookup."""

from __future__ import annotations

from shared_kernel.middleware.tenant_resolution import (
    TenantAddress,
    TenantLookup,
    TenantLookupResult,
)
from storage.dependencies import get_storage_client
from tenancy.application.services import TenantService
from tenancy.infrastructure import AuditLogRepository, TenantRepository


def build_tenant_lookup(platform_domain: str) -> TenantLookup:
    """Create the lookup callable ``TenantResolutionMiddleware`` awaits."""

    async def lookup(address: TenantAddress) -> TenantLookupResult | None:
        storage = get_storage_client()
        service = TenantService(
            storage=storage,
            tenant_repository=TenantRepository(storage),
            audit_log_repository=AuditLogRepository(storage),
            platform_domain=platform_domain,
        )
        tenant = await service.find_by_address(address)
        if tenant is None:
            return None
        return TenantLookupResult(tenant_id=tenant.id.value, is_active=tenant.is_active)

    return lookup
