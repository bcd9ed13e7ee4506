"""HTTP routes for a tenant administrator's own tenant.

These routes are served on the tenant's storefront address, so the
resolution middleware has already bound the tenant context.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.services import TenantService
from tenancy.dependencies.access import get_actor, require_tenant_context
from tenancy.dependencies.services import get_tenant_service
from tenancy.domain.value_objects import TenantId
from tenancy.presentation.models import TenantResponse
from tenancy.presentation.tenant_admin.models import UpdateTenantSettingsRequest

router = APIRouter(
    prefix="/tenant-admin/tenant",
    tags=["tenant-admin"],
)


@router.get("")
async def get_own_tenant(
    tenant: Annotated[TenantContext, Depends(require_tenant_context)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    result = await service.get_tenant(TenantId(value=tenant.tenant_id))
    return TenantResponse.from_domain(result)


@router.patch("")
async def update_own_tenant(
    request: UpdateTenantSettingsRequest,
    tenant: Annotated[TenantContext, Depends(require_tenant_context)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
    actor: Annotated[str | None, Depends(get_actor)],
) -> TenantResponse:
    """Update the business name, custom domain or settings.

    Raises:
        400: Invalid value or an attempt to change the subdomain
        409: Custom domain already used by another tenant
    """
    result = await service.update_settings(
        TenantId(value=tenant.tenant_id),
        business_name=request.business_name,
        custom_domain=request.custom_domain,
        settings=request.settings,
        subdomain=request.subdomain,
        actor=actor,
    )
    return TenantResponse.from_domain(result)
