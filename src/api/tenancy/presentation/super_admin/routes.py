"""HTTP routes for platform administrators.

Tenants are never deleted through this API; deactivation hides the
storefront and keeps its data.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tenancy.application.services import TenantService
from tenancy.dependencies.access import get_actor, require_platform_admin
from tenancy.dependencies.services import get_tenant_service
from tenancy.domain.value_objects import TenantId
from tenancy.presentation.models import TenantResponse
from tenancy.presentation.super_admin.models import (
    BulkActivationRequest,
    BulkActivationResponse,
)

router = APIRouter(
    prefix="/super-admin/tenants",
    tags=["super-admin"],
    dependencies=[Depends(require_platform_admin)],
)


def _parse_tenant_id(tenant_id: str) -> TenantId:
    try:
        return TenantId.from_string(tenant_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid tenant ID format: {e}",
        ) from e


@router.get("")
async def list_tenants(
    service: Annotated[TenantService, Depends(get_tenant_service)],
    active: Annotated[bool | None, Query()] = None,
) -> list[TenantResponse]:
    """List all tenants, newest first, optionally filtered by active flag."""
    tenants = await service.list_tenants(active=active)
    return [TenantResponse.from_domain(tenant) for tenant in tenants]


@router.get("/{tenant_id}")
async def get_tenant(
    tenant_id: str,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    tenant = await service.get_tenant(_parse_tenant_id(tenant_id))
    return TenantResponse.from_domain(tenant)


@router.post("/{tenant_id}/toggle-active")
async def toggle_tenant_active(
    tenant_id: str,
    service: Annotated[TenantService, Depends(get_tenant_service)],
    actor: Annotated[str | None, Depends(get_actor)],
) -> TenantResponse:
    """Flip a tenant's active flag and record an audit entry.

    Raises:
        400: Malformed tenant ID
        404: Tenant not found
    """
    tenant = await service.toggle_active(_parse_tenant_id(tenant_id), actor=actor)
    return TenantResponse.from_domain(tenant)


@router.post("/bulk")
async def bulk_set_active(
    request: BulkActivationRequest,
    service: Annotated[TenantService, Depends(get_tenant_service)],
    actor: Annotated[str | None, Depends(get_actor)],
) -> BulkActivationResponse:
    """Activate or deactivate several tenants at once.

    Raises:
        400: Empty or malformed tenant ID list
        404: None of the tenant IDs exist
    """
    count = await service.bulk_set_active(
        request.tenant_ids, active=request.active, actor=actor
    )
    verb = "activated" if request.active else "deactivated"
    return BulkActivationResponse(
        count=count,
        message=f"Successfully {verb} {count} tenant(s)",
    )
