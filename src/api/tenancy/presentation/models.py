"""Pydantic models shared by the tenancy routes."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from tenancy.domain.aggregates import Tenant


class TenantResponse(BaseModel):
    """Response model for a tenant."""

    id: str = Field(..., description="Tenant ID (ULID format)")
    business_name: str
    subdomain: str
    custom_domain: str | None = None
    country_code: str
    is_active: bool
    settings: dict[str, Any] = Field(default_factory=dict)
    template_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, tenant: Tenant) -> TenantResponse:
        return cls(
            id=tenant.id.value,
            business_name=tenant.business_name,
            subdomain=tenant.subdomain,
            custom_domain=tenant.custom_domain,
            country_code=tenant.country_code,
            is_active=tenant.is_active,
            settings=tenant.settings,
            template_id=tenant.template_id,
            created_at=tenant.created_at,
            updated_at=tenant.updated_at,
        )
