"""Tenancy presentation layer, organized by audience.

- onboarding: public self-service tenant creation
- super_admin: platform administrators (bearer token)
- tenant_admin: a tenant's own administrators (tenant-bound requests)
"""

from __future__ import annotations

from fastapi import APIRouter

from tenancy.presentation import onboarding, super_admin, tenant_admin
from tenancy.presentation.errors import register_exception_handlers

router = APIRouter()

router.include_router(onboarding.router)
router.include_router(super_admin.router)
router.include_router(tenant_admin.router)

__all__ = ["register_exception_handlers", "router"]
