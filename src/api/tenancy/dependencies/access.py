"""Access dependencies for the platform-admin and tenant-admin routes.

Usage in FastAPI routes:
    @router.get("", dependencies=[Depends(require_platform_admin)])
    async def list_tenants(...):
        ...

    @router.get("/tenant")
    async def get_own_tenant(
        tenant: Annotated[TenantContext, Depends(require_tenant_context)],
    ):
        ...
"""

from __future__ import annotations

import secrets
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from infrastructure.settings import PlatformSettings, get_platform_settings
from shared_kernel.middleware import tenant_context
from shared_kernel.middleware.tenant_context import TenantContext


def _get_admin_token(
    settings: Annotated[PlatformSettings, Depends(get_platform_settings)],
) -> str:
    """Extract the configured admin token.

    A thin sub-dependency so tests can call ``require_platform_admin``
    directly with a token string.
    """
    return settings.admin_token.get_secret_value()


def require_platform_admin(
    admin_token: Annotated[str, Depends(_get_admin_token)],
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Raise 401 unless the request carries the platform admin bearer token.

    With no token configured every request is refused.

    Raises:
        HTTPException 401: When the token is missing, wrong or unconfigured.
    """
    scheme, _, presented = (authorization or "").partition(" ")
    if (
        not admin_token
        or scheme.lower() != "bearer"
        or not secrets.compare_digest(presented.strip(), admin_token)
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Platform administrator credentials required",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_actor(x_actor: Annotated[str | None, Header()] = None) -> str | None:
    """Who performed an admin action, as recorded in audit entries."""
    if x_actor is None:
        return None
    return x_actor.strip() or None


async def require_tenant_context(request: Request) -> TenantContext:
    """Return the tenant the resolution middleware bound for this request.

    Raises:
        HTTPException 400: When the request addressed no tenant.
    """
    context: TenantContext | None = getattr(request.state, "tenant", None)
    if context is None or tenant_context.current() != context.tenant_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This endpoint must be called on a tenant's storefront address",
        )
    return context
