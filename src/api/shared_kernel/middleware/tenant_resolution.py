"""ASGI middleware that binds the tenant context for each request.

Resolution priority:
1. Path-based storefront routing: ``/store/{subdomain}/...``
2. Platform subdomain: ``{subdomain}.{platform_domain}``
3. Custom domain: any other dotted host that is not the platform itself

Platform paths (health, docs, onboarding, super-admin) never carry a tenant.
Requests that address no tenant run without a binding; any tenant-scoped
storage access they attempt fails loudly in the query interceptor.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from shared_kernel.middleware import tenant_context
from shared_kernel.middleware.observability import (
    DefaultTenantContextProbe,
    TenantContextProbe,
)

_STORE_PATH_PATTERN = re.compile(r"^/store/([^/]+)")

DEFAULT_PLATFORM_PATHS: tuple[str, ...] = (
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/onboarding",
    "/super-admin",
)


@dataclass(frozen=True)
class TenantAddress:
    """How a request addresses a tenant.

    Attributes:
        source: 'path', 'subdomain' or 'custom_domain'
        identifier: The subdomain or the full custom host name
    """

    source: str
    identifier: str


@dataclass(frozen=True)
class TenantLookupResult:
    """Minimal tenant facts the middleware needs to bind a context."""

    tenant_id: str
    is_active: bool


TenantLookup = Callable[[TenantAddress], Awaitable[TenantLookupResult | None]]


def parse_tenant_address(
    host: str,
    path: str,
    platform_domain: str,
) -> TenantAddress | None:
    """Work out which tenant, if any, a request addresses.

    Args:
        host: The Host header value (port is ignored)
        path: The request path
        platform_domain: The shared platform domain, e.g. "storefront.to"

    Returns:
        The TenantAddress, or None for platform-level requests
    """
    match = _STORE_PATH_PATTERN.match(path)
    if match:
        return TenantAddress(source="path", identifier=match.group(1).lower())

    current_host = host.split(":", 1)[0].strip().lower()
    if not current_host:
        return None

    platform_domain = platform_domain.lower()
    if current_host.endswith(f".{platform_domain}"):
        subdomain = current_host[: -(len(platform_domain) + 1)]
        if subdomain and subdomain != "www":
            return TenantAddress(source="subdomain", identifier=subdomain)
        return None

    if (
        current_host == platform_domain
        or current_host == "localhost"
        or current_host.startswith("www.")
        or "." not in current_host
    ):
        return None

    return TenantAddress(source="custom_domain", identifier=current_host)


class TenantResolutionMiddleware(BaseHTTPMiddleware):
    """Bind ``tenant_context`` for the lifetime of each tenant request."""

    def __init__(
        self,
        app: ASGIApp,
        lookup: TenantLookup,
        platform_domain: str,
        platform_paths: Sequence[str] = DEFAULT_PLATFORM_PATHS,
        probe: TenantContextProbe | None = None,
    ) -> None:
        super().__init__(app)
        self._lookup = lookup
        self._platform_domain = platform_domain
        self._platform_paths = tuple(platform_paths)
        self._probe = probe or DefaultTenantContextProbe()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        host = request.headers.get("x-forwarded-host") or request.headers.get(
            "host", ""
        )

        if path.startswith(self._platform_paths):
            return await call_next(request)

        address = parse_tenant_address(host, path, self._platform_domain)
        if address is None:
            self._probe.no_tenant_addressed(host=host, path=path)
            return await call_next(request)

        result = await self._lookup(address)
        if result is None:
            self._probe.tenant_not_found(
                source=address.source, identifier=address.identifier
            )
            return JSONResponse(
                status_code=404,
                content={"kind": "not_found", "message": "Tenant not found"},
            )

        if not result.is_active:
            self._probe.tenant_inactive(
                tenant_id=result.tenant_id, identifier=address.identifier
            )
            return JSONResponse(
                status_code=403,
                content={"kind": "forbidden", "message": "Tenant account is inactive"},
            )

        self._probe.tenant_resolved(
            tenant_id=result.tenant_id,
            source=address.source,
            identifier=address.identifier,
        )
        request.state.tenant = tenant_context.TenantContext(
            tenant_id=result.tenant_id, source=address.source
        )
        with tenant_context.bind(result.tenant_id):
            return await call_next(request)
