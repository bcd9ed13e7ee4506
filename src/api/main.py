"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from infrastructure.database.dependencies import close_database_connections
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.settings import get_platform_settings, get_settings
from infrastructure.version import __version__
from shared_kernel.middleware.tenant_resolution import TenantResolutionMiddleware
from tenancy.dependencies.identity import close_identity_provider
from tenancy.dependencies.notifications import shutdown_notifications
from tenancy.dependencies.tenant_lookup import build_tenant_lookup
from tenancy.presentation import register_exception_handlers
from tenancy.presentation import router as tenancy_router

# Seconds to wait for in-flight welcome emails on shutdown
NOTIFICATION_DRAIN_TIMEOUT = 10.0


@asynccontextmanager
async def storefront_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration and startup reporting
    - Draining background welcome emails on shutdown
    - Closing the identity provider client and the database engine
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    probe = DefaultStartupProbe()
    probe.application_starting(
        version=__version__, storage_backend=settings.storage_backend
    )
    if not get_platform_settings().admin_token.get_secret_value():
        probe.admin_routes_unprotected()

    yield

    pending = await shutdown_notifications(timeout=NOTIFICATION_DRAIN_TIMEOUT)
    await close_identity_provider()
    await close_database_connections()
    probe.application_stopped(pending_notifications=pending)


app = FastAPI(
    title=get_settings().app_name,
    description="Multi-tenant storefront platform: tenant registry and onboarding",
    version=__version__,
    lifespan=storefront_lifespan,
)

app.add_middleware(
    TenantResolutionMiddleware,
    lookup=build_tenant_lookup(get_platform_settings().platform_domain),
    platform_domain=get_platform_settings().platform_domain,
)

register_exception_handlers(app)

# Include Tenancy bounded context routes
app.include_router(tenancy_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
