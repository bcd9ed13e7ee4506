"""Repository and application service dependencies for the Tenancy context."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from infrastructure.settings import (
    PlatformSettings,
    ProvisioningSettings,
    get_platform_settings,
    get_provisioning_settings,
)
from storage.application import StorageClient
from storage.dependencies import get_storage_client
from tenancy.application.notifications import WelcomeNotifier
from tenancy.application.services import ProvisioningService, TenantService
from tenancy.application.templates import TemplateResolver
from tenancy.dependencies.identity import get_identity_provider
from tenancy.dependencies.notifications import get_welcome_notifier
from tenancy.infrastructure import (
    AuditLogRepository,
    BrandingRepository,
    TemplateRepository,
    TenantRepository,
    UserRepository,
)
from tenancy.ports.identity import IdentityProvider


def get_tenant_repository(
    storage: Annotated[StorageClient, Depends(get_storage_client)],
) -> TenantRepository:
    return TenantRepository(storage)


def get_tenant_service(
    storage: Annotated[StorageClient, Depends(get_storage_client)],
    tenant_repository: Annotated[TenantRepository, Depends(get_tenant_repository)],
    platform: Annotated[PlatformSettings, Depends(get_platform_settings)],
) -> TenantService:
    """Get TenantService instance.

    Args:
        storage: Tenant-scoped storage client
        tenant_repository: Tenant repository over the same client
        platform: Platform settings, for host-based tenant resolution

    Returns:
        TenantService instance
    """
    return TenantService(
        storage=storage,
        tenant_repository=tenant_repository,
        audit_log_repository=AuditLogRepository(storage),
        platform_domain=platform.platform_domain,
    )


def get_provisioning_service(
    storage: Annotated[StorageClient, Depends(get_storage_client)],
    tenant_repository: Annotated[TenantRepository, Depends(get_tenant_repository)],
    identity_provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    notifier: Annotated[WelcomeNotifier, Depends(get_welcome_notifier)],
    settings: Annotated[ProvisioningSettings, Depends(get_provisioning_settings)],
) -> ProvisioningService:
    """Get ProvisioningService instance wired to the configured collaborators."""
    return ProvisioningService(
        storage=storage,
        tenant_repository=tenant_repository,
        user_repository=UserRepository(storage),
        branding_repository=BrandingRepository(storage),
        template_resolver=TemplateResolver(
            TemplateRepository(storage),
            default_slug=settings.default_template_slug,
        ),
        identity_provider=identity_provider,
        notifier=notifier,
        step_timeout=settings.step_timeout_seconds,
        strict_identity_link=settings.strict_identity_link,
    )
