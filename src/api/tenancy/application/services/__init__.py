"""Application services for the Tenancy bounded context."""

from tenancy.application.services.provisioning_service import ProvisioningService
from tenancy.application.services.tenant_service import TenantService

__all__ = ["ProvisioningService", "TenantService"]
