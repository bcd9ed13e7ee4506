"""Domain-Oriented Observability for the Tenancy application layer."""

from tenancy.application.observability.provisioning_probe import (
    DefaultProvisioningProbe,
    ProvisioningProbe,
)
from tenancy.application.observability.tenant_service_probe import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)

__all__ = [
    "DefaultProvisioningProbe",
    "DefaultTenantServiceProbe",
    "ProvisioningProbe",
    "TenantServiceProbe",
]
