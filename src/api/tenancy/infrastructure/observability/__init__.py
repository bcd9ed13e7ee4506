"""Domain-Oriented Observability for Tenancy infrastructure adapters."""

from tenancy.infrastructure.observability.external_service_probe import (
    DefaultExternalServiceProbe,
    ExternalServiceProbe,
)

__all__ = ["DefaultExternalServiceProbe", "ExternalServiceProbe"]
