"""Tenancy domain layer: the Tenant aggregate and validated value objects."""

from tenancy.domain.aggregates import Template, Tenant
from tenancy.domain.value_objects import (
    IDENTITY_MANAGED_PASSWORD,
    RESERVED_SUBDOMAINS,
    CountryCode,
    CustomDomain,
    EmailAddress,
    Subdomain,
    TenantId,
    UserRole,
)

__all__ = [
    "IDENTITY_MANAGED_PASSWORD",
    "RESERVED_SUBDOMAINS",
    "CountryCode",
    "CustomDomain",
    "EmailAddress",
    "Subdomain",
    "Template",
    "Tenant",
    "TenantId",
    "UserRole",
]
