"""Repository protocols (ports) for the Tenancy bounded context.

Implementations read and write through the tenant-scoped record store.
``tenants`` and ``templates`` are platform-level collections; every other
repository here touches a tenant-scoped collection and therefore works on
the tenant bound in the current tenant context.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from tenancy.domain.aggregates import Template, Tenant
from tenancy.domain.value_objects import TenantId


@runtime_checkable
class ITenantRepository(Protocol):
    """Repository for Tenant aggregate persistence."""

    async def add(self, tenant: Tenant) -> Tenant:
        """Insert a new tenant.

        Returns:
            The tenant as stored, with timestamps populated

        Raises:
            SubdomainTakenError: If the subdomain is already registered
            CustomDomainTakenError: If the custom domain is already registered
        """
        ...

    async def save(self, tenant: Tenant) -> Tenant:
        """Persist changes to an existing tenant.

        Raises:
            TenantNotFoundError: If the tenant does not exist
            CustomDomainTakenError: If the custom domain is already registered
        """
        ...

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None: ...

    async def get_by_subdomain(self, subdomain: str) -> Tenant | None: ...

    async def get_by_custom_domain(self, domain: str) -> Tenant | None: ...

    async def get_by_identity_org_id(self, org_id: str) -> Tenant | None: ...

    async def list_all(self, active: bool | None = None) -> list[Tenant]:
        """List tenants, newest first, optionally filtered by active flag."""
        ...

    async def set_active_many(self, tenant_ids: list[TenantId], active: bool) -> int:
        """Set the active flag on several tenants and return how many matched."""
        ...


@runtime_checkable
class ITemplateRepository(Protocol):
    """Repository for the storefront template catalogue."""

    async def get_by_slug(self, slug: str) -> Template | None: ...

    async def create(
        self,
        name: str,
        slug: str,
        description: str | None = None,
        category: str | None = None,
        version: str = "1.0.0",
        author: str | None = None,
    ) -> Template:
        """Create a catalogue entry.

        Raises:
            UniqueConstraintViolation: If the slug already exists
        """
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """Repository for local user rows mirroring identity provider users."""

    async def get_by_email(self, email: str) -> dict[str, Any] | None:
        """Look up a user by email across all tenants."""
        ...

    async def attach_tenant_admin(
        self, email: str, name: str, tenant_id: TenantId
    ) -> dict[str, Any]:
        """Create or update the admin user row for a tenant, keyed by email."""
        ...


@runtime_checkable
class IBrandingRepository(Protocol):
    """Repository for the bound tenant's branding row."""

    async def create(
        self,
        primary_color: str,
        secondary_color: str,
        accent_color: str,
        font_family: str,
    ) -> dict[str, Any]: ...


@runtime_checkable
class IAuditLogRepository(Protocol):
    """Append-only audit entries for the bound tenant."""

    async def record(
        self,
        action: str,
        entity_type: str,
        entity_id: str | None,
        actor: str | None,
        details: dict[str, Any] | None = None,
    ) -> None: ...


@runtime_checkable
class IEmailLogRepository(Protocol):
    """Delivery log of emails sent on behalf of the bound tenant."""

    async def record(
        self,
        recipient: str,
        subject: str,
        template_name: str | None,
        status: str,
        error: str | None = None,
    ) -> None: ...
