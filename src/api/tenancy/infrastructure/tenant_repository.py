"""Record-store implementation of ITenantRepository.

``tenants`` is a platform-level collection, so these calls pass through
the tenant-scoping interceptor untouched. Unique-key violations raised by
the store are translated to the tenancy conflict errors here.
"""

from __future__ import annotations

from typing import Any

from storage.application.client import StorageClient
from storage.ports.exceptions import RecordNotFound, UniqueConstraintViolation
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId
from tenancy.ports.exceptions import (
    CustomDomainTakenError,
    SubdomainTakenError,
    TenantNotFoundError,
)
from tenancy.ports.repositories import ITenantRepository

TENANTS = "tenants"


class TenantRepository(ITenantRepository):
    """Repository storing Tenant aggregates as ``tenants`` records."""

    def __init__(self, storage: StorageClient) -> None:
        self._tenants = storage.model(TENANTS)

    async def add(self, tenant: Tenant) -> Tenant:
        """Insert a new tenant.

        Raises:
            SubdomainTakenError: If the subdomain is already registered
            CustomDomainTakenError: If the custom domain is already registered
        """
        try:
            record = await self._tenants.create(
                {"id": tenant.id.value, **self._to_record(tenant)}
            )
        except UniqueConstraintViolation as e:
            raise self._conflict(e) from e
        return self._to_domain(record)

    async def save(self, tenant: Tenant) -> Tenant:
        """Persist changes to an existing tenant.

        The subdomain is never written on update.

        Raises:
            TenantNotFoundError: If the tenant does not exist
            CustomDomainTakenError: If the custom domain is already registered
        """
        data = self._to_record(tenant)
        data.pop("subdomain")
        try:
            record = await self._tenants.update(where={"id": tenant.id.value}, data=data)
        except RecordNotFound as e:
            raise TenantNotFoundError() from e
        except UniqueConstraintViolation as e:
            raise self._conflict(e) from e
        return self._to_domain(record)

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        return self._maybe(await self._tenants.find_unique(where={"id": tenant_id.value}))

    async def get_by_subdomain(self, subdomain: str) -> Tenant | None:
        record = await self._tenants.find_unique(where={"subdomain": subdomain.lower()})
        return self._maybe(record)

    async def get_by_custom_domain(self, domain: str) -> Tenant | None:
        record = await self._tenants.find_unique(where={"custom_domain": domain.lower()})
        return self._maybe(record)

    async def get_by_identity_org_id(self, org_id: str) -> Tenant | None:
        """Find the tenant linked to an identity provider organization.

        The link lives inside the settings document, so this scans the
        collection rather than using an index. It backs rare admin and
        webhook lookups only.
        """
        for record in await self._tenants.find_many():
            if (record.get("settings") or {}).get("identity_org_id") == org_id:
                return self._to_domain(record)
        return None

    async def list_all(self, active: bool | None = None) -> list[Tenant]:
        where = None if active is None else {"is_active": active}
        records = await self._tenants.find_many(
            where=where, order_by={"created_at": "desc"}
        )
        return [self._to_domain(record) for record in records]

    async def set_active_many(self, tenant_ids: list[TenantId], active: bool) -> int:
        if not tenant_ids:
            return 0
        return await self._tenants.update_many(
            where={"id": {"in": [tenant_id.value for tenant_id in tenant_ids]}},
            data={"is_active": active},
        )

    @staticmethod
    def _conflict(error: UniqueConstraintViolation) -> Exception:
        if "custom_domain" in error.fields:
            return CustomDomainTakenError()
        if "subdomain" in error.fields:
            return SubdomainTakenError()
        return error

    @staticmethod
    def _to_record(tenant: Tenant) -> dict[str, Any]:
        return {
            "business_name": tenant.business_name,
            "subdomain": tenant.subdomain,
            "custom_domain": tenant.custom_domain,
            "country_code": tenant.country_code,
            "is_active": tenant.is_active,
            "settings": dict(tenant.settings),
            "license_token": tenant.license_token,
            "template_id": tenant.template_id,
        }

    def _maybe(self, record: dict[str, Any] | None) -> Tenant | None:
        return None if record is None else self._to_domain(record)

    @staticmethod
    def _to_domain(record: dict[str, Any]) -> Tenant:
        return Tenant(
            id=TenantId(value=record["id"]),
            business_name=record["business_name"],
            subdomain=record["subdomain"],
            country_code=record.get("country_code") or "PT",
            is_active=bool(record.get("is_active", True)),
            custom_domain=record.get("custom_domain"),
            settings=dict(record.get("settings") or {}),
            license_token=record.get("license_token"),
            template_id=record.get("template_id"),
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )
