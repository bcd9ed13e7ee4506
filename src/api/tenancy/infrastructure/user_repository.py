"""Record-store implementation of IUserRepository.

Emails are globally unique across tenants, so both lookups here
deliberately step outside the bound tenant with ``platform_bypass``.
"""

from __future__ import annotations

from typing import Any

from shared_kernel.middleware import tenant_context
from storage.application.client import StorageClient
from storage.ports.exceptions import UniqueConstraintViolation
from tenancy.domain.value_objects import IDENTITY_MANAGED_PASSWORD, TenantId, UserRole
from tenancy.ports.exceptions import EmailTakenError
from tenancy.ports.repositories import IUserRepository

USERS = "users"


class UserRepository(IUserRepository):
    def __init__(self, storage: StorageClient) -> None:
        self._users = storage.model(USERS)

    async def get_by_email(self, email: str) -> dict[str, Any] | None:
        with tenant_context.platform_bypass("global email uniqueness check"):
            return await self._users.find_first(where={"email": email})

    async def attach_tenant_admin(
        self, email: str, name: str, tenant_id: TenantId
    ) -> dict[str, Any]:
        """Upsert the tenant's admin row keyed by email.

        An existing row (e.g. written by an identity webhook racing the
        onboarding) is moved to the new tenant and promoted; otherwise a
        row is created with the identity-managed password sentinel.

        Raises:
            EmailTakenError: If a concurrent request claimed the email
        """
        with tenant_context.platform_bypass("attach tenant admin by email"):
            try:
                return await self._users.upsert(
                    where={"email": email},
                    create={
                        "email": email,
                        "name": name,
                        "password": IDENTITY_MANAGED_PASSWORD,
                        "role": UserRole.TENANT_ADMIN.value,
                        "tenant_id": tenant_id.value,
                    },
                    update={
                        "name": name,
                        "role": UserRole.TENANT_ADMIN.value,
                        "tenant_id": tenant_id.value,
                    },
                )
            except UniqueConstraintViolation as e:
                raise EmailTakenError() from e
