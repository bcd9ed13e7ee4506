"""Unit test fixtures with in-memory storage and fake external services."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from storage.application import StorageClient, TenantScopedStore
from storage.infrastructure.memory_store import InMemoryRecordStore
from tenancy.ports.exceptions import (
    IdentityDuplicateEmailError,
    IdentityDuplicateSlugError,
    IdentityProviderError,
)
from tenancy.ports.identity import IdentityOrganization, IdentityUser
from tenancy.ports.notifications import EmailMessage, NotificationError


class FakeIdentityProvider:
    """In-memory identity provider recording every call.

    Set ``fail_on`` to a method name and ``failure`` to the exception to
    make that call fail; ``hang_on`` makes a call block until cancelled.
    ``hang_after`` blocks only once the record exists, as when the
    provider commits a create but the response never arrives.
    """

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.organizations: dict[str, dict[str, Any]] = {}
        self.calls: list[str] = []
        self.fail_on: dict[str, Exception] = {}
        self.hang_on: set[str] = set()
        self.hang_after: set[str] = set()
        self._counter = 0

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}_{self._counter}"

    async def _enter(self, name: str) -> None:
        self.calls.append(name)
        if name in self.hang_on:
            await asyncio.Event().wait()
        if name in self.fail_on:
            raise self.fail_on[name]

    async def _settle(self, name: str) -> None:
        if name in self.hang_after:
            await asyncio.Event().wait()

    async def create_user(
        self,
        email: str,
        password: str,
        first_name: str,
        public_metadata: dict[str, Any],
    ) -> IdentityUser:
        await self._enter("create_user")
        if any(user["email"] == email for user in self.users.values()):
            raise IdentityDuplicateEmailError("That email address is taken.")
        user_id = self._next_id("user")
        self.users[user_id] = {
            "email": email,
            "first_name": first_name,
            "public_metadata": dict(public_metadata),
        }
        await self._settle("create_user")
        return IdentityUser(id=user_id, email=email)

    async def find_user_by_email(self, email: str) -> IdentityUser | None:
        await self._enter("find_user_by_email")
        for user_id, user in self.users.items():
            if user["email"] == email:
                return IdentityUser(
                    id=user_id, email=email, public_metadata=dict(user["public_metadata"])
                )
        return None

    async def delete_user(self, user_id: str) -> None:
        await self._enter("delete_user")
        self.users.pop(user_id, None)

    async def create_organization(
        self,
        name: str,
        slug: str,
        created_by: str,
        public_metadata: dict[str, Any],
    ) -> IdentityOrganization:
        await self._enter("create_organization")
        if any(org["slug"] == slug for org in self.organizations.values()):
            raise IdentityDuplicateSlugError("That slug is taken.")
        org_id = self._next_id("org")
        self.organizations[org_id] = {
            "name": name,
            "slug": slug,
            "created_by": created_by,
            "public_metadata": dict(public_metadata),
        }
        await self._settle("create_organization")
        return IdentityOrganization(id=org_id, name=name, slug=slug)

    async def find_organization_by_slug(self, slug: str) -> IdentityOrganization | None:
        await self._enter("find_organization_by_slug")
        for org_id, org in self.organizations.items():
            if org["slug"] == slug:
                return IdentityOrganization(
                    id=org_id,
                    name=org["name"],
                    slug=slug,
                    public_metadata=dict(org["public_metadata"]),
                )
        return None

    async def delete_organization(self, organization_id: str) -> None:
        await self._enter("delete_organization")
        self.organizations.pop(organization_id, None)

    async def update_user_metadata(
        self, user_id: str, public_metadata: dict[str, Any]
    ) -> None:
        await self._enter("update_user_metadata")
        if user_id not in self.users:
            raise IdentityProviderError("User not found", status=404)
        self.users[user_id]["public_metadata"] = dict(public_metadata)


class FakeNotificationSender:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[EmailMessage] = []
        self.fail = fail

    async def send(self, message: EmailMessage) -> None:
        if self.fail:
            raise NotificationError("mailbox unavailable")
        self.sent.append(message)


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    """Provide an empty in-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture
def scoped_store(memory_store) -> TenantScopedStore:
    """Provide the in-memory store behind the tenant-scoping interceptor."""
    return TenantScopedStore(memory_store)


@pytest.fixture
def storage(scoped_store) -> StorageClient:
    """Provide a tenant-scoped storage client."""
    return StorageClient(scoped_store)


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def notification_sender() -> FakeNotificationSender:
    return FakeNotificationSender()
