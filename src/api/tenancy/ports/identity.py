"""Identity provider port.

The identity provider is the system of record for credentials and
organizations. Adapters raise ``IdentityProviderError`` subclasses; the
duplicate-email and duplicate-slug cases have their own types so callers
can tell them apart from transport failures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class IdentityUser:
    id: str
    email: str
    public_metadata: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class IdentityOrganization:
    id: str
    name: str
    slug: str
    public_metadata: dict[str, Any] = field(default_factory=dict, compare=False)


@runtime_checkable
class IdentityProvider(Protocol):
    """Operations the provisioning saga needs from the identity provider."""

    async def create_user(
        self,
        email: str,
        password: str,
        first_name: str,
        public_metadata: dict[str, Any],
    ) -> IdentityUser:
        """Create a user.

        Raises:
            IdentityDuplicateEmailError: If the email is already registered
            IdentityProviderError: For any other failure
        """
        ...

    async def find_user_by_email(self, email: str) -> IdentityUser | None:
        """Return the user registered with ``email``, if any."""
        ...

    async def delete_user(self, user_id: str) -> None: ...

    async def create_organization(
        self,
        name: str,
        slug: str,
        created_by: str,
        public_metadata: dict[str, Any],
    ) -> IdentityOrganization:
        """Create an organization owned by ``created_by``.

        Raises:
            IdentityDuplicateSlugError: If the slug is already taken
            IdentityProviderError: For any other failure
        """
        ...

    async def find_organization_by_slug(self, slug: str) -> IdentityOrganization | None:
        """Return the organization with ``slug``, if any."""
        ...

    async def delete_organization(self, organization_id: str) -> None: ...

    async def update_user_metadata(
        self, user_id: str, public_metadata: dict[str, Any]
    ) -> None:
        """Replace the user's public metadata."""
        ...
