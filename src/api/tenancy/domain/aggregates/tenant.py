"""Tenant aggregate for the Tenancy context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tenancy.domain.value_objects import (
    CountryCode,
    CustomDomain,
    Subdomain,
    TenantId,
)
from tenancy.ports.exceptions import ValidationError

IDENTITY_ORG_ID_KEY = "identity_org_id"


@dataclass
class Tenant:
    """Tenant aggregate representing one storefront.

    Business rules:
    - Subdomains are globally unique and immutable once created
    - Custom domains are globally unique when set
    - The identity provider organization link is written once at creation
    - Tenants are never hard-deleted; deactivation hides the storefront
    """

    id: TenantId
    business_name: str
    subdomain: str
    country_code: str = "PT"
    is_active: bool = True
    custom_domain: str | None = None
    settings: dict[str, Any] = field(default_factory=dict)
    license_token: str | None = None
    template_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def create(
        cls,
        business_name: str,
        subdomain: Subdomain,
        country_code: CountryCode,
        identity_org_id: str,
        license_token: str | None = None,
        template_id: str | None = None,
        template_preset: str | None = None,
        contact_info: dict[str, Any] | None = None,
    ) -> Tenant:
        """Factory method for a freshly provisioned, active tenant.

        The local id is generated here and is independent of the identity
        provider's organization id, which is kept in settings.
        """
        settings: dict[str, Any] = {IDENTITY_ORG_ID_KEY: identity_org_id}
        if contact_info is not None:
            settings["contact_info"] = contact_info
        if template_preset is not None:
            settings["template_preset"] = template_preset

        return cls(
            id=TenantId.generate(),
            business_name=business_name,
            subdomain=subdomain.value,
            country_code=country_code.value,
            is_active=True,
            settings=settings,
            license_token=license_token,
            template_id=template_id,
        )

    @property
    def identity_org_id(self) -> str | None:
        return self.settings.get(IDENTITY_ORG_ID_KEY)

    def activate(self) -> None:
        self.is_active = True

    def deactivate(self) -> None:
        self.is_active = False

    def toggle_active(self) -> bool:
        """Flip the active flag and return the new value."""
        self.is_active = not self.is_active
        return self.is_active

    def update_profile(
        self,
        business_name: str | None = None,
        custom_domain: str | None = None,
        settings: dict[str, Any] | None = None,
        subdomain: str | None = None,
    ) -> None:
        """Apply tenant-admin edits.

        Args:
            business_name: New display name
            custom_domain: New custom domain; an empty string clears it
            settings: Keys merged over the existing settings
            subdomain: Accepted only when unchanged

        Raises:
            ValidationError: On an attempt to change the subdomain or the
                identity organization link, or on invalid values
        """
        if subdomain is not None and subdomain.strip().lower() != self.subdomain:
            raise ValidationError("Subdomain cannot be changed")

        if business_name is not None:
            name = business_name.strip()
            if not name:
                raise ValidationError("Business name cannot be empty")
            self.business_name = name

        if custom_domain is not None:
            self.custom_domain = (
                CustomDomain.from_string(custom_domain).value if custom_domain else None
            )

        if settings:
            if (
                IDENTITY_ORG_ID_KEY in settings
                and settings[IDENTITY_ORG_ID_KEY] != self.identity_org_id
            ):
                raise ValidationError("Identity organization link cannot be changed")
            self.settings = {**self.settings, **settings}
