"""Application-level value objects for the Tenancy context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tenancy.domain.value_objects import (
    CountryCode,
    EmailAddress,
    Subdomain,
)
from tenancy.ports.exceptions import ValidationError


@dataclass(frozen=True)
class ProvisioningRequest:
    """Raw onboarding input. Validated by ``validated()``, never persisted as-is."""

    business_name: str | None
    email: str | None
    password: str | None = field(repr=False)
    subdomain: str | None
    license_token: str | None
    country_code: str | None
    template_id: str | None = None
    contact_info: dict[str, Any] | None = None

    def validated(self) -> ValidatedProvisioningRequest:
        """Check required fields and formats.

        Raises:
            ValidationError: "Missing required fields" when any required
                field is empty, or a format-specific message
        """
        required = (
            self.business_name,
            self.email,
            self.password,
            self.subdomain,
            self.license_token,
            self.country_code,
        )
        if any(value is None or not str(value).strip() for value in required):
            raise ValidationError("Missing required fields")

        assert self.business_name is not None
        assert self.email is not None
        assert self.password is not None
        assert self.subdomain is not None
        assert self.license_token is not None
        assert self.country_code is not None

        template_id = self.template_id.strip() if self.template_id else None
        return ValidatedProvisioningRequest(
            business_name=self.business_name.strip(),
            email=EmailAddress.from_string(self.email),
            password=self.password,
            subdomain=Subdomain.from_string(self.subdomain),
            license_token=self.license_token.strip(),
            country_code=CountryCode.from_string(self.country_code),
            template_id=template_id or None,
            contact_info=dict(self.contact_info) if self.contact_info else None,
        )


@dataclass(frozen=True)
class ValidatedProvisioningRequest:
    business_name: str
    email: EmailAddress
    password: str = field(repr=False)
    subdomain: Subdomain
    license_token: str
    country_code: CountryCode
    template_id: str | None = None
    contact_info: dict[str, Any] | None = None


@dataclass(frozen=True)
class ProvisioningResult:
    """Identifiers of everything a successful provisioning created."""

    tenant_id: str
    identity_user_id: str
    identity_org_id: str
