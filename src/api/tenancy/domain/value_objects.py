"""Value objects for the Tenancy domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and validated inputs. The ``from_string``
constructors normalize their input and raise ``ValidationError`` with a
message that can be shown to the person filling in the onboarding form.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from ulid import ULID

from tenancy.ports.exceptions import ValidationError

# Stored in users.password for accounts whose credentials live in the
# identity provider. Never a valid password hash.
IDENTITY_MANAGED_PASSWORD = "IDENTITY_PROVIDER_MANAGED"

RESERVED_SUBDOMAINS = frozenset(
    {"www", "api", "app", "admin", "super-admin", "store", "auth"}
)

_SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{1,61}[a-z0-9])$")
_HOST_LABEL_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class UserRole(StrEnum):
    """Roles stored on local user rows and in identity provider metadata."""

    SUPER_ADMIN = "SUPER_ADMIN"
    TENANT_ADMIN = "TENANT_ADMIN"
    CUSTOMER = "CUSTOMER"


@dataclass(frozen=True)
class TenantId:
    """Identifier for a Tenant aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls) -> TenantId:
        """Generate a new TenantId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid TenantId: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class Subdomain:
    """A tenant's platform subdomain, also used as the organization slug.

    Lower-case letters, digits and hyphens; 3 to 63 characters; no leading
    or trailing hyphen; not one of the reserved platform names.
    """

    value: str

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, value: str) -> Subdomain:
        normalized = value.strip().lower()
        if not _SUBDOMAIN_PATTERN.match(normalized):
            raise ValidationError(
                "Subdomain must be 3-63 characters of lowercase letters, digits "
                "or hyphens, and cannot start or end with a hyphen"
            )
        if normalized in RESERVED_SUBDOMAINS:
            raise ValidationError(f"Subdomain '{normalized}' is reserved")
        return cls(value=normalized)


@dataclass(frozen=True)
class CustomDomain:
    """A tenant-owned hostname such as ``shop.example.com``."""

    value: str

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, value: str) -> CustomDomain:
        normalized = value.strip().lower().rstrip(".")
        labels = normalized.split(".")
        if (
            len(labels) < 2
            or len(normalized) > 253
            or not all(_HOST_LABEL_PATTERN.match(label) for label in labels)
        ):
            raise ValidationError(f"Invalid custom domain: {value}")
        return cls(value=normalized)


@dataclass(frozen=True)
class CountryCode:
    """ISO 3166-1 alpha-2 country code, stored upper case."""

    value: str

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, value: str) -> CountryCode:
        normalized = value.strip().upper()
        if len(normalized) != 2 or not normalized.isalpha() or not normalized.isascii():
            raise ValidationError("Country code must be two letters")
        return cls(value=normalized)


@dataclass(frozen=True)
class EmailAddress:
    value: str

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, value: str) -> EmailAddress:
        normalized = value.strip().lower()
        if not _EMAIL_PATTERN.match(normalized):
            raise ValidationError("Invalid email address")
        return cls(value=normalized)
