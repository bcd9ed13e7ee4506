"""Exceptions for the Tenancy bounded context.

``TenancyError`` subclasses are user-facing: each carries a ``kind`` that
the presentation layer maps to an HTTP status, and a message that is safe
to show. Identity adapter errors are internal and are translated by the
provisioning service before they reach a caller.
"""

from __future__ import annotations


class TenancyError(Exception):
    """Base class for user-facing tenancy errors."""

    kind: str = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


class ValidationError(TenancyError):
    """Input failed validation. Nothing was created."""

    kind = "validation"


class ConflictError(TenancyError):
    """A unique business key is already in use."""

    kind = "conflict"


class SubdomainTakenError(ConflictError):
    def __init__(self, message: str = "Subdomain already taken"):
        super().__init__(message)


class EmailTakenError(ConflictError):
    def __init__(self, message: str = "Email already registered"):
        super().__init__(message)


class CustomDomainTakenError(ConflictError):
    def __init__(self, message: str = "Custom domain already in use"):
        super().__init__(message)


class IdentityConflictError(ConflictError):
    """The identity provider refused a duplicate email or organization slug."""

    pass


class UpstreamError(TenancyError):
    """An external collaborator failed or timed out."""

    kind = "upstream"


class InternalError(TenancyError):
    """An unexpected failure. The message never carries the underlying cause."""

    kind = "internal"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


class TenantNotFoundError(TenancyError):
    kind = "not_found"

    def __init__(self, message: str = "Tenant not found"):
        super().__init__(message)


class IdentityProviderError(Exception):
    """Raised by identity provider adapters.

    Attributes:
        message: Human-readable message from the provider
        code: Provider error code, when one was returned
        status: HTTP status of the failed call, when there was one
    """

    def __init__(
        self, message: str, code: str | None = None, status: int | None = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


class IdentityDuplicateEmailError(IdentityProviderError):
    """The provider already has a user with this email."""

    pass


class IdentityDuplicateSlugError(IdentityProviderError):
    """The provider already has an organization with this slug."""

    pass
