"""Infrastructure adapters for the Tenancy bounded context."""

from tenancy.infrastructure.branding_repository import BrandingRepository
from tenancy.infrastructure.clerk_client import ClerkIdentityProvider
from tenancy.infrastructure.email_sender import UnconfiguredEmailSender, ResendEmailSender
from tenancy.infrastructure.log_repositories import (
    AuditLogRepository,
    EmailLogRepository,
)
from tenancy.infrastructure.template_repository import TemplateRepository
from tenancy.infrastructure.tenant_repository import TenantRepository
from tenancy.infrastructure.user_repository import UserRepository

__all__ = [
    "AuditLogRepository",
    "BrandingRepository",
    "ClerkIdentityProvider",
    "EmailLogRepository",
    "UnconfiguredEmailSender",
    "ResendEmailSender",
    "TemplateRepository",
    "TenantRepository",
    "UserRepository",
]
