"""Aggregates for the Tenancy domain."""

from tenancy.domain.aggregates.template import Template
from tenancy.domain.aggregates.tenant import IDENTITY_ORG_ID_KEY, Tenant

__all__ = ["IDENTITY_ORG_ID_KEY", "Template", "Tenant"]
