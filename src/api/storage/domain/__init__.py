"""Pure storage domain: the where-filter algebra and the scoping policy table."""

from storage.domain.filters import InvalidFilterError, and_, matches, tenant_scope
from storage.domain.scoping_policy import (
    DEFAULT_SCOPING_POLICY,
    ScopeMode,
    ScopingPolicy,
)

__all__ = [
    "DEFAULT_SCOPING_POLICY",
    "InvalidFilterError",
    "ScopeMode",
    "ScopingPolicy",
    "and_",
    "matches",
    "tenant_scope",
]
