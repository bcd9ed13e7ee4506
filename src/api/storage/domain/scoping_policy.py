"""Tenant scoping policy: which record collections are tenant-scoped, and how.

The policy is an explicit table rather than something inferred from the
schema, so adding a collection is a reviewed change:

- STRICT: every row belongs to exactly one tenant.
- ALLOW_NULL: rows with ``tenant_id = NULL`` are shared defaults visible
  to every tenant (e.g. default email templates).

Collections absent from the table (``tenants``, ``templates``) are
platform-level and pass through the interceptor untouched.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum
from types import MappingProxyType


class ScopeMode(StrEnum):
    """How tenant scoping applies to a record collection."""

    STRICT = "strict"
    ALLOW_NULL = "allow_null"


class ScopingPolicy:
    """Immutable model name → ScopeMode table."""

    def __init__(self, modes: Mapping[str, ScopeMode]):
        self._modes = MappingProxyType(dict(modes))

    @classmethod
    def from_sets(
        cls,
        scoped: Iterable[str],
        allow_null: Iterable[str] = (),
    ) -> ScopingPolicy:
        """Build a policy from a scoped set and its allow-null subset.

        Raises:
            ValueError: If an allow-null model is not in the scoped set
        """
        scoped_set = set(scoped)
        allow_null_set = set(allow_null)
        unknown = allow_null_set - scoped_set
        if unknown:
            raise ValueError(
                f"Allow-null models must also be tenant-scoped: {sorted(unknown)}"
            )
        return cls(
            {
                model: ScopeMode.ALLOW_NULL
                if model in allow_null_set
                else ScopeMode.STRICT
                for model in scoped_set
            }
        )

    def mode_for(self, model: str) -> ScopeMode | None:
        """Return the scope mode of a model, or None if it is not tenant-scoped."""
        return self._modes.get(model)

    def is_scoped(self, model: str) -> bool:
        return model in self._modes

    def allows_null(self, model: str) -> bool:
        return self._modes.get(model) is ScopeMode.ALLOW_NULL

    def describe(self) -> dict[str, str]:
        """Return the table as plain data, sorted by model name, for audits."""
        return {model: self._modes[model].value for model in sorted(self._modes)}


DEFAULT_SCOPING_POLICY = ScopingPolicy.from_sets(
    scoped=(
        "audit_logs",
        "carts",
        "conditions",
        "consultations",
        "email_event_mappings",
        "email_logs",
        "email_templates",
        "orders",
        "posts",
        "products",
        "tenant_branding",
        "tenant_templates",
        "users",
        "webhook_logs",
        "webhooks",
    ),
    allow_null=(
        "email_event_mappings",
        "email_templates",
    ),
)
