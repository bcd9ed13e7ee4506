"""Request-scoped tenant context.

Binds the "current tenant id" to the dynamic extent of one logical
operation (an HTTP request, a background job) without threading it
through every call. The binding lives in a ``ContextVar``, so every
asyncio task and every thread observes its own value: concurrent
operations bound to different tenants never see each other's id.

Usage:
    with bind(tenant.id.value):
        products = await client.model("products").find_many()

Platform-admin code that must see every tenant's rows opts out
explicitly and narrowly:

    with platform_bypass("toggle tenant activation"):
        ...

This module is framework-agnostic; the HTTP wiring lives in
``shared_kernel.middleware.tenant_resolution``.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass

import structlog

_current_tenant: ContextVar[str | None] = ContextVar("current_tenant", default=None)
_bypass_reason: ContextVar[str | None] = ContextVar("scoping_bypass", default=None)

_logger = structlog.get_logger()


class IsolationViolation(Exception):
    """Raised when tenant-scoped data is touched with no bound tenant.

    This always indicates a defect in calling code. It must never be
    converted into a "not found" result, and its message must never be
    shown to end users.
    """

    def __init__(self, message: str, model: str | None = None):
        super().__init__(message)
        self.model = model


@dataclass(frozen=True)
class TenantContext:
    """Resolved tenant context for the current request.

    Attributes:
        tenant_id: The tenant identifier.
        source: How the tenant was resolved: 'path', 'subdomain',
            'custom_domain' or 'header'.
    """

    tenant_id: str
    source: str


@contextmanager
def bind(tenant_id: str) -> Iterator[str]:
    """Bind ``tenant_id`` as the current tenant for the enclosed block.

    Nested binds shadow the outer value and restore it on exit, even when
    the block raises.

    Raises:
        ValueError: If tenant_id is empty.
    """
    if not tenant_id:
        raise ValueError("tenant_id must not be empty")

    token = _current_tenant.set(tenant_id)
    log_tokens = structlog.contextvars.bind_contextvars(tenant_id=tenant_id)
    try:
        yield tenant_id
    finally:
        structlog.contextvars.reset_contextvars(**log_tokens)
        _current_tenant.reset(token)


def current() -> str | None:
    """Return the tenant id bound to the current execution context, if any."""
    return _current_tenant.get()


def require_current(model: str | None = None) -> str:
    """Return the bound tenant id or raise IsolationViolation."""
    tenant_id = _current_tenant.get()
    if tenant_id is None:
        raise IsolationViolation(
            f"No tenant bound for tenant-scoped access to '{model}'"
            if model
            else "No tenant bound for tenant-scoped access",
            model=model,
        )
    return tenant_id


@contextmanager
def platform_bypass(reason: str) -> Iterator[None]:
    """Disable tenant scoping for the enclosed block.

    Only platform-level flows (tenant activation, provisioning's user
    attach) may use this. The reason is logged and reported with every
    bypassed storage call.

    Raises:
        ValueError: If no reason is given.
    """
    if not reason:
        raise ValueError("A bypass reason is required")

    token = _bypass_reason.set(reason)
    _logger.info("tenant_scoping_bypass_entered", reason=reason)
    try:
        yield
    finally:
        _bypass_reason.reset(token)


def bypass_active() -> bool:
    """Return True inside a ``platform_bypass`` block."""
    return _bypass_reason.get() is not None


def bypass_reason() -> str | None:
    """Return the reason of the active bypass, if any."""
    return _bypass_reason.get()
