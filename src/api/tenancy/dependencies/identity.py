"""Identity provider dependency.

The provider owns a pooled ``httpx.AsyncClient``, so one instance is shared
by the whole application and closed on shutdown.
"""

from __future__ import annotations

from functools import lru_cache

from infrastructure.settings import get_identity_provider_settings
from tenancy.infrastructure.clerk_client import ClerkIdentityProvider


@lru_cache
def get_identity_provider() -> ClerkIdentityProvider:
    settings = get_identity_provider_settings()
    return ClerkIdentityProvider(
        secret_key=settings.secret_key.get_secret_value(),
        base_url=settings.base_url,
        timeout=settings.timeout_seconds,
    )


async def close_identity_provider() -> None:
    """Close the shared provider client if it was ever created."""
    if get_identity_provider.cache_info().currsize:
        await get_identity_provider().aclose()
        get_identity_provider.cache_clear()
