"""Record-store implementation of IBrandingRepository."""

from __future__ import annotations

from typing import Any

from storage.application.client import StorageClient
from tenancy.ports.repositories import IBrandingRepository

TENANT_BRANDING = "tenant_branding"


class BrandingRepository(IBrandingRepository):
    """Writes ``tenant_branding`` rows; the interceptor stamps ``tenant_id``."""

    def __init__(self, storage: StorageClient) -> None:
        self._branding = storage.model(TENANT_BRANDING)

    async def create(
        self,
        primary_color: str,
        secondary_color: str,
        accent_color: str,
        font_family: str,
    ) -> dict[str, Any]:
        return await self._branding.create(
            {
                "primary_color": primary_color,
                "secondary_color": secondary_color,
                "accent_color": accent_color,
                "font_family": font_family,
            }
        )
