"""Pydantic models for the tenant administration API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class UpdateTenantSettingsRequest(BaseModel):
    """Profile edits; omitted fields are left unchanged.

    ``custom_domain`` set to an empty string removes the custom domain.
    ``subdomain`` is accepted only when it equals the current value.
    """

    business_name: str | None = Field(default=None, alias="businessName")
    custom_domain: str | None = Field(default=None, alias="customDomain")
    settings: dict[str, Any] | None = None
    subdomain: str | None = None

    model_config = {"populate_by_name": True}
