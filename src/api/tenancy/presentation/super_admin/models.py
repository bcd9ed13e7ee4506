"""Pydantic models for the platform administration API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BulkActivationRequest(BaseModel):
    tenant_ids: list[str] = Field(default_factory=list, alias="tenantIds")
    active: bool = Field(..., alias="isActive")

    model_config = {"populate_by_name": True}


class BulkActivationResponse(BaseModel):
    success: bool = True
    count: int
    message: str
