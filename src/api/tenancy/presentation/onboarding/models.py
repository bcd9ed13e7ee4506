"""Pydantic models for the onboarding API."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from tenancy.application.value_objects import ProvisioningRequest, ProvisioningResult


class OnboardingRequest(BaseModel):
    """Request model for self-service tenant onboarding.

    Fields are optional at the schema level so a missing field yields the
    uniform "Missing required fields" validation error rather than a 422.
    """

    business_name: str | None = Field(default=None, alias="businessName")
    email: str | None = None
    password: str | None = None
    subdomain: str | None = None
    license_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("licenseToken", "nftTokenId", "license_token"),
    )
    country_code: str | None = Field(default=None, alias="countryCode")
    template_id: str | None = Field(default=None, alias="templateId")
    contact_info: dict[str, Any] | None = Field(default=None, alias="contactInfo")

    model_config = {"populate_by_name": True}

    def to_request(self) -> ProvisioningRequest:
        return ProvisioningRequest(
            business_name=self.business_name,
            email=self.email,
            password=self.password,
            subdomain=self.subdomain,
            license_token=self.license_token,
            country_code=self.country_code,
            template_id=self.template_id,
            contact_info=self.contact_info,
        )


class OnboardingResponse(BaseModel):
    success: bool = True
    message: str = "Store created successfully"
    tenant_id: str
    identity_user_id: str
    identity_org_id: str

    @classmethod
    def from_result(cls, result: ProvisioningResult) -> OnboardingResponse:
        return cls(
            tenant_id=result.tenant_id,
            identity_user_id=result.identity_user_id,
            identity_org_id=result.identity_org_id,
        )
