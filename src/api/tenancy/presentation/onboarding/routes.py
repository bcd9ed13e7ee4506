"""HTTP routes for self-service tenant onboarding."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from tenancy.application.services import ProvisioningService
from tenancy.dependencies.services import get_provisioning_service
from tenancy.presentation.onboarding.models import (
    OnboardingRequest,
    OnboardingResponse,
)

router = APIRouter(
    prefix="/onboarding",
    tags=["onboarding"],
)


@router.post("", status_code=status.HTTP_201_CREATED)
async def onboard_tenant(
    request: OnboardingRequest,
    service: Annotated[ProvisioningService, Depends(get_provisioning_service)],
) -> OnboardingResponse:
    """Provision a new storefront tenant.

    Creates the identity provider user and organization, then the local
    tenant, branding and admin user. Either everything is created or
    nothing is.

    Raises:
        400: Missing or malformed input
        409: Subdomain, email or organization slug already taken
        502: The identity provider failed or timed out
    """
    result = await service.provision(request.to_request())
    return OnboardingResponse.from_result(result)
