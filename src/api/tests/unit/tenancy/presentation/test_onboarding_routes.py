"""Unit tests for the onboarding HTTP route.

The provisioning service is mocked; these tests cover request parsing,
response shape and the error-kind to status mapping.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from tenancy.application.services import ProvisioningService
from tenancy.application.value_objects import ProvisioningResult
from tenancy.ports.exceptions import (
    IdentityConflictError,
    InternalError,
    SubdomainTakenError,
    UpstreamError,
    ValidationError,
)

PAYLOAD = {
    "businessName": "Acme",
    "email": "o@acme.io",
    "password": "s3cret-pass",
    "subdomain": "acme",
    "licenseToken": "nft-1",
    "countryCode": "PT",
    "templateId": "medical",
    "contactInfo": {"phone": "1"},
}


@pytest.fixture
def mock_provisioning_service() -> AsyncMock:
    return AsyncMock(spec=ProvisioningService)


@pytest.fixture
def test_client(mock_provisioning_service: AsyncMock) -> TestClient:
    from tenancy.dependencies.services import get_provisioning_service
    from tenancy.presentation import register_exception_handlers, router

    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(router)
    app.dependency_overrides[get_provisioning_service] = lambda: mock_provisioning_service
    return TestClient(app)


class TestOnboardTenant:
    def test_returns_201_with_created_ids(self, test_client, mock_provisioning_service):
        mock_provisioning_service.provision.return_value = ProvisioningResult(
            tenant_id="01HZZZZZZZZZZZZZZZZZZZZZZA",
            identity_user_id="user_1",
            identity_org_id="org_1",
        )

        response = test_client.post("/onboarding", json=PAYLOAD)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json() == {
            "success": True,
            "message": "Store created successfully",
            "tenant_id": "01HZZZZZZZZZZZZZZZZZZZZZZA",
            "identity_user_id": "user_1",
            "identity_org_id": "org_1",
        }
        request = mock_provisioning_service.provision.call_args.args[0]
        assert request.business_name == "Acme"
        assert request.license_token == "nft-1"
        assert request.contact_info == {"phone": "1"}

    def test_missing_fields_reach_the_service_as_none(
        self, test_client, mock_provisioning_service
    ):
        mock_provisioning_service.provision.side_effect = ValidationError(
            "Missing required fields"
        )

        response = test_client.post("/onboarding", json={"email": "o@acme.io"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {
            "kind": "validation",
            "message": "Missing required fields",
        }
        assert mock_provisioning_service.provision.call_args.args[0].subdomain is None

    @pytest.mark.parametrize(
        ("error", "expected_status", "kind"),
        [
            (SubdomainTakenError(), status.HTTP_409_CONFLICT, "conflict"),
            (
                IdentityConflictError("Organization URL/Slug is already taken."),
                status.HTTP_409_CONFLICT,
                "conflict",
            ),
            (UpstreamError("Authentication Error: boom"), status.HTTP_502_BAD_GATEWAY, "upstream"),
            (InternalError(), status.HTTP_500_INTERNAL_SERVER_ERROR, "internal"),
        ],
    )
    def test_error_kinds_map_to_status(
        self, test_client, mock_provisioning_service, error, expected_status, kind
    ):
        mock_provisioning_service.provision.side_effect = error

        response = test_client.post("/onboarding", json=PAYLOAD)

        assert response.status_code == expected_status
        assert response.json() == {"kind": kind, "message": error.message}

    @pytest.mark.parametrize("field", ["nftTokenId", "license_token"])
    def test_legacy_license_token_names_are_accepted(
        self, test_client, mock_provisioning_service, field
    ):
        mock_provisioning_service.provision.return_value = ProvisioningResult(
            tenant_id="01HZZZZZZZZZZZZZZZZZZZZZZA",
            identity_user_id="user_1",
            identity_org_id="org_1",
        )
        payload = {k: v for k, v in PAYLOAD.items() if k != "licenseToken"}
        payload[field] = "nft-legacy"

        response = test_client.post("/onboarding", json=payload)

        assert response.status_code == status.HTTP_201_CREATED
        request = mock_provisioning_service.provision.call_args.args[0]
        assert request.license_token == "nft-legacy"
