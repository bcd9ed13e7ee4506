"""Unit tests for the platform administrator routes."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient
from pydantic import SecretStr

from infrastructure.settings import PlatformSettings
from tenancy.application.services import TenantService
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId
from tenancy.ports.exceptions import TenantNotFoundError, ValidationError

ADMIN_HEADERS = {"Authorization": "Bearer platform-secret", "X-Actor": "ops@platform"}


@pytest.fixture
def mock_tenant_service() -> AsyncMock:
    return AsyncMock(spec=TenantService)


@pytest.fixture
def sample_tenant() -> Tenant:
    return Tenant(
        id=TenantId.generate(),
        business_name="Acme",
        subdomain="acme",
        settings={"identity_org_id": "org_1"},
    )


def build_client(service: AsyncMock, admin_token: str = "platform-secret") -> TestClient:
    from infrastructure.settings import get_platform_settings
    from tenancy.dependencies.services import get_tenant_service
    from tenancy.presentation import register_exception_handlers, router

    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(router)
    app.dependency_overrides[get_tenant_service] = lambda: service
    app.dependency_overrides[get_platform_settings] = lambda: PlatformSettings(
        admin_token=SecretStr(admin_token)
    )
    return TestClient(app)


@pytest.fixture
def test_client(mock_tenant_service) -> TestClient:
    return build_client(mock_tenant_service)


class TestAdminAuthentication:
    def test_missing_token_is_401(self, test_client, mock_tenant_service):
        response = test_client.get("/super-admin/tenants")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"
        mock_tenant_service.list_tenants.assert_not_called()

    def test_wrong_token_is_401(self, test_client):
        response = test_client.get(
            "/super-admin/tenants", headers={"Authorization": "Bearer guess"}
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_unconfigured_token_refuses_everything(self, mock_tenant_service):
        client = build_client(mock_tenant_service, admin_token="")

        response = client.get("/super-admin/tenants", headers={"Authorization": "Bearer "})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestTenantRoutes:
    def test_list_passes_active_filter(self, test_client, mock_tenant_service, sample_tenant):
        mock_tenant_service.list_tenants.return_value = [sample_tenant]

        response = test_client.get("/super-admin/tenants?active=true", headers=ADMIN_HEADERS)

        assert response.status_code == status.HTTP_200_OK
        assert [t["subdomain"] for t in response.json()] == ["acme"]
        mock_tenant_service.list_tenants.assert_called_once_with(active=True)

    def test_get_malformed_id_is_400(self, test_client):
        response = test_client.get("/super-admin/tenants/not-a-ulid", headers=ADMIN_HEADERS)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_get_unknown_tenant_is_404(self, test_client, mock_tenant_service):
        mock_tenant_service.get_tenant.side_effect = TenantNotFoundError()

        response = test_client.get(
            f"/super-admin/tenants/{TenantId.generate().value}", headers=ADMIN_HEADERS
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"kind": "not_found", "message": "Tenant not found"}

    def test_toggle_records_actor(self, test_client, mock_tenant_service, sample_tenant):
        sample_tenant.is_active = False
        mock_tenant_service.toggle_active.return_value = sample_tenant

        response = test_client.post(
            f"/super-admin/tenants/{sample_tenant.id.value}/toggle-active",
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_active"] is False
        mock_tenant_service.toggle_active.assert_called_once_with(
            sample_tenant.id, actor="ops@platform"
        )


class TestBulkActivation:
    def test_bulk_deactivate_message(self, test_client, mock_tenant_service):
        mock_tenant_service.bulk_set_active.return_value = 2
        ids = [TenantId.generate().value, TenantId.generate().value]

        response = test_client.post(
            "/super-admin/tenants/bulk",
            json={"tenantIds": ids, "isActive": False},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "success": True,
            "count": 2,
            "message": "Successfully deactivated 2 tenant(s)",
        }
        mock_tenant_service.bulk_set_active.assert_called_once_with(
            ids, active=False, actor="ops@platform"
        )

    def test_bulk_validation_error_is_400(self, test_client, mock_tenant_service):
        mock_tenant_service.bulk_set_active.side_effect = ValidationError(
            "Tenant IDs are required"
        )

        response = test_client.post(
            "/super-admin/tenants/bulk",
            json={"tenantIds": [], "isActive": True},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["kind"] == "validation"
