"""End-to-end tests for tenant-bound routes.

Runs the real resolution middleware, services and repositories over the
in-memory store, with a fake identity provider. Tenants are created
through the onboarding route.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient
from pydantic import SecretStr

from infrastructure.settings import PlatformSettings, ProvisioningSettings
from shared_kernel.middleware.tenant_resolution import TenantResolutionMiddleware
from storage.ports.exceptions import IsolationViolation

PLATFORM_DOMAIN = "storefront.local"
ADMIN_HEADERS = {"Authorization": "Bearer platform-secret"}


def onboarding_payload(subdomain: str) -> dict:
    return {
        "businessName": subdomain.title(),
        "email": f"owner@{subdomain}.io",
        "password": "s3cret-pass",
        "subdomain": subdomain,
        "licenseToken": "nft-1",
        "countryCode": "PT",
    }


@pytest.fixture
def app(storage, identity_provider, monkeypatch) -> FastAPI:
    from infrastructure.settings import get_platform_settings, get_provisioning_settings
    from storage.dependencies import get_storage_client
    from tenancy.dependencies import tenant_lookup
    from tenancy.dependencies.identity import get_identity_provider
    from tenancy.dependencies.notifications import get_welcome_notifier
    from tenancy.presentation import register_exception_handlers, router

    monkeypatch.setattr(tenant_lookup, "get_storage_client", lambda: storage)

    app = FastAPI()
    app.add_middleware(
        TenantResolutionMiddleware,
        lookup=tenant_lookup.build_tenant_lookup(PLATFORM_DOMAIN),
        platform_domain=PLATFORM_DOMAIN,
    )
    register_exception_handlers(app)
    app.include_router(router)

    @app.get("/store/{subdomain}/leak")
    async def leak(subdomain: str):
        raise IsolationViolation("products read outside tenant scope", model="products")

    app.dependency_overrides[get_storage_client] = lambda: storage
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    app.dependency_overrides[get_welcome_notifier] = lambda: None
    app.dependency_overrides[get_provisioning_settings] = lambda: ProvisioningSettings()
    app.dependency_overrides[get_platform_settings] = lambda: PlatformSettings(
        platform_domain=PLATFORM_DOMAIN, admin_token=SecretStr("platform-secret")
    )
    return app


@pytest.fixture
def platform_client(app) -> TestClient:
    return TestClient(app, base_url=f"http://{PLATFORM_DOMAIN}")


@pytest.fixture
def acme_id(platform_client) -> str:
    response = platform_client.post("/onboarding", json=onboarding_payload("acme"))
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["tenant_id"]


@pytest.fixture
def acme_client(app, acme_id) -> TestClient:
    return TestClient(app, base_url=f"http://acme.{PLATFORM_DOMAIN}")


class TestOnboardingThroughTheStack:
    def test_duplicate_subdomain_is_409_and_creates_nothing_remote(
        self, platform_client, acme_id, identity_provider
    ):
        payload = onboarding_payload("acme")
        payload["email"] = "other@acme.io"

        response = platform_client.post("/onboarding", json=payload)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json() == {"kind": "conflict", "message": "Subdomain already taken"}
        assert len(identity_provider.users) == 1


class TestTenantAdminRoutes:
    def test_get_own_tenant(self, acme_client, acme_id):
        response = acme_client.get("/tenant-admin/tenant")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["id"] == acme_id
        assert body["subdomain"] == "acme"
        assert body["settings"]["template_preset"] == "modern"

    def test_update_profile(self, acme_client, memory_store):
        response = acme_client.patch(
            "/tenant-admin/tenant",
            json={"businessName": "Acme Ltd", "customDomain": "shop.acme.io"},
            headers={"X-Actor": "owner@acme.io"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["custom_domain"] == "shop.acme.io"
        [entry] = memory_store.rows("audit_logs")
        assert entry["actor"] == "owner@acme.io"

    def test_custom_domain_then_routes_to_tenant(self, app, acme_client, acme_id):
        acme_client.patch("/tenant-admin/tenant", json={"customDomain": "shop.acme.io"})

        response = TestClient(app, base_url="http://shop.acme.io").get("/tenant-admin/tenant")

        assert response.json()["id"] == acme_id

    def test_subdomain_change_is_400(self, acme_client):
        response = acme_client.patch("/tenant-admin/tenant", json={"subdomain": "acme2"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Subdomain cannot be changed"

    def test_platform_host_has_no_tenant(self, platform_client, acme_id):
        response = platform_client.get("/tenant-admin/tenant")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_subdomain_is_404(self, app, acme_id):
        client = TestClient(app, base_url=f"http://nobody.{PLATFORM_DOMAIN}")

        response = client.get("/tenant-admin/tenant")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"kind": "not_found", "message": "Tenant not found"}

    def test_deactivated_tenant_is_403(self, platform_client, acme_client, acme_id):
        toggled = platform_client.post(
            f"/super-admin/tenants/{acme_id}/toggle-active", headers=ADMIN_HEADERS
        )
        assert toggled.json()["is_active"] is False

        response = acme_client.get("/tenant-admin/tenant")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["message"] == "Tenant account is inactive"


def test_isolation_violation_is_a_generic_500(platform_client, acme_id):
    response = platform_client.get("/store/acme/leak")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"kind": "internal", "message": "Internal server error"}
