"""Unit tests for main FastAPI application configuration."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client() -> TestClient:
    from main import app

    return TestClient(app)


class TestApplicationRoutes:
    def test_health_is_served_without_tenant(self, client):
        response = client.get("/health", headers={"Host": "acme.storefront.local"})

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_tenancy_routes_are_registered(self):
        from main import app

        paths = {route.path for route in app.routes}

        assert "/onboarding" in paths
        assert "/super-admin/tenants" in paths
        assert "/super-admin/tenants/bulk" in paths
        assert "/tenant-admin/tenant" in paths

    def test_super_admin_requires_token(self, client):
        response = client.get("/super-admin/tenants")
        assert response.status_code == 401


class TestLifespan:
    @pytest.mark.asyncio
    async def test_shutdown_drains_and_closes_clients(self):
        from main import app, storefront_lifespan

        probe = MagicMock()
        with (
            patch("main.DefaultStartupProbe", return_value=probe),
            patch("main.configure_logging") as configure_logging,
            patch("main.shutdown_notifications", AsyncMock(return_value=1)) as drain,
            patch("main.close_identity_provider", AsyncMock()) as close_idp,
            patch("main.close_database_connections", AsyncMock()) as close_db,
        ):
            async with storefront_lifespan(app):
                probe.application_starting.assert_called_once()

        configure_logging.assert_called_once()
        drain.assert_awaited_once()
        close_idp.assert_awaited_once()
        close_db.assert_awaited_once()
        probe.application_stopped.assert_called_once_with(pending_notifications=1)
