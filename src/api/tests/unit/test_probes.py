"""Unit tests for domain probes.

Tests that domain probes correctly capture domain events
following the Domain Oriented Observability pattern.
"""

from unittest.mock import MagicMock

import structlog

from infrastructure.observability import ObservationContext
from infrastructure.observability.probes import DefaultDatabaseProbe
from infrastructure.observability.startup_probe import DefaultStartupProbe
from storage.application.observability import DefaultScopingProbe
from tenancy.application.observability import (
    DefaultProvisioningProbe,
    DefaultTenantServiceProbe,
)
from tenancy.infrastructure.observability import DefaultExternalServiceProbe


def mock_logger() -> MagicMock:
    return MagicMock(spec=structlog.stdlib.BoundLogger)


class TestDatabaseProbe:
    def test_default_probe_creates_with_default_logger(self):
        probe = DefaultDatabaseProbe()
        assert probe._logger is not None

    def test_engine_created_logs_info(self):
        logger = mock_logger()
        probe = DefaultDatabaseProbe(logger=logger)

        probe.engine_created(host="localhost", database="storefront", pool_size=10)

        logger.info.assert_called_once_with(
            "database_engine_created",
            host="localhost",
            database="storefront",
            pool_size=10,
        )


class TestStartupProbe:
    def test_missing_admin_token_is_a_warning(self):
        logger = mock_logger()

        DefaultStartupProbe(logger=logger).admin_routes_unprotected()

        logger.warning.assert_called_once_with("platform_admin_token_missing")

    def test_stopped_reports_pending_notifications(self):
        logger = mock_logger()

        DefaultStartupProbe(logger=logger).application_stopped(pending_notifications=2)

        logger.info.assert_called_once_with("application_stopped", pending_notifications=2)


class TestScopingProbe:
    def test_isolation_violation_is_critical(self):
        logger = mock_logger()
        probe = DefaultScopingProbe(logger=logger)

        probe.isolation_violation(
            model="products", action="find_many", reason="no tenant bound", tenant_id=None
        )

        logger.critical.assert_called_once_with(
            "tenant_isolation_violation",
            model="products",
            action="find_many",
            reason="no tenant bound",
            bound_tenant_id=None,
        )

    def test_bypass_is_logged_with_reason(self):
        logger = mock_logger()

        DefaultScopingProbe(logger=logger).scoping_bypassed(
            model="users", action="find_first", reason="global email uniqueness check"
        )

        logger.info.assert_called_once_with(
            "storage_scoping_bypassed",
            model="users",
            action="find_first",
            reason="global email uniqueness check",
        )


class TestTenancyProbes:
    def test_provisioning_failure_is_a_warning(self):
        logger = mock_logger()

        DefaultProvisioningProbe(logger=logger).provisioning_failed(
            subdomain="acme", kind="conflict", message="Subdomain already taken"
        )

        logger.warning.assert_called_once_with(
            "tenant_provisioning_failed",
            subdomain="acme",
            kind="conflict",
            message="Subdomain already taken",
        )

    def test_activation_event_name_follows_flag(self):
        logger = mock_logger()
        probe = DefaultTenantServiceProbe(logger=logger)

        probe.tenant_activation_changed(tenant_id="t1", active=False, actor="ops")

        logger.info.assert_called_once_with("tenant_deactivated", tenant_id="t1", actor="ops")

    def test_external_request_failure(self):
        logger = mock_logger()

        DefaultExternalServiceProbe(logger=logger).request_failed(
            service="clerk", operation="create_user", reason="boom", status_code=500
        )

        logger.warning.assert_called_once_with(
            "external_request_failed",
            service="clerk",
            operation="create_user",
            reason="boom",
            status_code=500,
            code=None,
        )


class TestProbeWithContext:
    def test_context_is_included_in_every_event(self):
        logger = mock_logger()
        context = ObservationContext(request_id="req-1", subdomain="acme")
        probe = DefaultProvisioningProbe(logger=logger).with_context(context)

        probe.template_resolved(template_slug="healingbuds", preset="modern")

        logger.debug.assert_called_once_with(
            "tenant_template_resolved",
            template_slug="healingbuds",
            preset="modern",
            request_id="req-1",
            subdomain="acme",
        )

    def test_with_context_returns_new_probe(self):
        probe = DefaultStartupProbe(logger=mock_logger())

        bound = probe.with_context(ObservationContext(tenant_id="t1"))

        assert bound is not probe
        assert bound._get_context_kwargs() == {"tenant_id": "t1"}
