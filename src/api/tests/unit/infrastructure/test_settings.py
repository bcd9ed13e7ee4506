"""Unit tests for infrastructure settings."""

import pytest
from pydantic import ValidationError

from infrastructure.settings import (
    DatabaseSettings,
    PlatformSettings,
    ProvisioningSettings,
    Settings,
)


class TestDatabaseSettingsPoolConfiguration:
    """Tests for connection pool configuration."""

    def test_default_pool_settings(self):
        settings = DatabaseSettings()
        assert settings.pool_min_connections >= 1
        assert settings.pool_max_connections >= settings.pool_min_connections

    def test_pool_max_must_be_greater_than_or_equal_to_min(self):
        with pytest.raises(ValidationError) as exc_info:
            DatabaseSettings(pool_min_connections=10, pool_max_connections=5)

        assert "pool_max_connections" in str(exc_info.value)

    def test_pool_min_must_be_positive(self):
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_min_connections=0)

    def test_pool_max_respects_upper_limit(self):
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_max_connections=101)

    def test_connection_string_omits_password(self):
        settings = DatabaseSettings(username="app", password="hunter2")
        assert "hunter2" not in settings.connection_string


class TestProvisioningSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("STOREFRONT_PROVISIONING_STRICT_IDENTITY_LINK", raising=False)
        settings = ProvisioningSettings()
        assert settings.default_template_slug == "healingbuds"
        assert settings.strict_identity_link is False

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("STOREFRONT_PROVISIONING_STEP_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("STOREFRONT_PROVISIONING_STRICT_IDENTITY_LINK", "true")

        settings = ProvisioningSettings()

        assert settings.step_timeout_seconds == 2.5
        assert settings.strict_identity_link is True

    def test_step_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            ProvisioningSettings(step_timeout_seconds=0)


class TestPlatformSettings:
    def test_admin_token_is_secret(self, monkeypatch):
        monkeypatch.setenv("STOREFRONT_PLATFORM_ADMIN_TOKEN", "t0ken")

        settings = PlatformSettings()

        assert settings.admin_token.get_secret_value() == "t0ken"
        assert "t0ken" not in repr(settings)


def test_storage_backend_is_restricted():
    with pytest.raises(ValidationError):
        Settings(storage_backend="redis")
