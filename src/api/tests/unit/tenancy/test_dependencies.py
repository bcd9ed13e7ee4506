"""Unit tests for tenancy FastAPI dependencies."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException
from pydantic import SecretStr

from tenancy.dependencies.access import get_actor, require_platform_admin
from tenancy.dependencies.notifications import (
    get_notification_sender,
    get_welcome_notifier,
    shutdown_notifications,
)
from tenancy.infrastructure import ResendEmailSender, UnconfiguredEmailSender


class TestRequirePlatformAdmin:
    def test_matching_bearer_token_passes(self):
        require_platform_admin("s3cret", authorization="Bearer s3cret")

    @pytest.mark.parametrize(
        "authorization",
        [None, "", "s3cret", "Basic s3cret", "Bearer wrong"],
    )
    def test_rejects_bad_credentials(self, authorization):
        with pytest.raises(HTTPException) as exc_info:
            require_platform_admin("s3cret", authorization=authorization)
        assert exc_info.value.status_code == 401

    def test_empty_configured_token_rejects_empty_bearer(self):
        with pytest.raises(HTTPException):
            require_platform_admin("", authorization="Bearer ")


def test_get_actor_strips_blank_values():
    assert get_actor(" ops@platform ") == "ops@platform"
    assert get_actor("  ") is None
    assert get_actor(None) is None


class TestNotificationDependencies:
    @pytest.fixture(autouse=True)
    def clear_caches(self):
        get_notification_sender.cache_clear()
        get_welcome_notifier.cache_clear()
        yield
        get_notification_sender.cache_clear()
        get_welcome_notifier.cache_clear()

    def test_without_api_key_sender_is_unconfigured(self):
        settings = MagicMock(api_key=SecretStr(""))
        with patch(
            "tenancy.dependencies.notifications.get_notification_settings",
            return_value=settings,
        ):
            assert isinstance(get_notification_sender(), UnconfiguredEmailSender)

    def test_with_api_key_sender_uses_mail_api(self):
        settings = MagicMock(
            api_key=SecretStr("re_key"),
            sender="noreply@store.io",
            api_url="https://mail.test/emails",
            timeout_seconds=5.0,
        )
        with patch(
            "tenancy.dependencies.notifications.get_notification_settings",
            return_value=settings,
        ):
            assert isinstance(get_notification_sender(), ResendEmailSender)

    @pytest.mark.asyncio
    async def test_shutdown_without_notifier_is_a_no_op(self):
        assert await shutdown_notifications(timeout=0.1) == 0
