"""Welcome notifier dependency.

The notifier holds the set of in-flight delivery tasks, so it is a
singleton that the application drains on shutdown.
"""

from __future__ import annotations

from functools import lru_cache

from infrastructure.settings import get_notification_settings, get_platform_settings
from storage.dependencies import get_storage_client
from tenancy.application.notifications import WelcomeNotifier
from tenancy.infrastructure import (
    EmailLogRepository,
    ResendEmailSender,
    UnconfiguredEmailSender,
)
from tenancy.ports.notifications import NotificationSender


@lru_cache
def get_notification_sender() -> NotificationSender:
    settings = get_notification_settings()
    api_key = settings.api_key.get_secret_value()
    if not api_key:
        return UnconfiguredEmailSender()
    return ResendEmailSender(
        api_key=api_key,
        sender=settings.sender,
        api_url=settings.api_url,
        timeout=settings.timeout_seconds,
    )


@lru_cache
def get_welcome_notifier() -> WelcomeNotifier:
    settings = get_notification_settings()
    return WelcomeNotifier(
        sender=get_notification_sender(),
        email_logs=EmailLogRepository(get_storage_client()),
        platform_domain=get_platform_settings().platform_domain,
        timeout=settings.timeout_seconds,
    )


async def shutdown_notifications(timeout: float | None = None) -> int:
    """Drain pending welcome emails and close the sender.

    Returns:
        Number of deliveries still pending when the drain gave up
    """
    if not get_welcome_notifier.cache_info().currsize:
        return 0
    notifier = get_welcome_notifier()
    await notifier.drain(timeout=timeout)
    pending = notifier.pending

    sender = get_notification_sender()
    if isinstance(sender, ResendEmailSender):
        await sender.aclose()
    get_welcome_notifier.cache_clear()
    get_notification_sender.cache_clear()
    return pending
