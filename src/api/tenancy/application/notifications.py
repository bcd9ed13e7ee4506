"""Fire-and-forget welcome notifications for newly provisioned tenants.

Delivery runs as a background asyncio task so onboarding responds as soon
as the tenant exists. A failed or slow delivery is logged and recorded in
the tenant's email log; it never affects the provisioning outcome.
"""

from __future__ import annotations

import asyncio
from html import escape

from shared_kernel.middleware import tenant_context
from tenancy.application.observability import (
    DefaultProvisioningProbe,
    ProvisioningProbe,
)
from tenancy.ports.notifications import EmailMessage, NotificationSender
from tenancy.ports.repositories import IEmailLogRepository

WELCOME_TEMPLATE_NAME = "tenantWelcome"
WELCOME_SUBJECT = "Welcome - your store is ready!"


def build_welcome_message(
    email: str,
    business_name: str,
    subdomain: str,
    platform_domain: str,
    tenant_id: str,
) -> EmailMessage:
    store_url = f"https://{subdomain}.{platform_domain}"
    html = (
        f"<p>Hi {escape(business_name)},</p>"
        f"<p>Your store is live at <a href=\"{escape(store_url)}\">{escape(store_url)}</a>.</p>"
        "<p>Sign in with the email and password you registered with to finish "
        "setting it up.</p>"
    )
    return EmailMessage(
        to=email,
        subject=WELCOME_SUBJECT,
        html=html,
        tenant_id=tenant_id,
        template_name=WELCOME_TEMPLATE_NAME,
    )


class WelcomeNotifier:
    """Schedules welcome emails and keeps their tasks alive until done."""

    def __init__(
        self,
        sender: NotificationSender,
        email_logs: IEmailLogRepository,
        platform_domain: str,
        timeout: float | None = None,
        probe: ProvisioningProbe | None = None,
    ):
        self._sender = sender
        self._email_logs = email_logs
        self._platform_domain = platform_domain
        self._timeout = timeout
        self._probe = probe or DefaultProvisioningProbe()
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(
        self, email: str, business_name: str, subdomain: str, tenant_id: str
    ) -> asyncio.Task[None]:
        message = build_welcome_message(
            email=email,
            business_name=business_name,
            subdomain=subdomain,
            platform_domain=self._platform_domain,
            tenant_id=tenant_id,
        )
        task = asyncio.create_task(self._deliver(message, tenant_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight deliveries, e.g. on application shutdown."""
        if not self._tasks:
            return
        await asyncio.wait(set(self._tasks), timeout=timeout)

    async def _deliver(self, message: EmailMessage, tenant_id: str) -> None:
        status, error = "SENT", None
        try:
            async with asyncio.timeout(self._timeout):
                await self._sender.send(message)
        except Exception as e:
            status, error = "FAILED", str(e) or type(e).__name__
            self._probe.welcome_email_failed(tenant_id=tenant_id, error=e)
        else:
            self._probe.welcome_email_sent(tenant_id=tenant_id)

        try:
            with tenant_context.bind(tenant_id):
                await self._email_logs.record(
                    recipient=message.to,
                    subject=message.subject,
                    template_name=message.template_name,
                    status=status,
                    error=error,
                )
        except Exception as e:
            self._probe.welcome_email_failed(tenant_id=tenant_id, error=e)
