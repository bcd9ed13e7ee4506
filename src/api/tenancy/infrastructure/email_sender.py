"""Notification sender for the Resend email API."""

from __future__ import annotations

import httpx

from tenancy.infrastructure.observability import (
    DefaultExternalServiceProbe,
    ExternalServiceProbe,
)
from tenancy.ports.notifications import EmailMessage, NotificationError

SERVICE = "resend"


class ResendEmailSender:
    def __init__(
        self,
        api_key: str,
        sender: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        probe: ExternalServiceProbe | None = None,
    ):
        self._api_url = api_url
        self._sender = sender
        self._client = httpx.AsyncClient(
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport,
        )
        self._probe = probe or DefaultExternalServiceProbe()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(self, message: EmailMessage) -> None:
        payload = {
            "from": self._sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        try:
            response = await self._client.post(self._api_url, json=payload)
        except httpx.HTTPError as e:
            self._probe.request_failed(service=SERVICE, operation="send", reason=repr(e))
            raise NotificationError(f"Email delivery failed: {e!r}") from e

        if not response.is_success:
            self._probe.request_failed(
                service=SERVICE,
                operation="send",
                reason="HTTP error",
                status_code=response.status_code,
            )
            raise NotificationError(
                f"Email delivery failed: HTTP {response.status_code}"
            )

        self._probe.request_succeeded(
            service=SERVICE, operation="send", status_code=response.status_code
        )


class UnconfiguredEmailSender:
    """Sender used when no mail API key is configured. Every send fails."""

    def __init__(self, probe: ExternalServiceProbe | None = None):
        self._probe = probe or DefaultExternalServiceProbe()

    async def send(self, message: EmailMessage) -> None:
        self._probe.request_failed(
            service="mail",
            operation="send",
            reason="mail delivery not configured",
        )
        raise NotificationError("Email delivery is not configured")
