"""Notification sender port."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str
    tenant_id: str | None = None
    template_name: str | None = None


@runtime_checkable
class NotificationSender(Protocol):
    async def send(self, message: EmailMessage) -> None:
        """Deliver one email.

        Raises:
            NotificationError: If delivery failed
        """
        ...


class NotificationError(Exception):
    """Raised by notification adapters when delivery fails."""

    pass
