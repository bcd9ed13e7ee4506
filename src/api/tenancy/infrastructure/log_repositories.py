"""Append-only audit and email log repositories.

Both collections are tenant-scoped: entries land on the tenant bound in
the current tenant context.
"""

from __future__ import annotations

from typing import Any

from storage.application.client import StorageClient
from tenancy.ports.repositories import IAuditLogRepository, IEmailLogRepository


class AuditLogRepository(IAuditLogRepository):
    def __init__(self, storage: StorageClient) -> None:
        self._audit_logs = storage.model("audit_logs")

    async def record(
        self,
        action: str,
        entity_type: str,
        entity_id: str | None,
        actor: str | None,
        details: dict[str, Any] | None = None,
    ) -> None:
        await self._audit_logs.create(
            {
                "action": action,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "actor": actor,
                "details": details or {},
            }
        )


class EmailLogRepository(IEmailLogRepository):
    def __init__(self, storage: StorageClient) -> None:
        self._email_logs = storage.model("email_logs")

    async def record(
        self,
        recipient: str,
        subject: str,
        template_name: str | None,
        status: str,
        error: str | None = None,
    ) -> None:
        await self._email_logs.create(
            {
                "recipient": recipient,
                "subject": subject,
                "template_name": template_name,
                "status": status,
                "error": error,
            }
        )
