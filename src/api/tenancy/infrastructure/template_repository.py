"""Record-store implementation of ITemplateRepository."""

from __future__ import annotations

from typing import Any

from storage.application.client import StorageClient
from tenancy.domain.aggregates import Template
from tenancy.ports.repositories import ITemplateRepository

TEMPLATES = "templates"


class TemplateRepository(ITemplateRepository):
    def __init__(self, storage: StorageClient) -> None:
        self._templates = storage.model(TEMPLATES)

    async def get_by_slug(self, slug: str) -> Template | None:
        record = await self._templates.find_unique(where={"slug": slug})
        return None if record is None else self._to_domain(record)

    async def create(
        self,
        name: str,
        slug: str,
        description: str | None = None,
        category: str | None = None,
        version: str = "1.0.0",
        author: str | None = None,
    ) -> Template:
        record = await self._templates.create(
            {
                "name": name,
                "slug": slug,
                "description": description,
                "category": category,
                "version": version,
                "author": author,
                "is_active": True,
            }
        )
        return self._to_domain(record)

    @staticmethod
    def _to_domain(record: dict[str, Any]) -> Template:
        return Template(
            id=record["id"],
            name=record["name"],
            slug=record["slug"],
            description=record.get("description"),
            category=record.get("category"),
            version=record.get("version") or "1.0.0",
            author=record.get("author"),
            is_active=bool(record.get("is_active", True)),
        )
