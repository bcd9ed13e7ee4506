"""Storefront template resolution and branding presets.

Two separate things are chosen from the onboarding ``template_id``:

- the catalogue Template record (by slug), falling back to the platform
  default slug, which is created on first use if the catalogue is empty;
- the branding preset used for the tenant's initial colours, falling back
  to ``modern``.
"""

from __future__ import annotations

from dataclasses import dataclass

from storage.ports.exceptions import UniqueConstraintViolation
from tenancy.domain.aggregates import Template
from tenancy.ports.repositories import ITemplateRepository


@dataclass(frozen=True)
class BrandingPreset:
    primary_color: str
    secondary_color: str
    accent_color: str
    font_family: str


DEFAULT_PRESET = "modern"

TEMPLATE_PRESETS: dict[str, BrandingPreset] = {
    "modern": BrandingPreset("#10b981", "#059669", "#34d399", "Inter"),
    "medical": BrandingPreset("#3b82f6", "#2563eb", "#60a5fa", "Inter"),
    "natural": BrandingPreset("#84cc16", "#65a30d", "#a3e635", "Inter"),
    "premium": BrandingPreset("#8b5cf6", "#7c3aed", "#a78bfa", "Inter"),
}


def resolve_preset(template_id: str | None) -> tuple[str, BrandingPreset]:
    """Return the preset name and colours for a requested template id."""
    if template_id in TEMPLATE_PRESETS:
        return template_id, TEMPLATE_PRESETS[template_id]
    return DEFAULT_PRESET, TEMPLATE_PRESETS[DEFAULT_PRESET]


class TemplateResolver:
    """Finds the catalogue template a new tenant starts from."""

    def __init__(self, repository: ITemplateRepository, default_slug: str):
        self._repository = repository
        self._default_slug = default_slug

    async def resolve(self, requested_slug: str | None) -> Template:
        """Requested slug, then the default slug, then a newly created default."""
        if requested_slug:
            template = await self._repository.get_by_slug(requested_slug)
            if template is not None:
                return template

        template = await self._repository.get_by_slug(self._default_slug)
        if template is not None:
            return template

        try:
            return await self._repository.create(
                name="HealingBuds Default",
                slug=self._default_slug,
                description="Default medical cannabis template",
                category="medical",
                version="1.0.0",
                author="BudStack",
            )
        except UniqueConstraintViolation:
            # A concurrent onboarding created it first
            template = await self._repository.get_by_slug(self._default_slug)
            if template is None:
                raise
            return template
