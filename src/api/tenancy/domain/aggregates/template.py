"""Storefront template catalogue entry."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Template:
    """A platform-level storefront template. Not tenant-scoped."""

    id: str
    name: str
    slug: str
    description: str | None = None
    category: str | None = None
    version: str = "1.0.0"
    author: str | None = None
    is_active: bool = True
