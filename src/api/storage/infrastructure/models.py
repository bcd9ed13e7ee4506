"""SQLAlchemy ORM tables for the storefront record collections.

``tenants`` and ``templates`` are platform-level. Every other table carries
a ``tenant_id`` column and is listed in the scoping policy. Unique columns
use ``index=True, unique=True`` so the generated index is named
``ix_<table>_<column>``; the SQLAlchemy store relies on that naming to map
IntegrityErrors back to the violated field.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column
from ulid import ULID

from infrastructure.database.models import Base, TimestampMixin


def _new_id() -> str:
    return str(ULID())


class RecordMixin(TimestampMixin):
    """ULID primary key plus timestamps, shared by every table."""

    id: Mapped[str] = mapped_column(String(26), primary_key=True, insert_default=_new_id)


class TenantScopedMixin(RecordMixin):
    """Owner column for tenant-scoped tables."""

    tenant_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )


class SharedDefaultMixin(RecordMixin):
    """Owner column for tables whose NULL-tenant rows are shared defaults."""

    tenant_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )


class TenantModel(Base, RecordMixin):
    """A storefront. Never hard-deleted."""

    __tablename__ = "tenants"

    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    subdomain: Mapped[str] = mapped_column(
        String(63), nullable=False, index=True, unique=True
    )
    custom_domain: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True, unique=True
    )
    country_code: Mapped[str] = mapped_column(String(2), nullable=False, default="PT")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    settings: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    license_token: Mapped[str | None] = mapped_column(String(255), nullable=True)
    template_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("templates.id", ondelete="SET NULL"), nullable=True
    )

    def __repr__(self) -> str:
        return f"<TenantModel(id={self.id}, subdomain={self.subdomain})>"


class TemplateModel(Base, RecordMixin):
    """Platform storefront template catalogue entry."""

    __tablename__ = "templates"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True, unique=True
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    version: Mapped[str] = mapped_column(String(50), nullable=False, default="1.0.0")
    author: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class UserModel(Base, TenantScopedMixin):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(320), nullable=False, index=True, unique=True
    )
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="CUSTOMER")


class TenantBrandingModel(Base, TenantScopedMixin):
    __tablename__ = "tenant_branding"

    primary_color: Mapped[str] = mapped_column(String(20), nullable=False)
    secondary_color: Mapped[str] = mapped_column(String(20), nullable=False)
    accent_color: Mapped[str] = mapped_column(String(20), nullable=False)
    font_family: Mapped[str] = mapped_column(String(100), nullable=False)
    logo_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)


class TenantTemplateModel(Base, TenantScopedMixin):
    __tablename__ = "tenant_templates"

    template_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("templates.id", ondelete="CASCADE"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    customizations: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )


class ProductModel(Base, TenantScopedMixin):
    __tablename__ = "products"
    __table_args__ = (Index("ix_products_tenant_slug", "tenant_id", "slug", unique=True),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class OrderModel(Base, TenantScopedMixin):
    __tablename__ = "orders"

    user_id: Mapped[str | None] = mapped_column(String(26), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="PENDING")
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    items: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class CartModel(Base, TenantScopedMixin):
    __tablename__ = "carts"

    user_id: Mapped[str] = mapped_column(String(26), nullable=False)
    items: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)


class ConditionModel(Base, TenantScopedMixin):
    __tablename__ = "conditions"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class ConsultationModel(Base, TenantScopedMixin):
    __tablename__ = "consultations"

    user_id: Mapped[str | None] = mapped_column(String(26), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="PENDING")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class PostModel(Base, TenantScopedMixin):
    __tablename__ = "posts"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class AuditLogModel(Base, TenantScopedMixin):
    __tablename__ = "audit_logs"

    action: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String(26), nullable=True)
    actor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)


class EmailLogModel(Base, TenantScopedMixin):
    __tablename__ = "email_logs"

    recipient: Mapped[str] = mapped_column(String(320), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    template_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)


class EmailTemplateModel(Base, SharedDefaultMixin):
    __tablename__ = "email_templates"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class EmailEventMappingModel(Base, SharedDefaultMixin):
    __tablename__ = "email_event_mappings"

    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    template_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("email_templates.id", ondelete="CASCADE"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class WebhookModel(Base, TenantScopedMixin):
    __tablename__ = "webhooks"

    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    events: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    secret: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class WebhookLogModel(Base, TenantScopedMixin):
    __tablename__ = "webhook_logs"

    webhook_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("webhooks.id", ondelete="CASCADE"), nullable=False
    )
    event: Mapped[str] = mapped_column(String(100), nullable=False)
    status_code: Mapped[int | None] = mapped_column(Integer, nullable=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)


def unique_keys(metadata=Base.metadata) -> dict[str, tuple[tuple[str, ...], ...]]:
    """Collect the unique column sets of every table, keyed by table name."""
    keys: dict[str, tuple[tuple[str, ...], ...]] = {}
    for table in metadata.sorted_tables:
        column_sets = [
            tuple(column.name for column in index.columns)
            for index in table.indexes
            if index.unique
        ]
        if column_sets:
            keys[table.name] = tuple(sorted(column_sets))
    return keys


UNIQUE_KEYS = unique_keys()
