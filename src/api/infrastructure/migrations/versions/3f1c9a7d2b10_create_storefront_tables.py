"""create storefront tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3f1c9a7d2b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _record_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(length=26), nullable=False),  # ULID
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _tenant_column(nullable: bool = False) -> sa.Column:
    return sa.Column(
        "tenant_id",
        sa.String(length=26),
        sa.ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=nullable,
    )


def _create_scoped_table(name: str, *columns: sa.Column, shared: bool = False) -> None:
    op.create_table(
        name,
        *_record_columns(),
        _tenant_column(nullable=shared),
        *columns,
        sa.PrimaryKeyConstraint("id", name=f"pk_{name}"),
    )
    op.create_index(f"ix_{name}_tenant_id", name, ["tenant_id"])


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "templates",
        *_record_columns(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("version", sa.String(length=50), nullable=False),
        sa.Column("author", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_templates"),
    )
    op.create_index("ix_templates_slug", "templates", ["slug"], unique=True)

    op.create_table(
        "tenants",
        *_record_columns(),
        sa.Column("business_name", sa.String(length=255), nullable=False),
        sa.Column("subdomain", sa.String(length=63), nullable=False),
        sa.Column("custom_domain", sa.String(length=255), nullable=True),
        sa.Column("country_code", sa.String(length=2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("settings", sa.JSON(), nullable=False),
        sa.Column("license_token", sa.String(length=255), nullable=True),
        sa.Column(
            "template_id",
            sa.String(length=26),
            sa.ForeignKey("templates.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_tenants"),
    )
    # Subdomains and custom domains route requests, so both are globally unique
    op.create_index("ix_tenants_subdomain", "tenants", ["subdomain"], unique=True)
    op.create_index(
        "ix_tenants_custom_domain", "tenants", ["custom_domain"], unique=True
    )

    _create_scoped_table(
        "users",
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    _create_scoped_table(
        "tenant_branding",
        sa.Column("primary_color", sa.String(length=20), nullable=False),
        sa.Column("secondary_color", sa.String(length=20), nullable=False),
        sa.Column("accent_color", sa.String(length=20), nullable=False),
        sa.Column("font_family", sa.String(length=100), nullable=False),
        sa.Column("logo_url", sa.String(length=2048), nullable=True),
    )
    _create_scoped_table(
        "tenant_templates",
        sa.Column(
            "template_id",
            sa.String(length=26),
            sa.ForeignKey("templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("customizations", sa.JSON(), nullable=False),
    )
    _create_scoped_table(
        "products",
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )
    op.create_index(
        "ix_products_tenant_slug", "products", ["tenant_id", "slug"], unique=True
    )
    _create_scoped_table(
        "orders",
        sa.Column("user_id", sa.String(length=26), nullable=True),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("admin_notes", sa.Text(), nullable=True),
    )
    _create_scoped_table(
        "carts",
        sa.Column("user_id", sa.String(length=26), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
    )
    _create_scoped_table(
        "conditions",
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
    )
    _create_scoped_table(
        "consultations",
        sa.Column("user_id", sa.String(length=26), nullable=True),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    _create_scoped_table(
        "posts",
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("published", sa.Boolean(), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
    )
    _create_scoped_table(
        "audit_logs",
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=26), nullable=True),
        sa.Column("actor", sa.String(length=255), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
    )
    _create_scoped_table(
        "email_logs",
        sa.Column("recipient", sa.String(length=320), nullable=False),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("template_name", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
    )
    # NULL tenant_id rows are platform defaults shared by every tenant
    _create_scoped_table(
        "email_templates",
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        shared=True,
    )
    _create_scoped_table(
        "email_event_mappings",
        sa.Column("event_type", sa.String(length=100), nullable=False),
        sa.Column(
            "template_id",
            sa.String(length=26),
            sa.ForeignKey("email_templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        shared=True,
    )
    _create_scoped_table(
        "webhooks",
        sa.Column("url", sa.String(length=2048), nullable=False),
        sa.Column("events", sa.JSON(), nullable=False),
        sa.Column("secret", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )
    _create_scoped_table(
        "webhook_logs",
        sa.Column(
            "webhook_id",
            sa.String(length=26),
            sa.ForeignKey("webhooks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("event", sa.String(length=100), nullable=False),
        sa.Column("status_code", sa.Integer(), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=False),
    )


def downgrade() -> None:
    """Downgrade schema."""
    # Reverse dependency order: children before the tables they reference
    for name in (
        "webhook_logs",
        "webhooks",
        "email_event_mappings",
        "email_templates",
        "email_logs",
        "audit_logs",
        "posts",
        "consultations",
        "conditions",
        "carts",
        "orders",
        "products",
        "tenant_templates",
        "tenant_branding",
        "users",
    ):
        op.drop_table(name)
    op.drop_index("ix_tenants_custom_domain", table_name="tenants")
    op.drop_index("ix_tenants_subdomain", table_name="tenants")
    op.drop_table("tenants")
    op.drop_index("ix_templates_slug", table_name="templates")
    op.drop_table("templates")
