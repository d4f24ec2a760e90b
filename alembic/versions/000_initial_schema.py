"""Initial database schema

Revision ID: 000_initial_schema
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "000_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _rate_columns() -> list[sa.Column]:
    """The three nullable override rates carried by every hierarchy table."""
    return [
        sa.Column("actual_commission_rate", sa.Numeric(5, 2), nullable=True),
        sa.Column("broker_commission_rate", sa.Numeric(5, 2), nullable=True),
        sa.Column("communicated_commission", sa.Numeric(5, 2), nullable=True),
    ]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create all initial tables."""

    # Users table
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("role", sa.Enum("ADMIN", "MANAGER", "BROKER", name="userrole"), nullable=False),
        sa.Column("is_active", sa.Boolean(), default=True, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Developers table
    op.create_table(
        "developers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), unique=True, nullable=False),
        sa.Column("headquarters", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), default=True, nullable=False),
        *_rate_columns(),
        *_timestamps(),
    )

    # Projects table
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("developer_id", sa.Integer(), sa.ForeignKey("developers.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), default=True, nullable=False),
        *_rate_columns(),
        *_timestamps(),
    )
    op.create_index("ix_projects_developer_id", "projects", ["developer_id"])

    # Catalog tables
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), unique=True, nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "unit_types",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), unique=True, nullable=False),
        *_timestamps(),
    )

    # Per-project category configuration
    op.create_table(
        "project_categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), default=True, nullable=False),
        *_rate_columns(),
        *_timestamps(),
        sa.UniqueConstraint("project_id", "category_id", name="uq_project_category"),
    )
    op.create_index("ix_project_categories_project_id", "project_categories", ["project_id"])
    op.create_index("ix_project_categories_category_id", "project_categories", ["category_id"])

    # Per-category unit type configuration
    op.create_table(
        "project_category_unit_types",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "project_category_id",
            sa.Integer(),
            sa.ForeignKey("project_categories.id"),
            nullable=False,
        ),
        sa.Column("unit_type_id", sa.Integer(), sa.ForeignKey("unit_types.id"), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), default=True, nullable=False),
        sa.Column("price", sa.Numeric(14, 2), nullable=True),
        *_rate_columns(),
        *_timestamps(),
        sa.UniqueConstraint(
            "project_category_id", "unit_type_id", name="uq_project_category_unit_type"
        ),
    )
    op.create_index(
        "ix_project_category_unit_types_project_category_id",
        "project_category_unit_types",
        ["project_category_id"],
    )
    op.create_index(
        "ix_project_category_unit_types_unit_type_id",
        "project_category_unit_types",
        ["unit_type_id"],
    )

    # Deals table
    op.create_table(
        "deals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("broker_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column(
            "project_category_id",
            sa.Integer(),
            sa.ForeignKey("project_categories.id"),
            nullable=True,
        ),
        sa.Column(
            "project_unit_type_id",
            sa.Integer(),
            sa.ForeignKey("project_category_unit_types.id"),
            nullable=True,
        ),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("sale_price", sa.Numeric(14, 2), nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "CONFIRMED", "COMPLETED", "CANCELLED", name="dealstatus"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_deals_broker_id", "deals", ["broker_id"])
    op.create_index("ix_deals_project_id", "deals", ["project_id"])
    op.create_index("ix_deals_project_category_id", "deals", ["project_category_id"])
    op.create_index("ix_deals_project_unit_type_id", "deals", ["project_unit_type_id"])
    op.create_index("ix_deals_status", "deals", ["status"])

    # Commissions table
    op.create_table(
        "commissions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("deal_id", sa.Integer(), sa.ForeignKey("deals.id"), unique=True, nullable=False),
        sa.Column("broker_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("is_rate_overridden", sa.Boolean(), default=False, nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "APPROVED", "PAID", "CANCELLED", name="commissionstatus"),
            nullable=False,
        ),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("reviewed_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_commissions_broker_id", "commissions", ["broker_id"])
    op.create_index("ix_commissions_status", "commissions", ["status"])

    # Audit logs table
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column(
            "action",
            sa.Enum(
                "create_deal",
                "approve_commission",
                "reject_commission",
                "pay_commission",
                "override_commission_rate",
                "bulk_rate_override",
                "toggle_category",
                "toggle_active",
                "delete_entity",
                name="auditaction",
            ),
            nullable=False,
        ),
        sa.Column("target_type", sa.String(50), nullable=True),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("action_metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    """Drop all tables in reverse order."""
    op.drop_table("audit_logs")
    op.drop_table("commissions")
    op.drop_table("deals")
    op.drop_table("project_category_unit_types")
    op.drop_table("project_categories")
    op.drop_table("unit_types")
    op.drop_table("categories")
    op.drop_table("projects")
    op.drop_table("developers")
    op.drop_table("users")

    # Drop enums
    op.execute("DROP TYPE IF EXISTS auditaction")
    op.execute("DROP TYPE IF EXISTS commissionstatus")
    op.execute("DROP TYPE IF EXISTS dealstatus")
    op.execute("DROP TYPE IF EXISTS userrole")
