"""create registry tables

Revision ID: 0001
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "applications",
        sa.Column("app_id", sa.String(64), primary_key=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("org_id", sa.String(64), nullable=True),
        sa.Column("require_ssl", sa.Boolean(), nullable=True),
        sa.Column("domains", sa.JSON(), nullable=False),
        sa.Column("traffic_control_rules", sa.JSON(), nullable=True),
        sa.Column("config_settings", sa.JSON(), nullable=True),
        sa.Column("auth_config", sa.JSON(), nullable=True),
        sa.Column("attributes", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_applications_name", "applications", ["name"], unique=True)
    op.create_index("ix_applications_org_id", "applications", ["org_id"])

    op.create_table(
        "domains",
        sa.Column("domain_name", sa.String(255), primary_key=True),
        sa.Column("sub_domain", sa.String(63), primary_key=True),
        sa.Column("app_id", sa.String(64), sa.ForeignKey("applications.app_id"), nullable=False),
        sa.Column("certificate", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_domains_app", "domains", ["app_id"])

    op.create_table(
        "legacy_domains",
        sa.Column("full_domain_name", sa.String(255), primary_key=True),
        sa.Column("app_id", sa.String(64), sa.ForeignKey("applications.app_id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_legacy_domains_app", "legacy_domains", ["app_id"])


def downgrade() -> None:
    op.drop_index("ix_legacy_domains_app", table_name="legacy_domains")
    op.drop_table("legacy_domains")
    op.drop_index("ix_domains_app", table_name="domains")
    op.drop_table("domains")
    op.drop_index("ix_applications_org_id", table_name="applications")
    op.drop_index("ix_applications_name", table_name="applications")
    op.drop_table("applications")
