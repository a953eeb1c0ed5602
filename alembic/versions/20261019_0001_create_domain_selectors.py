"""create domain_selectors table

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "domain_selectors",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("domain", sa.String(length=255), nullable=False,
                  comment="Normalized host: lowercase, no leading www."),
        sa.Column("field_name", sa.String(length=32), nullable=False,
                  comment="name, price, thumbnail_url"),
        sa.Column("selector", sa.Text(), nullable=False),
        sa.Column("success_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("failure_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "discovery_method",
            sa.String(length=32),
            server_default="heuristic",
            nullable=False,
            comment="heuristic, discovered, manual",
        ),
        sa.Column("discovery_score", sa.Float(), nullable=True,
                  comment="Client-side discovery score, typically 0-100"),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "domain",
            "field_name",
            "selector",
            name="uq_domain_selectors_domain_field_selector",
        ),
    )
    op.create_index(
        "ix_domain_selectors_domain_field",
        "domain_selectors",
        ["domain", "field_name"],
        unique=False,
    )
    op.create_index(
        "ix_domain_selectors_discovery_method",
        "domain_selectors",
        ["discovery_method"],
        unique=False,
    )
    op.create_index(
        "ix_domain_selectors_success_count",
        "domain_selectors",
        ["success_count"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_domain_selectors_success_count", table_name="domain_selectors")
    op.drop_index("ix_domain_selectors_discovery_method", table_name="domain_selectors")
    op.drop_index("ix_domain_selectors_domain_field", table_name="domain_selectors")
    op.drop_table("domain_selectors")
