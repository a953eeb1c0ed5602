"""create product_capture_samples table

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 09:20:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "product_capture_samples",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("domain", sa.String(length=255), nullable=False,
                  comment="Host as reported by the capture client"),
        sa.Column(
            "raw_payload",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            comment="Machine-extracted field values",
        ),
        sa.Column(
            "final_payload",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            comment="User-confirmed field values",
        ),
        sa.Column(
            "context",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            comment="Selectors used, discovered candidates, suggested category",
        ),
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
    )
    op.create_index(
        "ix_product_capture_samples_domain",
        "product_capture_samples",
        ["domain"],
        unique=False,
    )
    op.create_index(
        "ix_product_capture_samples_created_at",
        "product_capture_samples",
        ["created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_product_capture_samples_created_at", table_name="product_capture_samples")
    op.drop_index("ix_product_capture_samples_domain", table_name="product_capture_samples")
    op.drop_table("product_capture_samples")
