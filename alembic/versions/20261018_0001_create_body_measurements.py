"""create body_measurements table

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None

_OPTIONAL_METRICS = (
    "skeletal_muscle_percentage",
    "fat_free_body_weight",
    "subcutaneous_fat_percentage",
    "visceral_fat",
    "body_water_percentage",
    "muscle_mass",
    "bone_mass",
    "protein_percentage",
    "basal_metabolic_rate",
    "metabolic_age",
    "body_type",
)


def upgrade() -> None:
    op.create_table(
        "body_measurements",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("measured_on", sa.Date(), nullable=False),
        sa.Column("measured_time", sa.String(length=32), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column("bmi", sa.Float(), nullable=False),
        sa.Column("body_fat_percentage", sa.Float(), nullable=False),
        *(sa.Column(name, sa.Float(), nullable=True) for name in _OPTIONAL_METRICS),
        sa.Column("source", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_body_measurements"),
        sa.UniqueConstraint(
            "measured_on",
            "measured_time",
            "source",
            name="uq_body_measurements_dedupe",
        ),
    )
    op.create_index("ix_body_measurements_measured_on", "body_measurements", ["measured_on"], unique=False)
    op.create_index("ix_body_measurements_source", "body_measurements", ["source"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_body_measurements_source", table_name="body_measurements")
    op.drop_index("ix_body_measurements_measured_on", table_name="body_measurements")
    op.drop_table("body_measurements")
