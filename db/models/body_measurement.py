"""
db/models/body_measurement.py

Persisted scale reading imported from a vendor export.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, Float, Index, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class BodyMeasurement(TimestampMixin, Base):
    __tablename__ = "body_measurements"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    measured_on: Mapped[date] = mapped_column(Date, nullable=False)
    measured_time: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="",
        comment="Vendor-native time of day, advisory only",
    )
    weight: Mapped[float] = mapped_column(Float, nullable=False, comment="kg")
    bmi: Mapped[float] = mapped_column(Float, nullable=False)
    body_fat_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    skeletal_muscle_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    fat_free_body_weight: Mapped[float | None] = mapped_column(Float, nullable=True, comment="kg")
    subcutaneous_fat_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    visceral_fat: Mapped[float | None] = mapped_column(Float, nullable=True)
    body_water_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    muscle_mass: Mapped[float | None] = mapped_column(Float, nullable=True, comment="kg")
    bone_mass: Mapped[float | None] = mapped_column(Float, nullable=True, comment="kg")
    protein_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    basal_metabolic_rate: Mapped[float | None] = mapped_column(Float, nullable=True, comment="kcal")
    metabolic_age: Mapped[float | None] = mapped_column(Float, nullable=True, comment="years")
    body_type: Mapped[float | None] = mapped_column(Float, nullable=True)
    source: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Provenance tag, e.g. renpho_import",
    )

    __table_args__ = (
        UniqueConstraint(
            "measured_on",
            "measured_time",
            "source",
            name="uq_body_measurements_dedupe",
        ),
        Index("ix_body_measurements_measured_on", "measured_on"),
        Index("ix_body_measurements_source", "source"),
    )
