"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.body_measurement import BodyMeasurement

__all__ = [
    "BodyMeasurement",
]
