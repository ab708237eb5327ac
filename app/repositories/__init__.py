"""
app/repositories package marker.
"""

from app.repositories.body_measurement_repository import BodyMeasurementRepository

__all__ = [
    "BodyMeasurementRepository",
]
