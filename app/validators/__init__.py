"""
app/validators package marker.
"""

from app.validators.column_validator import ColumnErrorDetail, VendorColumnValidator
from app.validators.measurement_validator import MeasurementValidator

__all__ = [
    "ColumnErrorDetail",
    "MeasurementValidator",
    "VendorColumnValidator",
]
