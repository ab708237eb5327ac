"""
app/services package marker.
"""

from app.services.aggregation_service import AggregationService
from app.services.scale_import_service import ScaleImportService, get_scale_import_service

__all__ = [
    "AggregationService",
    "ScaleImportService",
    "get_scale_import_service",
]
