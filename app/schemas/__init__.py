"""
app/schemas package marker.
"""

from app.schemas.scale_import import (
    DuplicateGroupResponse,
    ImportFailureResponse,
    ImportResultResponse,
    ImportStatisticsResponse,
    MeasurementResponse,
    ParseResultResponse,
    ValidationOutcomeResponse,
)

__all__ = [
    "DuplicateGroupResponse",
    "ImportFailureResponse",
    "ImportResultResponse",
    "ImportStatisticsResponse",
    "MeasurementResponse",
    "ParseResultResponse",
    "ValidationOutcomeResponse",
]
