"""
app/domain package marker.
"""

from app.domain.failures import FailureCode, ImportFailure, ScaleImportError, StageResult
from app.domain.measurement import (
    CanonicalMeasurement,
    DuplicateGroup,
    GroupedMeasurements,
    ImportResult,
    ImportStatistics,
    ImportStrategy,
    MissingValuePolicy,
    ParseResult,
    PersistenceReport,
    RawScaleRecord,
    ValidationOutcome,
)
from app.domain.persistence import MeasurementSink, MeasurementSinkError

__all__ = [
    "CanonicalMeasurement",
    "DuplicateGroup",
    "FailureCode",
    "GroupedMeasurements",
    "ImportFailure",
    "ImportResult",
    "ImportStatistics",
    "ImportStrategy",
    "MeasurementSink",
    "MeasurementSinkError",
    "MissingValuePolicy",
    "ParseResult",
    "PersistenceReport",
    "RawScaleRecord",
    "ScaleImportError",
    "StageResult",
    "ValidationOutcome",
]
