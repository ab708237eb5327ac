"""
app/domain/persistence.py

Contract for the collaborator that stores imported measurements.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from app.domain.measurement import CanonicalMeasurement, PersistenceReport


class MeasurementSinkError(RuntimeError):
    """
    Raised when a sink cannot finish storing a batch.

    ``success_count`` is the number of records the sink had already stored
    durably before failing.
    """

    def __init__(self, message: str, *, success_count: int = 0) -> None:
        super().__init__(message)
        self.success_count = max(0, success_count)


class MeasurementSink(Protocol):
    def save_batch(self, records: Sequence[CanonicalMeasurement]) -> PersistenceReport:
        ...
