"""
app/services/aggregation_service.py

Resolves same-day duplicate readings into the final import set.

Strategies
----------
keep_all
    Every record is returned unmodified, date bucket by date bucket.
average
    One record per date. Numeric fields are the arithmetic mean of that
    date's readings rounded to one decimal place, half away from zero.
    ``basal_metabolic_rate``, ``metabolic_age`` and ``body_type`` round to
    whole numbers. ``time`` is taken from the first reading of the date.

Values that are ``None`` (missing-value policy ``missing``) are left out of
the mean; a field with no values at all stays ``None``.

Output is deterministic for a given grouped input.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Final, Mapping, Sequence

from app.domain.measurement import (
    IMPORT_SOURCE_TAG,
    NUMERIC_FIELDS,
    WHOLE_NUMBER_FIELDS,
    CanonicalMeasurement,
    ImportStrategy,
)

DECIMAL_PLACES: Final[int] = 1
"""Rounding precision for averaged measurement fields."""


def round_half_away_from_zero(value: float, places: int = DECIMAL_PLACES) -> float:
    """
    Round using the shortest decimal representation of *value*.

    ``Decimal`` is built from ``repr`` so 71.25 rounds to 71.3 rather than
    following the binary float's representation error.
    """

    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


class AggregationService:
    """
    Applies an import strategy to measurements grouped by date.

    Parameters
    ----------
    decimal_places:
        Precision for averaged fields outside ``WHOLE_NUMBER_FIELDS``.
    """

    def __init__(self, *, decimal_places: int = DECIMAL_PLACES) -> None:
        self._decimal_places = decimal_places

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def aggregate(
        self,
        by_date: Mapping[str, Sequence[CanonicalMeasurement]],
        strategy: ImportStrategy | str,
    ) -> list[CanonicalMeasurement]:
        """
        Produce the final record list for *strategy*.

        Raises
        ------
        ValueError
            If *strategy* is not a known ``ImportStrategy``.
        """

        resolved = ImportStrategy(strategy)
        if resolved is ImportStrategy.KEEP_ALL:
            return [record for records in by_date.values() for record in records]

        return [
            self.average_day(measured_on, records)
            for measured_on, records in by_date.items()
            if records
        ]

    def average_day(
        self,
        measured_on: str,
        records: Sequence[CanonicalMeasurement],
    ) -> CanonicalMeasurement:
        """
        Collapse one date's readings into a single averaged reading.
        """

        first = records[0]
        averaged: dict[str, float | None] = {}
        for field_name in NUMERIC_FIELDS:
            values = [
                value
                for value in (getattr(record, field_name) for record in records)
                if value is not None
            ]
            averaged[field_name] = self._mean(field_name, values)

        return CanonicalMeasurement(
            date=measured_on,
            time=first.time,
            source=IMPORT_SOURCE_TAG,
            **averaged,
        )

    @staticmethod
    def preview(
        records: Sequence[CanonicalMeasurement],
        limit: int,
    ) -> list[CanonicalMeasurement]:
        """
        Most recent records first, truncated to *limit*.
        """

        ordered = sorted(records, key=lambda record: record.date, reverse=True)
        return ordered[: max(0, limit)]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _mean(self, field_name: str, values: list[float]) -> float | None:
        if not values:
            return None
        mean = math.fsum(values) / len(values)
        places = 0 if field_name in WHOLE_NUMBER_FIELDS else self._decimal_places
        return round_half_away_from_zero(mean, places)


_default_service = AggregationService()


def aggregate(
    by_date: Mapping[str, Sequence[CanonicalMeasurement]],
    strategy: ImportStrategy | str,
) -> list[CanonicalMeasurement]:
    return _default_service.aggregate(by_date, strategy)
