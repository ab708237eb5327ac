"""
app/services/duplicate_grouper.py

Partitions canonical measurements by calendar date.

Time of day is ignored: two readings on the same date are duplicates.
"""

from __future__ import annotations

from typing import Sequence

from app.domain.measurement import CanonicalMeasurement, DuplicateGroup, GroupedMeasurements


def group(records: Sequence[CanonicalMeasurement]) -> GroupedMeasurements:
    """
    Group records by ISO date and list the dates holding more than one record.

    Dates keep their order of first appearance; records keep input order
    within a date.
    """

    buckets: dict[str, list[CanonicalMeasurement]] = {}
    for record in records:
        buckets.setdefault(record.date, []).append(record)

    duplicates = [
        DuplicateGroup(date=measured_on, count=len(bucket))
        for measured_on, bucket in buckets.items()
        if len(bucket) > 1
    ]
    return GroupedMeasurements.from_buckets(buckets, duplicates)
