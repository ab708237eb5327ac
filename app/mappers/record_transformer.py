"""
app/mappers/record_transformer.py

Converts raw vendor records into canonical measurements.

Vendor dates are ``day/month/two-digit-year``. Two-digit years pivot at 50:
``75`` becomes 1975 and ``24`` becomes 2024. A single malformed date aborts
the whole transform and reports the offending row.
"""

from __future__ import annotations

import math
import re
from datetime import date
from typing import Sequence

from app.domain.failures import FailureCode, StageResult
from app.domain.measurement import (
    CORE_NUMERIC_FIELDS,
    IMPORT_SOURCE_TAG,
    OPTIONAL_NUMERIC_FIELDS,
    CanonicalMeasurement,
    MissingValuePolicy,
    RawScaleRecord,
)

CENTURY_PIVOT = 50

_DECIMAL_COMMA = re.compile(r"[+-]?\d+,\d{1,2}")


class RecordTransformError(ValueError):
    """
    Raised internally for one unparseable row.
    """


def expand_year(raw_year: str) -> int:
    """
    Expand a two-digit vendor year; four-digit years pass through.
    """

    year = int(raw_year)
    if len(raw_year) <= 2:
        return 1900 + year if year >= CENTURY_PIVOT else 2000 + year
    return year


def parse_vendor_date(value: str | None) -> str:
    """
    Convert ``DD/MM/YY`` into an ISO calendar date string.
    """

    if value is None or not value.strip():
        raise RecordTransformError("Missing date")

    raw = value.strip()
    parts = [part.strip() for part in raw.split("/")]
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        raise RecordTransformError(f"Invalid date format: {raw}")

    day, month, year = parts
    if len(year) not in (1, 2, 4):
        raise RecordTransformError(f"Invalid date format: {raw}")

    try:
        parsed = date(expand_year(year), int(month), int(day))
    except ValueError as exc:
        raise RecordTransformError(f"Invalid calendar date: {raw}") from exc
    return parsed.isoformat()


def coerce_number(value: str | None) -> float | None:
    """
    Parse a vendor numeric cell, accepting a decimal comma.

    A comma is read as the decimal separator only when one or two digits
    follow it (``72,5``, ``72,55``). Any other comma, such as the thousands
    separator in ``1,580``, makes the cell non-numeric.

    Returns None for blank, non-numeric and non-finite values.
    """

    if value is None:
        return None
    raw = value.strip()
    if not raw:
        return None
    if "," in raw:
        if not _DECIMAL_COMMA.fullmatch(raw):
            return None
        raw = raw.replace(",", ".")
    try:
        number = float(raw)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


class RecordTransformer:
    """
    Stateless converter from raw vendor records to canonical measurements.
    """

    def __init__(self, *, missing_policy: MissingValuePolicy = MissingValuePolicy.ZERO) -> None:
        self._missing_policy = MissingValuePolicy(missing_policy)

    def transform(self, records: Sequence[RawScaleRecord]) -> StageResult[list[CanonicalMeasurement]]:
        """
        Transform every record, failing on the first row that cannot be converted.
        """

        transformed: list[CanonicalMeasurement] = []
        for index, record in enumerate(records, start=1):
            row_index = record.row_number or index
            try:
                transformed.append(self.transform_record(record))
            except RecordTransformError as exc:
                return StageResult.fail(
                    FailureCode.TRANSFORM_ERROR,
                    f"Failed to transform row {row_index}: {exc}",
                    row_index=row_index,
                    details={"reason": str(exc), "date": record.date},
                )
        return StageResult.success(transformed)

    def transform_record(self, record: RawScaleRecord) -> CanonicalMeasurement:
        core = {
            field_name: coerce_number(getattr(record, field_name)) or 0.0
            for field_name in CORE_NUMERIC_FIELDS
        }
        optional = {
            field_name: self._optional_value(getattr(record, field_name))
            for field_name in OPTIONAL_NUMERIC_FIELDS
        }
        return CanonicalMeasurement(
            date=parse_vendor_date(record.date),
            time=(record.time or "").strip(),
            source=IMPORT_SOURCE_TAG,
            **core,
            **optional,
        )

    def _optional_value(self, value: str | None) -> float | None:
        number = coerce_number(value)
        if number is None and self._missing_policy is MissingValuePolicy.ZERO:
            return 0.0
        return number


_default_transformer = RecordTransformer()


def transform(records: Sequence[RawScaleRecord]) -> StageResult[list[CanonicalMeasurement]]:
    """
    Transform raw records with the default (zero-filling) policy.
    """

    return _default_transformer.transform(records)
