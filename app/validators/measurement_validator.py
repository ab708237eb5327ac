"""
app/validators/measurement_validator.py

Content validation for canonical measurements.

Validation never raises: every finding is accumulated so the caller can show
all of them at once. Only out-of-range core fields (weight, BMI, body fat %)
and an empty record set are errors; everything else is a warning.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from app.domain.measurement import CanonicalMeasurement, DuplicateGroup, ValidationOutcome

MAX_RECORD_AGE_YEARS = 10
MAX_DATE_SPAN_DAYS = 365
MIN_IMPLIED_HEIGHT_M = 1.2
MAX_IMPLIED_HEIGHT_M = 2.5
MAX_WEIGHT_VARIATION_PERCENT = 30.0

TIME_PATTERN = re.compile(
    r"^(\d{1,2}):(\d{2})(:(\d{2}))?\s*(a\.m\.|p\.m\.|AM|PM)?$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class HardRangeRule:
    field_name: str
    minimum: float
    maximum: float
    below_message: str
    above_message: str


@dataclass(frozen=True)
class AdvisoryRangeRule:
    field_name: str
    minimum: float
    maximum: float
    label: str


HARD_RANGE_RULES: tuple[HardRangeRule, ...] = (
    HardRangeRule("weight", 30, 300, "Minimum weight is 30kg", "Maximum weight is 300kg"),
    HardRangeRule("bmi", 10, 60, "BMI too low", "BMI too high"),
    HardRangeRule(
        "body_fat_percentage",
        3,
        70,
        "Body fat percentage too low",
        "Body fat percentage too high",
    ),
)

ADVISORY_RANGE_RULES: tuple[AdvisoryRangeRule, ...] = (
    AdvisoryRangeRule("skeletal_muscle_percentage", 0, 100, "Skeletal muscle percentage ({value}%)"),
    AdvisoryRangeRule("body_water_percentage", 30, 80, "Body water percentage ({value}%)"),
    AdvisoryRangeRule("visceral_fat", 0, 30, "Visceral fat level ({value})"),
    AdvisoryRangeRule("basal_metabolic_rate", 800, 4000, "BMR ({value} kcal)"),
    AdvisoryRangeRule("metabolic_age", 10, 120, "Metabolic age ({value})"),
)


def format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


class MeasurementValidator:
    """
    Runs range, temporal, consistency and duplicate checks over a record set.
    """

    def validate(
        self,
        records: Sequence[CanonicalMeasurement],
        duplicates: Sequence[DuplicateGroup],
        *,
        today: date | None = None,
    ) -> ValidationOutcome:
        """
        Validate *records* and return every error and warning found.
        """

        outcome = ValidationOutcome()
        if not records:
            return outcome.with_findings(errors=["No valid measurements found in the CSV file"])

        reference_day = today or date.today()

        for row_number, record in enumerate(records, start=1):
            outcome = self._check_record(outcome, record, row_number)
        outcome = self._check_date_range(outcome, records, reference_day)
        outcome = self._check_consistency(outcome, records)
        outcome = self._check_duplicates(outcome, duplicates)
        return outcome

    @staticmethod
    def summarize(outcome: ValidationOutcome, total_records: int) -> str:
        """
        One-line human readable summary of an outcome.
        """

        summary = f"Processed {total_records} records"
        if outcome.is_valid:
            summary += " successfully"
        else:
            summary += f" with {len(outcome.errors)} errors"
        if outcome.warnings:
            summary += f" and {len(outcome.warnings)} warnings"
        return summary

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _check_record(
        self,
        outcome: ValidationOutcome,
        record: CanonicalMeasurement,
        row_number: int,
    ) -> ValidationOutcome:
        errors: list[str] = []
        warnings: list[str] = []

        for rule in HARD_RANGE_RULES:
            value = getattr(record, rule.field_name)
            if value < rule.minimum:
                errors.append(f"Row {row_number}: {rule.field_name}: {rule.below_message}")
            elif value > rule.maximum:
                errors.append(f"Row {row_number}: {rule.field_name}: {rule.above_message}")

        for rule in ADVISORY_RANGE_RULES:
            value = getattr(record, rule.field_name)
            if value is None:
                continue
            if value < rule.minimum or value > rule.maximum:
                label = rule.label.format(value=format_number(value))
                warnings.append(f"Row {row_number}: {label} seems unusual")

        if not TIME_PATTERN.match(record.time.strip()):
            warnings.append(f"Row {row_number}: Unusual time format: {record.time}")

        return outcome.with_findings(errors=errors, warnings=warnings)

    def _check_date_range(
        self,
        outcome: ValidationOutcome,
        records: Sequence[CanonicalMeasurement],
        today: date,
    ) -> ValidationOutcome:
        dates = [date.fromisoformat(record.date) for record in records]
        earliest = min(dates)
        latest = max(dates)
        warnings: list[str] = []

        if latest > today:
            warnings.append(f"Found measurements dated in the future ({latest.isoformat()})")

        if earliest < _years_before(today, MAX_RECORD_AGE_YEARS):
            warnings.append(f"Found very old measurements ({earliest.isoformat()})")

        span_days = (latest - earliest).days
        if span_days > MAX_DATE_SPAN_DAYS:
            warnings.append(
                f"Data spans {span_days} days ({earliest.isoformat()} to {latest.isoformat()})"
            )

        return outcome.with_findings(warnings=warnings)

    def _check_consistency(
        self,
        outcome: ValidationOutcome,
        records: Sequence[CanonicalMeasurement],
    ) -> ValidationOutcome:
        warnings: list[str] = []

        weights = [record.weight for record in records if record.weight > 0]
        if len(weights) > 1:
            lightest = min(weights)
            heaviest = max(weights)
            variation = (heaviest - lightest) / lightest * 100
            if variation > MAX_WEIGHT_VARIATION_PERCENT:
                warnings.append(
                    "Large weight variation detected: "
                    f"{format_number(lightest)}kg to {format_number(heaviest)}kg ({variation:.1f}%)"
                )

        inconsistent = 0
        for record in records:
            if record.weight <= 0 or record.bmi <= 0:
                continue
            implied_height = math.sqrt(record.weight / record.bmi)
            if implied_height < MIN_IMPLIED_HEIGHT_M or implied_height > MAX_IMPLIED_HEIGHT_M:
                inconsistent += 1
        if inconsistent:
            warnings.append(f"{inconsistent} measurements have inconsistent BMI calculations")

        return outcome.with_findings(warnings=warnings)

    @staticmethod
    def _check_duplicates(
        outcome: ValidationOutcome,
        duplicates: Sequence[DuplicateGroup],
    ) -> ValidationOutcome:
        if not duplicates:
            return outcome
        warnings = [f"Found {len(duplicates)} dates with multiple measurements"]
        warnings.extend(f"{group.count} measurements found for {group.date}" for group in duplicates)
        return outcome.with_findings(warnings=warnings)


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # 29 February in a non-leap target year.
        return day.replace(year=day.year - years, day=28)


_default_validator = MeasurementValidator()


def validate(
    records: Sequence[CanonicalMeasurement],
    duplicates: Sequence[DuplicateGroup],
    *,
    today: date | None = None,
) -> ValidationOutcome:
    return _default_validator.validate(records, duplicates, today=today)
