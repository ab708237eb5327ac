"""
tests/test_measurement_validator.py

Pytest unit tests for MeasurementValidator.

All tests pin ``today`` so date checks are deterministic.
"""

from __future__ import annotations

from datetime import date

import pytest

from app.domain.measurement import DuplicateGroup, ValidationOutcome
from app.validators.measurement_validator import MeasurementValidator


@pytest.fixture()
def validator() -> MeasurementValidator:
    return MeasurementValidator()


# ---------------------------------------------------------------------------
# Per-record checks
# ---------------------------------------------------------------------------


class TestRecordChecks:
    def test_clean_record_has_no_findings(self, validator, make_measurement, today) -> None:
        outcome = validator.validate([make_measurement("2024-05-01")], [], today=today)

        assert outcome == ValidationOutcome()
        assert outcome.is_valid

    def test_weight_below_minimum_is_single_error(self, validator, make_measurement, today) -> None:
        outcome = validator.validate([make_measurement("2024-05-01", weight=25.0)], [], today=today)

        assert not outcome.is_valid
        assert outcome.errors == ("Row 1: weight: Minimum weight is 30kg",)

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"weight": 301.0}, "Row 1: weight: Maximum weight is 300kg"),
            ({"bmi": 9.5}, "Row 1: bmi: BMI too low"),
            ({"bmi": 61.0}, "Row 1: bmi: BMI too high"),
            ({"body_fat_percentage": 2.0}, "Row 1: body_fat_percentage: Body fat percentage too low"),
            ({"body_fat_percentage": 71.0}, "Row 1: body_fat_percentage: Body fat percentage too high"),
        ],
    )
    def test_core_range_errors(self, validator, make_measurement, today, overrides, message) -> None:
        outcome = validator.validate([make_measurement("2024-05-01", **overrides)], [], today=today)

        assert message in outcome.errors

    def test_boundaries_are_inclusive(self, validator, make_measurement, today) -> None:
        record = make_measurement("2024-05-01", weight=30.0, bmi=10.0, body_fat_percentage=70.0)

        outcome = validator.validate([record], [], today=today)

        assert outcome.is_valid

    def test_out_of_range_optional_field_is_warning_only(self, validator, make_measurement, today) -> None:
        record = make_measurement("2024-05-01", skeletal_muscle_percentage=150.0)

        outcome = validator.validate([record], [], today=today)

        assert outcome.is_valid
        assert outcome.warnings == ("Row 1: Skeletal muscle percentage (150%) seems unusual",)

    def test_zero_filled_optional_fields_are_reported(self, validator, make_measurement, today) -> None:
        record = make_measurement("2024-05-01", body_water_percentage=0.0, basal_metabolic_rate=0.0)

        outcome = validator.validate([record], [], today=today)

        assert outcome.warnings == (
            "Row 1: Body water percentage (0%) seems unusual",
            "Row 1: BMR (0 kcal) seems unusual",
        )

    def test_missing_optional_fields_are_not_reported(self, validator, make_measurement, today) -> None:
        record = make_measurement("2024-05-01", body_water_percentage=None, visceral_fat=None)

        outcome = validator.validate([record], [], today=today)

        assert outcome.warnings == ()

    @pytest.mark.parametrize("time", ["7:57", "07:57:06", "7:57:06 a.m.", "11:05 PM", "9:30pm"])
    def test_accepted_time_formats(self, validator, make_measurement, today, time) -> None:
        outcome = validator.validate([make_measurement("2024-05-01", time=time)], [], today=today)

        assert outcome.warnings == ()

    def test_unusual_time_is_warning(self, validator, make_measurement, today) -> None:
        outcome = validator.validate([make_measurement("2024-05-01", time="morning")], [], today=today)

        assert outcome.warnings == ("Row 1: Unusual time format: morning",)

    def test_row_numbers_follow_input_position(self, validator, make_measurement, today) -> None:
        records = [make_measurement("2024-05-01"), make_measurement("2024-05-02", bmi=70.0)]

        outcome = validator.validate(records, [], today=today)

        assert outcome.errors == ("Row 2: bmi: BMI too high",)


# ---------------------------------------------------------------------------
# Record-set checks
# ---------------------------------------------------------------------------


class TestRecordSetChecks:
    def test_empty_input_is_error(self, validator, today) -> None:
        outcome = validator.validate([], [], today=today)

        assert outcome.errors == ("No valid measurements found in the CSV file",)
        assert outcome.warnings == ()

    def test_future_date_warning(self, validator, make_measurement, today) -> None:
        outcome = validator.validate([make_measurement("2024-07-01")], [], today=today)

        assert outcome.warnings == ("Found measurements dated in the future (2024-07-01)",)

    def test_very_old_date_within_one_year_span(self, validator, make_measurement, today) -> None:
        records = [make_measurement("2010-01-01"), make_measurement("2010-12-31")]

        outcome = validator.validate(records, [], today=today)

        assert outcome.warnings == ("Found very old measurements (2010-01-01)",)

    def test_span_longer_than_a_year(self, validator, make_measurement, today) -> None:
        records = [make_measurement("2023-01-01"), make_measurement("2024-05-01")]

        outcome = validator.validate(records, [], today=today)

        assert outcome.warnings == ("Data spans 486 days (2023-01-01 to 2024-05-01)",)

    def test_large_weight_variation(self, validator, make_measurement, today) -> None:
        records = [
            make_measurement("2024-05-01", weight=60.0),
            make_measurement("2024-05-02", weight=80.0),
        ]

        outcome = validator.validate(records, [], today=today)

        assert outcome.warnings == ("Large weight variation detected: 60kg to 80kg (33.3%)",)

    def test_inconsistent_bmi_is_counted_once(self, validator, make_measurement, today) -> None:
        records = [
            make_measurement("2024-05-01", bmi=55.0),
            make_measurement("2024-05-02", bmi=55.0),
            make_measurement("2024-05-03"),
        ]

        outcome = validator.validate(records, [], today=today)

        assert outcome.warnings == ("2 measurements have inconsistent BMI calculations",)

    def test_duplicate_summary(self, validator, make_measurement, today) -> None:
        records = [make_measurement("2024-05-01"), make_measurement("2024-05-01")]
        duplicates = [DuplicateGroup(date="2024-05-01", count=2)]

        outcome = validator.validate(records, duplicates, today=today)

        assert outcome.is_valid
        assert outcome.warnings == (
            "Found 1 dates with multiple measurements",
            "2 measurements found for 2024-05-01",
        )

    def test_findings_follow_stage_order(self, validator, make_measurement, today) -> None:
        records = [
            make_measurement("2024-07-01", time="noon"),
            make_measurement("2024-07-01"),
        ]
        duplicates = [DuplicateGroup(date="2024-07-01", count=2)]

        outcome = validator.validate(records, duplicates, today=today)

        assert outcome.warnings == (
            "Row 1: Unusual time format: noon",
            "Found measurements dated in the future (2024-07-01)",
            "Found 1 dates with multiple measurements",
            "2 measurements found for 2024-07-01",
        )

    def test_default_today_is_used_when_not_given(self, validator, make_measurement) -> None:
        outcome = validator.validate([make_measurement(date.today().isoformat())], [])

        assert outcome.is_valid


class TestSummarize:
    def test_valid_outcome(self) -> None:
        assert MeasurementValidator.summarize(ValidationOutcome(), 3) == "Processed 3 records successfully"

    def test_errors_and_warnings(self) -> None:
        outcome = ValidationOutcome(errors=("a",), warnings=("b", "c"))

        assert MeasurementValidator.summarize(outcome, 4) == "Processed 4 records with 1 errors and 2 warnings"
