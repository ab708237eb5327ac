"""
app/schemas/scale_import.py

Response schemas for scale import endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.measurement import (
    CanonicalMeasurement,
    ImportResult,
    ImportStatistics,
    ImportStrategy,
    ParseResult,
    ValidationOutcome,
)


class MeasurementResponse(BaseModel):
    """
    API response model for one canonical measurement.
    """

    model_config = ConfigDict(extra="forbid")

    date: str
    time: str
    weight: float
    bmi: float
    body_fat_percentage: float
    skeletal_muscle_percentage: float | None = None
    fat_free_body_weight: float | None = None
    subcutaneous_fat_percentage: float | None = None
    visceral_fat: float | None = None
    body_water_percentage: float | None = None
    muscle_mass: float | None = None
    bone_mass: float | None = None
    protein_percentage: float | None = None
    basal_metabolic_rate: float | None = None
    metabolic_age: float | None = None
    body_type: float | None = None
    source: str

    @classmethod
    def from_domain(cls, record: CanonicalMeasurement) -> MeasurementResponse:
        return cls(**record.to_dict())


class DuplicateGroupResponse(BaseModel):
    date: str
    count: int = Field(..., ge=2)


class ValidationOutcomeResponse(BaseModel):
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    is_valid: bool

    @classmethod
    def from_domain(cls, outcome: ValidationOutcome) -> ValidationOutcomeResponse:
        return cls(
            errors=list(outcome.errors),
            warnings=list(outcome.warnings),
            is_valid=outcome.is_valid,
        )


class ImportStatisticsResponse(BaseModel):
    total_measurements: int = Field(..., ge=0)
    unique_dates: int = Field(..., ge=0)
    duplicate_dates: int = Field(..., ge=0)
    date_range_start: str | None = None
    date_range_end: str | None = None

    @classmethod
    def from_domain(cls, statistics: ImportStatistics) -> ImportStatisticsResponse:
        start, end = statistics.date_range or (None, None)
        return cls(
            total_measurements=statistics.total_measurements,
            unique_dates=statistics.unique_dates,
            duplicate_dates=statistics.duplicate_dates,
            date_range_start=start,
            date_range_end=end,
        )


class ParseResultResponse(BaseModel):
    """
    API response model for a parsed, validated vendor file.
    """

    summary: str
    validation: ValidationOutcomeResponse
    duplicate_groups: list[DuplicateGroupResponse] = Field(default_factory=list)
    statistics: ImportStatisticsResponse
    strategy: ImportStrategy
    preview: list[MeasurementResponse] = Field(default_factory=list)
    canonical_records: list[MeasurementResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(
        cls,
        parse_result: ParseResult,
        *,
        summary: str,
        statistics: ImportStatistics,
        strategy: ImportStrategy,
        preview: list[CanonicalMeasurement],
    ) -> ParseResultResponse:
        return cls(
            summary=summary,
            validation=ValidationOutcomeResponse.from_domain(parse_result.validation),
            duplicate_groups=[
                DuplicateGroupResponse(date=group.date, count=group.count)
                for group in parse_result.duplicate_groups
            ],
            statistics=ImportStatisticsResponse.from_domain(statistics),
            strategy=strategy,
            preview=[MeasurementResponse.from_domain(record) for record in preview],
            canonical_records=[
                MeasurementResponse.from_domain(record) for record in parse_result.canonical_records
            ],
        )


class ImportResultResponse(BaseModel):
    """
    API response model for a committed import.
    """

    strategy: ImportStrategy
    success_count: int = Field(..., ge=0)
    failure_count: int = Field(..., ge=0)
    errors: list[str] = Field(default_factory=list)
    final_records: list[MeasurementResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, result: ImportResult) -> ImportResultResponse:
        return cls(
            strategy=result.strategy,
            success_count=result.success_count,
            failure_count=result.failure_count,
            errors=list(result.errors),
            final_records=[MeasurementResponse.from_domain(record) for record in result.final_records],
        )


class ImportFailureResponse(BaseModel):
    code: str
    message: str
    row_index: int | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    success_count: int | None = None
    failure_count: int | None = None
