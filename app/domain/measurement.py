"""
app/domain/measurement.py

Domain models used by the scale measurement import flow.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

IMPORT_SOURCE_TAG = "renpho_import"

CORE_NUMERIC_FIELDS: tuple[str, ...] = (
    "weight",
    "bmi",
    "body_fat_percentage",
)

OPTIONAL_NUMERIC_FIELDS: tuple[str, ...] = (
    "skeletal_muscle_percentage",
    "fat_free_body_weight",
    "subcutaneous_fat_percentage",
    "visceral_fat",
    "body_water_percentage",
    "muscle_mass",
    "bone_mass",
    "protein_percentage",
    "basal_metabolic_rate",
    "metabolic_age",
    "body_type",
)

NUMERIC_FIELDS: tuple[str, ...] = CORE_NUMERIC_FIELDS + OPTIONAL_NUMERIC_FIELDS

# Averaged to whole numbers instead of one decimal place.
WHOLE_NUMBER_FIELDS: frozenset[str] = frozenset(
    {"basal_metabolic_rate", "metabolic_age", "body_type"}
)


class ImportStrategy(str, Enum):
    """
    Policy for resolving same-day duplicate readings.
    """

    KEEP_ALL = "keep_all"
    AVERAGE = "average"


class MissingValuePolicy(str, Enum):
    """
    Representation of optional numeric fields absent from a vendor row.
    """

    ZERO = "zero"
    MISSING = "missing"


@dataclass(frozen=True)
class RawScaleRecord:
    """
    One decoded vendor row, keyed by canonical field name.

    Values are the raw cell text; ``None`` means the column is absent or the
    cell is blank.
    """

    row_number: int
    date: str | None
    time: str | None
    weight: str | None
    bmi: str | None
    body_fat_percentage: str | None
    skeletal_muscle_percentage: str | None = None
    fat_free_body_weight: str | None = None
    subcutaneous_fat_percentage: str | None = None
    visceral_fat: str | None = None
    body_water_percentage: str | None = None
    muscle_mass: str | None = None
    bone_mass: str | None = None
    protein_percentage: str | None = None
    basal_metabolic_rate: str | None = None
    metabolic_age: str | None = None
    body_type: str | None = None
    source_row: Mapping[str, str | None] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class CanonicalMeasurement:
    """
    Normalized scale reading ready for validation and persistence.
    """

    date: str
    time: str
    weight: float
    bmi: float
    body_fat_percentage: float
    skeletal_muscle_percentage: float | None = 0.0
    fat_free_body_weight: float | None = 0.0
    subcutaneous_fat_percentage: float | None = 0.0
    visceral_fat: float | None = 0.0
    body_water_percentage: float | None = 0.0
    muscle_mass: float | None = 0.0
    bone_mass: float | None = 0.0
    protein_percentage: float | None = 0.0
    basal_metabolic_rate: float | None = 0.0
    metabolic_age: float | None = 0.0
    body_type: float | None = 0.0
    source: str = IMPORT_SOURCE_TAG

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DuplicateGroup:
    """
    A calendar date carrying more than one reading.
    """

    date: str
    count: int


@dataclass(frozen=True)
class GroupedMeasurements:
    """
    Measurements partitioned by ISO date.
    """

    by_date: Mapping[str, tuple[CanonicalMeasurement, ...]]
    duplicates: tuple[DuplicateGroup, ...] = ()

    @classmethod
    def from_buckets(
        cls,
        buckets: Mapping[str, list[CanonicalMeasurement]],
        duplicates: list[DuplicateGroup],
    ) -> GroupedMeasurements:
        frozen = {date: tuple(records) for date, records in buckets.items()}
        return cls(by_date=MappingProxyType(frozen), duplicates=tuple(duplicates))


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Accumulated validation findings.

    Errors block the import; warnings are informational.
    """

    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def with_findings(
        self,
        *,
        errors: list[str] | tuple[str, ...] = (),
        warnings: list[str] | tuple[str, ...] = (),
    ) -> ValidationOutcome:
        """
        Return a new outcome with the given findings appended.
        """

        return ValidationOutcome(
            errors=self.errors + tuple(item for item in errors if item),
            warnings=self.warnings + tuple(item for item in warnings if item),
        )


@dataclass(frozen=True)
class ParseResult:
    """
    Everything produced by one parse of a vendor file.
    """

    raw_records: tuple[RawScaleRecord, ...]
    canonical_records: tuple[CanonicalMeasurement, ...]
    grouped_by_date: Mapping[str, tuple[CanonicalMeasurement, ...]]
    duplicate_groups: tuple[DuplicateGroup, ...]
    validation: ValidationOutcome


@dataclass(frozen=True)
class ImportResult:
    """
    Terminal outcome of one import attempt.
    """

    strategy: ImportStrategy
    success_count: int
    failure_count: int
    errors: tuple[str, ...] = ()
    final_records: tuple[CanonicalMeasurement, ...] = ()


@dataclass(frozen=True)
class PersistenceReport:
    """
    Per-batch counts reported back by a persistence collaborator.
    """

    success_count: int
    failure_count: int = 0
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class ImportStatistics:
    total_measurements: int
    unique_dates: int
    duplicate_dates: int
    date_range: tuple[str, str] | None = None
