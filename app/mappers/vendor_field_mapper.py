"""
app/mappers/vendor_field_mapper.py

Decodes vendor CSV content into typed raw scale records.

Columns are resolved by exact vendor name first and then by a normalized
form, so exports whose headers lost their leading whitespace still resolve.
No value ranges are checked here.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from app.domain.failures import FailureCode, StageResult
from app.domain.measurement import RawScaleRecord
from app.validators.column_validator import VendorColumnValidator

logger = logging.getLogger(__name__)

VENDOR_COLUMNS: dict[str, str] = {
    "date": "Fecha",
    "time": " Hora",
    "weight": " Peso(kg)",
    "bmi": "IMC",
    "body_fat_percentage": "Grasa corporal(%)",
    "skeletal_muscle_percentage": "Músculo esquelético(%)",
    "fat_free_body_weight": "Peso corporal sin grasa(kg)",
    "subcutaneous_fat_percentage": "Grasa subcutánea(%)",
    "visceral_fat": "Grasa visceral",
    "body_water_percentage": "Agua corporal(%)",
    "muscle_mass": "Masa muscular(kg)",
    "bone_mass": "Masa ósea(kg)",
    "protein_percentage": "Proteína (%)",
    "basal_metabolic_rate": "Tasa Metabólica Basal(kcal)",
    "metabolic_age": "Edad metabólica",
    "body_type": "Tipo de cuerpo",
}

REQUIRED_FIELDS: tuple[str, ...] = (
    "date",
    "time",
    "weight",
    "bmi",
    "body_fat_percentage",
)

CANDIDATE_DELIMITERS: tuple[str, ...] = (",", ";", "\t", "|")


def normalize_header(header: str) -> str:
    """
    Normalize a column name for flexible matching.
    """

    return "".join(ch for ch in header.strip().lower() if ch.isalnum())


@dataclass(frozen=True)
class ColumnResolution:
    """
    Resolved mapping between canonical fields and the file's headers.
    """

    canonical_to_source: dict[str, str]
    source_headers: tuple[str, ...]
    match_strategies: dict[str, str]


class VendorFieldMapper:
    """
    Maps vendor CSV rows onto the canonical raw record schema.
    """

    def __init__(
        self,
        *,
        vendor_columns: Mapping[str, str] | None = None,
        required_fields: Sequence[str] = REQUIRED_FIELDS,
        validator: VendorColumnValidator | None = None,
    ) -> None:
        self._vendor_columns = dict(vendor_columns or VENDOR_COLUMNS)
        self._required_fields = tuple(required_fields)
        self._validator = validator or VendorColumnValidator(
            required_fields=self._required_fields,
            vendor_columns=self._vendor_columns,
        )

    def decode(self, content: bytes | str) -> StageResult[list[RawScaleRecord]]:
        """
        Decode delimited text with a header row into raw scale records.
        """

        if isinstance(content, (bytes, bytearray)):
            try:
                text = bytes(content).decode("utf-8-sig")
            except UnicodeDecodeError:
                return StageResult.fail(FailureCode.INVALID_FORMAT, "CSV must be UTF-8 encoded.")
        else:
            text = content.lstrip("\ufeff")

        if not text.strip():
            return StageResult.fail(FailureCode.EMPTY_INPUT, "CSV file is empty.")

        delimiter = self._detect_delimiter(text)
        reader = csv.DictReader(io.StringIO(text, newline=""), delimiter=delimiter)

        try:
            headers = [header for header in (reader.fieldnames or []) if header is not None]
            if not any(header.strip() for header in headers):
                return StageResult.fail(FailureCode.INVALID_FORMAT, "CSV header row is missing.")

            resolution = self.resolve_columns(headers)
            errors = self._validator.validate(
                mapping=resolution.canonical_to_source,
                source_headers=resolution.source_headers,
            )
            if errors:
                missing = self._validator.missing_columns(errors)
                return StageResult.fail(
                    FailureCode.INVALID_FORMAT,
                    f"Missing required columns: {', '.join(missing) or 'unknown'}.",
                    details={
                        "missing_columns": missing,
                        "errors": [error.to_dict() for error in errors],
                    },
                )

            records: list[RawScaleRecord] = []
            for raw_row in reader:
                if self.is_completely_empty_row(raw_row):
                    continue
                records.append(
                    self.map_row(
                        raw_row=raw_row,
                        resolution=resolution,
                        row_number=len(records) + 1,
                    )
                )
        except csv.Error as exc:
            return StageResult.fail(FailureCode.INVALID_FORMAT, f"Invalid CSV format: {exc}")

        if not records:
            return StageResult.fail(FailureCode.EMPTY_INPUT, "No data rows found in CSV file.")

        normalized_matches = sorted(
            field_name
            for field_name, strategy in resolution.match_strategies.items()
            if strategy == "normalized"
        )
        logger.debug(
            "Decoded %d vendor rows delimiter=%r normalized_columns=%s",
            len(records),
            delimiter,
            ",".join(normalized_matches) or "-",
        )
        return StageResult.success(records)

    def resolve_columns(self, headers: Sequence[str]) -> ColumnResolution:
        """
        Resolve canonical-to-source mapping, exact vendor names first.
        """

        source_headers = tuple(headers)
        header_set = set(source_headers)
        normalized_lookup: dict[str, str] = {}
        for header in source_headers:
            normalized = normalize_header(header)
            if normalized and normalized not in normalized_lookup:
                normalized_lookup[normalized] = header

        resolved: dict[str, str] = {}
        strategies: dict[str, str] = {}
        for canonical_field, vendor_name in self._vendor_columns.items():
            if vendor_name in header_set:
                resolved[canonical_field] = vendor_name
                strategies[canonical_field] = "exact"
                continue
            match = normalized_lookup.get(normalize_header(vendor_name))
            if match is not None and match not in resolved.values():
                resolved[canonical_field] = match
                strategies[canonical_field] = "normalized"

        return ColumnResolution(
            canonical_to_source=resolved,
            source_headers=source_headers,
            match_strategies=strategies,
        )

    def map_row(
        self,
        *,
        raw_row: Mapping[str | None, Any],
        resolution: ColumnResolution,
        row_number: int,
    ) -> RawScaleRecord:
        """
        Convert one source row into a typed raw record.
        """

        values: dict[str, str | None] = {
            canonical_field: self._clean_cell(raw_row.get(source_column))
            for canonical_field, source_column in resolution.canonical_to_source.items()
        }
        source_row = {
            key: value
            for key, value in raw_row.items()
            if isinstance(key, str) and (value is None or isinstance(value, str))
        }
        return RawScaleRecord(row_number=row_number, source_row=source_row, **values)

    @staticmethod
    def is_completely_empty_row(row: Mapping[Any, Any]) -> bool:
        """
        Return True when all values in the row are empty or whitespace.
        """

        for value in row.values():
            if isinstance(value, list):
                if any(str(item).strip() for item in value):
                    return False
            elif value is not None and str(value).strip():
                return False
        return True

    @staticmethod
    def _clean_cell(value: Any) -> str | None:
        if value is None:
            return None
        text = str(value)
        return text if text.strip() else None

    @staticmethod
    def _detect_delimiter(text: str) -> str:
        header_line = next((line for line in text.splitlines() if line.strip()), "")
        counts = {delimiter: header_line.count(delimiter) for delimiter in CANDIDATE_DELIMITERS}
        best = max(CANDIDATE_DELIMITERS, key=lambda delimiter: counts[delimiter])
        return best if counts[best] > 0 else ","


_default_mapper = VendorFieldMapper()


def decode(content: bytes | str) -> StageResult[list[RawScaleRecord]]:
    """
    Decode vendor CSV content with the default column schema.
    """

    return _default_mapper.decode(content)
