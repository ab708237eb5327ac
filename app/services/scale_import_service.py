"""
app/services/scale_import_service.py

Service layer for scale measurement import orchestration.

``parse`` runs, in order:

    1. VendorFieldMapper.decode()       - header check and typed raw rows
    2. RecordTransformer.transform()    - canonical measurements
    3. duplicate_grouper.group()        - per-date buckets and duplicates
    4. MeasurementValidator.validate()  - errors and warnings

Steps 1-3 stop at the first structural failure. Validation always completes,
so a ParseResult is produced even when it holds errors.

``commit_import`` refuses invalid parse results, applies the strategy and
hands the final records to a persistence sink. Sink failures are reported,
never retried.
"""

from __future__ import annotations

import logging
from datetime import date
from functools import lru_cache
from pathlib import PurePath

from app.config import get_scale_import_settings
from app.domain.failures import FailureCode, StageResult
from app.domain.measurement import (
    CanonicalMeasurement,
    ImportResult,
    ImportStatistics,
    ImportStrategy,
    MissingValuePolicy,
    ParseResult,
)
from app.domain.persistence import MeasurementSink, MeasurementSinkError
from app.logging_utils import log_event, log_failure
from app.mappers.record_transformer import RecordTransformer
from app.mappers.vendor_field_mapper import VendorFieldMapper
from app.services.aggregation_service import AggregationService
from app.services.duplicate_grouper import group as group_by_date
from app.validators.measurement_validator import MeasurementValidator

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS: frozenset[str] = frozenset({".csv"})


class ScaleImportService:
    """
    Coordinates decoding, transformation, grouping, validation and commit.
    """

    def __init__(
        self,
        *,
        max_file_size_bytes: int,
        missing_value_policy: MissingValuePolicy = MissingValuePolicy.ZERO,
        preview_limit: int = 5,
        log_validation_findings: bool = True,
        mapper: VendorFieldMapper | None = None,
        transformer: RecordTransformer | None = None,
        aggregator: AggregationService | None = None,
        validator: MeasurementValidator | None = None,
    ) -> None:
        self._max_file_size_bytes = max(1, max_file_size_bytes)
        self._preview_limit = max(1, preview_limit)
        self._log_validation_findings = log_validation_findings
        self._mapper = mapper or VendorFieldMapper()
        self._transformer = transformer or RecordTransformer(missing_policy=missing_value_policy)
        self._aggregator = aggregator or AggregationService()
        self._validator = validator or MeasurementValidator()

    @property
    def max_file_size_bytes(self) -> int:
        return self._max_file_size_bytes

    # ------------------------------------------------------------------
    # Boundary checks
    # ------------------------------------------------------------------

    def check_file(self, *, filename: str | None, size: int) -> StageResult[None]:
        """
        Reject files with the wrong extension, no content or too many bytes.
        """

        suffix = PurePath((filename or "").strip()).suffix.lower()
        if suffix not in ALLOWED_EXTENSIONS:
            return StageResult.fail(
                FailureCode.INVALID_FILE,
                "Invalid file type. Please select a CSV file.",
                details={"filename": filename},
            )
        if size <= 0:
            return StageResult.fail(
                FailureCode.INVALID_FILE,
                "Selected file is empty.",
                details={"filename": filename},
            )
        if size > self._max_file_size_bytes:
            max_mb = round(self._max_file_size_bytes / (1024 * 1024), 1)
            return StageResult.fail(
                FailureCode.INVALID_FILE,
                f"File size too large. Maximum allowed size is {max_mb:g}MB.",
                details={"filename": filename, "size": size, "max_size": self._max_file_size_bytes},
            )
        return StageResult.success(None)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def parse(
        self,
        content: bytes | str,
        *,
        filename: str | None = None,
        today: date | None = None,
    ) -> StageResult[ParseResult]:
        """
        Decode, transform, group and validate one vendor file.

        When ``filename`` is given the boundary file checks run first.
        """

        if filename is not None:
            size = len(content.encode("utf-8")) if isinstance(content, str) else len(content)
            checked = self.check_file(filename=filename, size=size)
            if checked.failure is not None:
                log_failure(logger, "check_file", checked.failure)
                return StageResult(failure=checked.failure)

        decoded = self._mapper.decode(content)
        if decoded.failure is not None:
            log_failure(logger, "decode", decoded.failure)
            return StageResult(failure=decoded.failure)
        raw_records = decoded.value or []

        transformed = self._transformer.transform(raw_records)
        if transformed.failure is not None:
            log_failure(logger, "transform", transformed.failure)
            return StageResult(failure=transformed.failure)
        canonical_records = transformed.value or []

        grouped = group_by_date(canonical_records)
        validation = self._validator.validate(canonical_records, grouped.duplicates, today=today)

        if self._log_validation_findings:
            for message in validation.errors:
                logger.warning("Scale import validation error: %s", message)
            for message in validation.warnings:
                logger.info("Scale import validation warning: %s", message)

        log_event(
            logger,
            logging.INFO,
            "scale_import.parsed",
            filename=filename,
            records=len(canonical_records),
            unique_dates=len(grouped.by_date),
            duplicate_dates=len(grouped.duplicates),
            errors=len(validation.errors),
            warnings=len(validation.warnings),
        )

        return StageResult.success(
            ParseResult(
                raw_records=tuple(raw_records),
                canonical_records=tuple(canonical_records),
                grouped_by_date=grouped.by_date,
                duplicate_groups=grouped.duplicates,
                validation=validation,
            )
        )

    def commit_import(
        self,
        parse_result: ParseResult,
        strategy: ImportStrategy | str,
        sink: MeasurementSink,
    ) -> StageResult[ImportResult]:
        """
        Aggregate a validated parse result and persist it through *sink*.
        """

        resolved_strategy = ImportStrategy(strategy)
        if not parse_result.validation.is_valid:
            blocked = StageResult.fail(
                FailureCode.VALIDATION_BLOCKED,
                "Cannot import data with validation errors. Please fix the errors first.",
                details={"errors": list(parse_result.validation.errors)},
            )
            log_failure(logger, "commit", blocked.failure)  # type: ignore[arg-type]
            return blocked

        final_records = tuple(self._final_records(parse_result, resolved_strategy))

        try:
            report = sink.save_batch(final_records)
        except MeasurementSinkError as exc:
            success_count = min(exc.success_count, len(final_records))
            partial = ImportResult(
                strategy=resolved_strategy,
                success_count=success_count,
                failure_count=len(final_records) - success_count,
                errors=(str(exc),),
                final_records=final_records,
            )
            failed = StageResult.fail(
                FailureCode.PERSISTENCE_FAILURE,
                f"Import failed: {exc}",
                details={"records": len(final_records)},
                partial_result=partial,
            )
            log_failure(logger, "persist", failed.failure)  # type: ignore[arg-type]
            return failed

        result = ImportResult(
            strategy=resolved_strategy,
            success_count=report.success_count,
            failure_count=report.failure_count,
            errors=tuple(report.errors),
            final_records=final_records,
        )
        log_event(
            logger,
            logging.INFO,
            "scale_import.committed",
            strategy=resolved_strategy.value,
            success_count=result.success_count,
            failure_count=result.failure_count,
        )
        return StageResult.success(result)

    # ------------------------------------------------------------------
    # Read-only helpers for callers rendering a parse result
    # ------------------------------------------------------------------

    @staticmethod
    def statistics(parse_result: ParseResult) -> ImportStatistics:
        records = parse_result.canonical_records
        if not records:
            return ImportStatistics(total_measurements=0, unique_dates=0, duplicate_dates=0)

        dates = sorted(record.date for record in records)
        return ImportStatistics(
            total_measurements=len(records),
            unique_dates=len(set(dates)),
            duplicate_dates=len(parse_result.duplicate_groups),
            date_range=(dates[0], dates[-1]),
        )

    def preview(
        self,
        parse_result: ParseResult,
        strategy: ImportStrategy | str,
        limit: int | None = None,
    ) -> list[CanonicalMeasurement]:
        """
        Records the given strategy would import, most recent first.
        """

        records = self._final_records(parse_result, ImportStrategy(strategy))
        return self._aggregator.preview(records, self._preview_limit if limit is None else limit)

    def summarize(self, parse_result: ParseResult) -> str:
        return self._validator.summarize(parse_result.validation, len(parse_result.canonical_records))

    def _final_records(
        self,
        parse_result: ParseResult,
        strategy: ImportStrategy,
    ) -> list[CanonicalMeasurement]:
        # keep_all preserves file order across dates.
        if strategy is ImportStrategy.KEEP_ALL:
            return list(parse_result.canonical_records)
        return self._aggregator.aggregate(parse_result.grouped_by_date, strategy)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_scale_import_service() -> ScaleImportService:
    """
    Build and cache the import service with env-driven settings.
    """
    settings = get_scale_import_settings()
    return ScaleImportService(
        max_file_size_bytes=settings.max_file_size_bytes,
        missing_value_policy=settings.missing_value_policy,
        preview_limit=settings.preview_limit,
        log_validation_findings=settings.log_validation_findings,
    )
